"""Turn extracted PDF pages into folios."""

from __future__ import annotations

import html
import random
import string
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from ..core.model import Folio, FolioContentType, Orientation
from ..core.utils import get_logger
from .extractor import ExtractedPage
from .text import SCANNED_MIN_CHARACTERS

LOGGER = get_logger("foliokit.pdf_import.folios")

_ID_ALPHABET = string.digits + string.ascii_lowercase


class ScannedPageMode(str, Enum):
    """How pages classified as scanned become folios."""

    IMAGE = "image"
    PLACEHOLDER = "placeholder"
    SKIP = "skip"


def generate_folio_id() -> str:
    """Return ``folio-<epoch ms>-<7 base36 chars>``."""

    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(7))
    return f"folio-{int(time.time() * 1000)}-{suffix}"


@dataclass(frozen=True)
class FolioCreationOptions:
    scanned_page_mode: ScannedPageMode = ScannedPageMode.IMAGE
    min_text_length: int = SCANNED_MIN_CHARACTERS
    id_generator: Callable[[], str] = generate_folio_id
    start_index: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.scanned_page_mode, ScannedPageMode):
            object.__setattr__(self, "scanned_page_mode", ScannedPageMode(self.scanned_page_mode))


DEFAULT_FOLIO_OPTIONS = FolioCreationOptions()


class FolioCreator:
    """Create one folio per extracted page.

    Scanned pages follow :attr:`FolioCreationOptions.scanned_page_mode`: in
    ``skip`` mode they produce no folio, so the folio list may be shorter
    than the page list. Folio indices stay positional and therefore leave a
    gap for every skipped page.
    """

    def __init__(self, options: FolioCreationOptions | None = None, **overrides: Any) -> None:
        base = options or DEFAULT_FOLIO_OPTIONS
        self.options = replace(base, **overrides) if overrides else base

    def create_folios(self, pages: Sequence[ExtractedPage]) -> list[Folio]:
        folios: list[Folio] = []
        for offset, page in enumerate(pages):
            folio = self._create_folio(page, self.options.start_index + offset)
            if folio is None:
                LOGGER.debug("Skipping scanned page %s", page.page_number)
                continue
            folios.append(folio)
        LOGGER.info("Created %s folios from %s pages", len(folios), len(pages))
        return folios

    def _create_folio(self, page: ExtractedPage, index: int) -> Folio | None:
        has_text = len(page.text_content) >= self.options.min_text_length
        has_image = bool(page.image_data_url)
        content = ""
        image_data_url: str | None = None

        if page.is_scanned:
            mode = self.options.scanned_page_mode
            if mode is ScannedPageMode.SKIP:
                return None
            if mode is ScannedPageMode.PLACEHOLDER:
                content_type = FolioContentType.TEXT
                content = f"[Page {page.page_number} - Scanned content]"
            else:
                content_type = FolioContentType.IMAGE
                content = page.text_content
                image_data_url = page.image_data_url
        elif has_text and has_image:
            content_type = FolioContentType.MIXED
            content = page.text_content
            image_data_url = page.image_data_url
        elif has_text:
            content_type = FolioContentType.TEXT
            content = page.text_content
        elif has_image:
            content_type = FolioContentType.IMAGE
            image_data_url = page.image_data_url
        else:
            content_type = FolioContentType.TEXT

        return Folio(
            id=self.options.id_generator(),
            index=index,
            orientation=page.orientation,
            content=content,
            content_type=content_type,
            image_data_url=image_data_url,
            source_page_number=page.page_number,
            width=page.width,
            height=page.height,
        )


def get_folio_summary(folios: Iterable[Folio]) -> dict[str, int]:
    items = list(folios)
    return {
        "total": len(items),
        "portrait": sum(1 for f in items if f.orientation is Orientation.PORTRAIT),
        "landscape": sum(1 for f in items if f.orientation is Orientation.LANDSCAPE),
        "textBased": sum(1 for f in items if f.content_type is FolioContentType.TEXT),
        "imageBased": sum(1 for f in items if f.content_type is FolioContentType.IMAGE),
        "mixed": sum(1 for f in items if f.content_type is FolioContentType.MIXED),
    }


def folios_to_html(folios: Sequence[Folio], limit: int | None = None) -> str:
    """Render a preview of the first ``limit`` folios (all when ``None``)."""

    parts: list[str] = []
    for folio in folios[:limit]:
        page = folio.source_page_number if folio.source_page_number is not None else folio.index + 1
        parts.append(f'<div class="folio-preview" data-page="{page}">')
        parts.append(f'<div class="folio-header">Page {page} ({folio.orientation.value})</div>')
        if folio.content_type is FolioContentType.IMAGE and folio.image_data_url:
            parts.append(
                f'<img src="{html.escape(folio.image_data_url)}" alt="Page {page}" style="max-width: 100%;" />'
            )
        if folio.content:
            escaped = html.escape(folio.content, quote=False).replace("\n", "<br>")
            parts.append(f'<div class="folio-text">{escaped}</div>')
        parts.append("</div>")
    return "\n".join(parts)


def create_folios_from_pages(pages: Sequence[ExtractedPage], **options: Any) -> list[Folio]:
    return FolioCreator(**options).create_folios(pages)


__all__ = [
    "DEFAULT_FOLIO_OPTIONS",
    "FolioCreationOptions",
    "FolioCreator",
    "ScannedPageMode",
    "create_folios_from_pages",
    "folios_to_html",
    "generate_folio_id",
    "get_folio_summary",
]
