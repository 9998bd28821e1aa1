"""Folio content to markup serializers."""

from __future__ import annotations

import html
from typing import Protocol

from ..core.model import Folio
from .types import ExportOptions


class FolioSerializer(Protocol):
    """Produce the markup submitted for one folio."""

    def __call__(self, folio: Folio, options: ExportOptions) -> str:
        ...


class PlainTextSerializer:
    """Serialize plain folio text as escaped paragraphs.

    Each non-blank line becomes a ``<p>``; an image folio contributes an
    ``<img>`` ahead of its text. Slot markers such as ``{{ slot-1 }}`` pass
    through untouched for the backend to substitute.
    """

    def __call__(self, folio: Folio, options: ExportOptions) -> str:
        parts: list[str] = []
        if folio.image_data_url:
            alt = f"Page {folio.source_page_number or folio.index + 1}"
            parts.append(f'<img src="{html.escape(folio.image_data_url)}" alt="{alt}" />')
        for line in folio.content.splitlines():
            if line.strip():
                parts.append(f"<p>{html.escape(line, quote=False)}</p>")
        return f'<div class="editor-content">{"".join(parts)}</div>'


__all__ = ["FolioSerializer", "PlainTextSerializer"]
