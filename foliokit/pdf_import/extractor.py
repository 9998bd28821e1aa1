"""PDF import: geometry, positioned text and optional page images.

The import contract distinguishes two failure scopes. Failing to open the
document (corrupt stream, wrong password) produces an unsuccessful
:class:`PdfImportResult` with no pages. Failing on a single page records a
warning and omits that page while the rest of the import proceeds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import IO, Any, Callable, Sequence, Union

from pypdf import PageObject, PdfReader, PasswordType
from pypdf.generic import ArrayObject, DictionaryObject, NameObject

from ..core.exceptions import DocumentOpenError, IncorrectPasswordError, PageExtractionError
from ..core.model import Orientation, PageRange
from ..core.utils import get_logger
from .metadata import PdfDocumentMetadata, metadata_from_info
from .raster import PageRasterizer, PageRenderer, PdfiumRasterizer
from .text import TextItem, is_scanned_page, reconstruct_text

LOGGER = get_logger("foliokit.pdf_import")

PdfSource = Union[bytes, bytearray, memoryview, str, Path, IO[bytes]]
ProgressCallback = Callable[[int, int], None]
Matrix = Sequence[float]

# Average glyph advance, in em, when a font carries no /Widths table.
_FALLBACK_GLYPH_WIDTH = 0.5


@dataclass(frozen=True)
class ImportOptions:
    """Options controlling :meth:`PdfImportService.import_pdf`."""

    extract_text: bool = True
    render_as_images: bool = False
    image_scale: float = 1.5
    page_range: PageRange | None = None
    use_ocr: bool = False
    password: str | None = None


DEFAULT_IMPORT_OPTIONS = ImportOptions()


@dataclass(frozen=True)
class ExtractedPage:
    """Everything recovered from one PDF page."""

    page_number: int
    width: float
    height: float
    orientation: Orientation
    text_content: str = ""
    text_items: tuple[TextItem, ...] = ()
    image_data_url: str | None = None
    is_scanned: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "pageNumber": self.page_number,
            "width": self.width,
            "height": self.height,
            "orientation": self.orientation.value,
            "textContent": self.text_content,
            "textItems": [item.to_dict() for item in self.text_items],
            "isScanned": self.is_scanned,
        }
        if self.image_data_url is not None:
            payload["imageDataUrl"] = self.image_data_url
        return payload


@dataclass
class PdfImportResult:
    success: bool
    total_pages: int
    pages: list[ExtractedPage] = field(default_factory=list)
    metadata: PdfDocumentMetadata | None = None
    error: str | None = None
    warnings: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "totalPages": self.total_pages,
            "pages": [page.to_dict() for page in self.pages],
        }
        if self.metadata is not None:
            payload["metadata"] = self.metadata.to_dict()
        if self.error is not None:
            payload["error"] = self.error
        if self.warnings:
            payload["warnings"] = list(self.warnings)
        return payload


def read_source(source: PdfSource) -> bytes:
    """Return the raw bytes of ``source``."""

    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return Path(source).expanduser().read_bytes()
    if hasattr(source, "read"):
        return source.read()
    raise TypeError(f"Unsupported PDF source: {type(source).__name__}")


def open_reader(data: bytes, password: str | None = None) -> PdfReader:
    """Open ``data`` with pypdf, decrypting it when necessary."""

    try:
        reader = PdfReader(BytesIO(data))
    except Exception as exc:
        raise DocumentOpenError(f"Invalid or corrupted PDF file: {exc}") from exc
    if reader.is_encrypted:
        try:
            outcome = reader.decrypt(password or "")
        except Exception as exc:
            raise DocumentOpenError(f"Unable to decrypt PDF: {exc}") from exc
        if outcome == PasswordType.NOT_DECRYPTED:
            raise IncorrectPasswordError()
    return reader


def _matrix_multiply(m1: Matrix, m2: Matrix) -> tuple[float, float, float, float, float, float]:
    a1, b1, c1, d1, e1, f1 = (float(v) for v in m1)
    a2, b2, c2, d2, e2, f2 = (float(v) for v in m2)
    return (
        a1 * a2 + b1 * c2,
        a1 * b2 + b1 * d2,
        c1 * a2 + d1 * c2,
        c1 * b2 + d1 * d2,
        e1 * a2 + f1 * c2 + e2,
        e1 * b2 + f1 * d2 + f2,
    )


def _font_name(font_dict: DictionaryObject | None) -> str:
    if not isinstance(font_dict, DictionaryObject):
        return ""
    base_font = font_dict.get(NameObject("/BaseFont"))
    if base_font is None:
        return ""
    name = str(base_font)
    return name[1:] if name.startswith("/") else name


def _text_width(text: str, font_dict: DictionaryObject | None, font_size: float) -> float:
    estimate = len(text) * font_size * _FALLBACK_GLYPH_WIDTH
    if not isinstance(font_dict, DictionaryObject):
        return estimate
    try:
        widths = font_dict.get(NameObject("/Widths"))
        widths = widths.get_object() if widths is not None else None
        if not isinstance(widths, ArrayObject):
            return estimate
        first_char = int(font_dict.get(NameObject("/FirstChar"), 0))
        total = 0.0
        for char in text:
            code = ord(char) - first_char
            if 0 <= code < len(widths):
                total += float(widths[code].get_object()) / 1000.0
            else:
                total += _FALLBACK_GLYPH_WIDTH
    except (TypeError, ValueError, AttributeError):
        return estimate
    return total * font_size


def page_geometry(page: PageObject) -> tuple[float, float, float, float]:
    """Return ``(width, height, left, bottom)`` of the visible page area."""

    box = page.cropbox
    width = float(box.width)
    height = float(box.height)
    if (page.rotation or 0) % 180 == 90:
        width, height = height, width
    return width, height, float(box.left), float(box.bottom)


def extract_text_items(page: PageObject) -> list[TextItem]:
    """Collect positioned glyph runs from ``page`` in top-down coordinates."""

    _width, height, left, bottom = page_geometry(page)
    items: list[TextItem] = []

    def visitor(text: str, cm: Matrix, tm: Matrix, font_dict: DictionaryObject | None, font_size: float) -> None:
        text = text.strip("\r\n")
        if not text.strip():
            return
        a, b, _c, _d, e, f = _matrix_multiply(tm, cm)
        effective_size = float(font_size or 0.0) * math.sqrt(a * a + b * b)
        items.append(
            TextItem(
                text=text,
                x=e - left,
                y=height - (f - bottom),
                width=_text_width(text, font_dict, effective_size),
                height=effective_size,
                font_name=_font_name(font_dict),
                font_size=effective_size,
            )
        )

    page.extract_text(visitor_text=visitor)
    return items


class PdfImportService:
    """Import PDF byte streams into :class:`ExtractedPage` records.

    Pages are rasterized one at a time through a single renderer session
    opened from the injected
    :class:`~foliokit.pdf_import.raster.PageRasterizer`, so the document is
    parsed for rendering at most once per import.
    """

    def __init__(self, rasterizer: PageRasterizer | None = None) -> None:
        self.rasterizer: PageRasterizer = rasterizer or PdfiumRasterizer()

    def import_pdf(
        self,
        source: PdfSource,
        options: ImportOptions | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> PdfImportResult:
        opts = options or DEFAULT_IMPORT_OPTIONS
        warnings: list[str] = []

        try:
            data = read_source(source)
            reader = open_reader(data, opts.password)
            total_pages = len(reader.pages)
        except Exception as exc:
            message = exc.message if isinstance(exc, DocumentOpenError) else str(exc) or "Unknown error"
            LOGGER.warning("PDF import failed: %s", message)
            return PdfImportResult(success=False, total_pages=0, error=message)

        metadata = self._extract_metadata(reader)
        start_page = opts.page_range.start if opts.page_range else 1
        end_page = min(opts.page_range.end if opts.page_range else total_pages, total_pages)
        start_page = max(start_page, 1)
        LOGGER.info("Importing pages %s-%s of %s", start_page, end_page, total_pages)

        pages: list[ExtractedPage] = []
        requested = max(0, end_page - start_page + 1)
        with self.rasterizer.open(data, password=opts.password) as renderer:
            for position, page_number in enumerate(range(start_page, end_page + 1), start=1):
                try:
                    pages.append(self._extract_page(reader, renderer, page_number, opts))
                except Exception as exc:
                    detail = exc.message if isinstance(exc, PageExtractionError) else str(exc) or "Unknown error"
                    LOGGER.warning("Failed to extract page %s: %s", page_number, detail)
                    warnings.append(f"Failed to extract page {page_number}: {detail}")
                if on_progress is not None:
                    on_progress(position, requested)

        return PdfImportResult(
            success=True,
            total_pages=total_pages,
            pages=pages,
            metadata=metadata,
            warnings=warnings or None,
        )

    def get_page_count(self, source: PdfSource) -> int:
        """Return the number of pages in ``source`` or ``0`` if it cannot be read."""

        try:
            return len(open_reader(read_source(source)).pages)
        except Exception as exc:
            LOGGER.debug("Unable to count pages: %s", exc)
            return 0

    def _extract_metadata(self, reader: PdfReader) -> PdfDocumentMetadata | None:
        try:
            info = reader.metadata
            if info is None:
                return PdfDocumentMetadata()
            return metadata_from_info({str(key): info[key] for key in info})
        except Exception as exc:
            LOGGER.warning("Metadata extraction failed: %s", exc)
            return None

    def _extract_page(
        self,
        reader: PdfReader,
        renderer: PageRenderer,
        page_number: int,
        options: ImportOptions,
    ) -> ExtractedPage:
        page = reader.pages[page_number - 1]
        width, height, _left, _bottom = page_geometry(page)
        orientation = Orientation.from_size(width, height)

        text_content = ""
        text_items: list[TextItem] = []
        is_scanned = False
        if options.extract_text:
            text_items = extract_text_items(page)
            total_characters = sum(len(item.text) for item in text_items)
            is_scanned = is_scanned_page(total_characters, width, height)
            text_content = reconstruct_text(text_items)

        image_data_url: str | None = None
        if options.render_as_images or (is_scanned and not options.use_ocr):
            image_data_url = renderer.render(page_number, scale=options.image_scale)

        LOGGER.debug(
            "Extracted page %s (%sx%s, %s items, scanned=%s)",
            page_number,
            width,
            height,
            len(text_items),
            is_scanned,
        )
        return ExtractedPage(
            page_number=page_number,
            width=width,
            height=height,
            orientation=orientation,
            text_content=text_content,
            text_items=tuple(text_items),
            image_data_url=image_data_url,
            is_scanned=is_scanned,
        )


def import_pdf(
    source: PdfSource,
    options: ImportOptions | None = None,
    *,
    rasterizer: PageRasterizer | None = None,
) -> PdfImportResult:
    """Import ``source`` with a one-off :class:`PdfImportService`."""

    return PdfImportService(rasterizer).import_pdf(source, options)


__all__ = [
    "DEFAULT_IMPORT_OPTIONS",
    "ExtractedPage",
    "ImportOptions",
    "PdfImportResult",
    "PdfImportService",
    "PdfSource",
    "extract_text_items",
    "import_pdf",
    "open_reader",
    "page_geometry",
    "read_source",
]
