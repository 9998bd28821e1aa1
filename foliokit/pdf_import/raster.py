"""Page rasterization for image-only and preview imports."""

from __future__ import annotations

import base64
from io import BytesIO
from typing import Protocol

import pypdfium2 as pdfium
from PIL import Image

from ..core.exceptions import RasterizationError
from ..core.utils import get_logger

LOGGER = get_logger("foliokit.pdf_import.raster")

BASE_DPI = 72


class PageRenderer(Protocol):
    """Render pages of one open document to PNG data URLs."""

    def render(self, page_number: int, *, scale: float) -> str:
        ...

    def close(self) -> None:
        ...

    def __enter__(self) -> "PageRenderer":
        ...

    def __exit__(self, *exc_info: object) -> None:
        ...


class PageRasterizer(Protocol):
    """Open a PDF byte buffer for page rendering."""

    def open(self, data: bytes, *, password: str | None = None) -> PageRenderer:
        ...


def image_to_data_url(image: Image.Image) -> str:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


class PdfiumSession:
    """One PDFium document shared by every page rendered during an import.

    The document is parsed on the first :meth:`render` call, so imports
    that never rasterize never pay for it.
    """

    def __init__(self, data: bytes, password: str | None = None) -> None:
        self._data = data
        self._password = password
        self._pdf: pdfium.PdfDocument | None = None

    def _document(self) -> pdfium.PdfDocument:
        if self._pdf is None:
            self._pdf = pdfium.PdfDocument(self._data, password=self._password)
        return self._pdf

    def render(self, page_number: int, *, scale: float) -> str:
        LOGGER.debug("Rasterizing page %s at %s dpi", page_number, BASE_DPI * scale)
        try:
            page = self._document()[page_number - 1]
            try:
                image = page.render(scale=scale).to_pil()
            finally:
                page.close()
        except Exception as exc:
            raise RasterizationError(page_number, f"Failed to render page {page_number}: {exc}") from exc
        return image_to_data_url(image)

    def close(self) -> None:
        if self._pdf is not None:
            self._pdf.close()
            self._pdf = None

    def __enter__(self) -> "PdfiumSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PdfiumRasterizer:
    """Rasterizer backed by PDFium through :mod:`pypdfium2`.

    ``scale`` follows the PDF convention: ``1`` renders at 72 DPI, ``2`` at
    144 DPI and so on.
    """

    def open(self, data: bytes, *, password: str | None = None) -> PdfiumSession:
        return PdfiumSession(data, password)


__all__ = [
    "BASE_DPI",
    "PageRasterizer",
    "PageRenderer",
    "PdfiumRasterizer",
    "PdfiumSession",
    "image_to_data_url",
]
