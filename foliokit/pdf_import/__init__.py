"""PDF import pipeline: page extraction and folio creation."""

from __future__ import annotations

from .extractor import (
    DEFAULT_IMPORT_OPTIONS,
    ExtractedPage,
    ImportOptions,
    PdfImportResult,
    PdfImportService,
    import_pdf,
)
from .folios import (
    FolioCreationOptions,
    FolioCreator,
    ScannedPageMode,
    create_folios_from_pages,
    folios_to_html,
    get_folio_summary,
)
from .metadata import PdfDocumentMetadata, parse_pdf_date
from .raster import PageRasterizer, PdfiumRasterizer
from .text import TextItem, is_scanned_page, reconstruct_text

__all__ = [
    "DEFAULT_IMPORT_OPTIONS",
    "ExtractedPage",
    "FolioCreationOptions",
    "FolioCreator",
    "ImportOptions",
    "PageRasterizer",
    "PdfDocumentMetadata",
    "PdfImportResult",
    "PdfImportService",
    "PdfiumRasterizer",
    "ScannedPageMode",
    "TextItem",
    "create_folios_from_pages",
    "folios_to_html",
    "get_folio_summary",
    "import_pdf",
    "is_scanned_page",
    "parse_pdf_date",
    "reconstruct_text",
]
