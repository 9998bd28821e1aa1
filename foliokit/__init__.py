"""Folio import, slot resolution and PDF export toolkit."""

from __future__ import annotations

from . import core, pdf_export, pdf_import
from .core import (
    ConfigurationError,
    DataSource,
    DataSourceKind,
    DocumentOpenError,
    ExportCancelledError,
    ExportError,
    ExportServiceConfig,
    Folio,
    FolioContentType,
    FoliokitError,
    IncorrectPasswordError,
    NetworkError,
    Orientation,
    PageExtractionError,
    PageRange,
    Slot,
    SlotMetadata,
    SlotResolutionError,
    SlotType,
)
from .pdf_export import (
    ExportOptions,
    ExportProgress,
    ExportResponse,
    ExportStatus,
    PdfExportService,
    PdfMetadata,
    ResolutionContext,
    ResolutionResult,
    SlotResolver,
    export_to_pdf,
)
from .pdf_import import (
    ExtractedPage,
    FolioCreator,
    ImportOptions,
    PdfImportResult,
    PdfImportService,
    create_folios_from_pages,
    import_pdf,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DataSource",
    "DataSourceKind",
    "DocumentOpenError",
    "ExportCancelledError",
    "ExportError",
    "ExportOptions",
    "ExportProgress",
    "ExportResponse",
    "ExportServiceConfig",
    "ExportStatus",
    "ExtractedPage",
    "Folio",
    "FolioContentType",
    "FolioCreator",
    "FoliokitError",
    "ImportOptions",
    "IncorrectPasswordError",
    "NetworkError",
    "Orientation",
    "PageExtractionError",
    "PageRange",
    "PdfExportService",
    "PdfImportResult",
    "PdfImportService",
    "PdfMetadata",
    "ResolutionContext",
    "ResolutionResult",
    "Slot",
    "SlotMetadata",
    "SlotResolutionError",
    "SlotResolver",
    "SlotType",
    "__version__",
    "core",
    "create_folios_from_pages",
    "export_to_pdf",
    "import_pdf",
    "pdf_export",
    "pdf_import",
]
