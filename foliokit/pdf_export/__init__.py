"""PDF export pipeline: slot resolution and backend submission."""

from __future__ import annotations

from .builtins import BuiltinField, parse_builtin_field
from .cancellation import CancellationToken
from .fetchers import register_fetcher
from .renderers import BrowserPrintRenderer, ClientRenderer
from .serializers import FolioSerializer, PlainTextSerializer
from .service import PdfExportService, export_to_pdf
from .slots import FetchKey, ResolutionContext, ResolutionResult, SlotResolver
from .types import (
    DEFAULT_EXPORT_OPTIONS,
    ExportFolio,
    ExportOptions,
    ExportProgress,
    ExportRequest,
    ExportResponse,
    ExportStatus,
    PdfMetadata,
)

__all__ = [
    "BrowserPrintRenderer",
    "BuiltinField",
    "CancellationToken",
    "ClientRenderer",
    "DEFAULT_EXPORT_OPTIONS",
    "ExportFolio",
    "ExportOptions",
    "ExportProgress",
    "ExportRequest",
    "ExportResponse",
    "ExportStatus",
    "FetchKey",
    "FolioSerializer",
    "PdfExportService",
    "PdfMetadata",
    "PlainTextSerializer",
    "ResolutionContext",
    "ResolutionResult",
    "SlotResolver",
    "export_to_pdf",
    "parse_builtin_field",
    "register_fetcher",
]
