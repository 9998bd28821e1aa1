"""Core models, errors and helpers shared by the import and export pipelines."""

from __future__ import annotations

from .config import ExportServiceConfig
from .exceptions import (
    ConfigurationError,
    DocumentOpenError,
    ExportCancelledError,
    ExportError,
    FoliokitError,
    IncorrectPasswordError,
    NetworkError,
    PageExtractionError,
    RasterizationError,
    SlotResolutionError,
)
from .model import (
    DataSource,
    DataSourceKind,
    Folio,
    FolioContentType,
    Orientation,
    PageRange,
    Slot,
    SlotMetadata,
    SlotType,
)

__all__ = [
    "ConfigurationError",
    "DataSource",
    "DataSourceKind",
    "DocumentOpenError",
    "ExportCancelledError",
    "ExportError",
    "ExportServiceConfig",
    "Folio",
    "FolioContentType",
    "FoliokitError",
    "IncorrectPasswordError",
    "NetworkError",
    "Orientation",
    "PageExtractionError",
    "PageRange",
    "RasterizationError",
    "Slot",
    "SlotMetadata",
    "SlotResolutionError",
    "SlotType",
]
