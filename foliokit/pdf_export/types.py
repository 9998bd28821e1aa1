"""Data types exchanged between the export service and a rendering backend."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping

from ..core.model import Orientation, PageRange


class ExportQuality(str, Enum):
    DRAFT = "draft"
    STANDARD = "standard"
    HIGH = "high"
    PRINT = "print"


class PaperSize(str, Enum):
    A4 = "a4"
    LETTER = "letter"
    LEGAL = "legal"


class PdfACompliance(str, Enum):
    NONE = "none"
    PDF_A_1B = "pdf-a-1b"
    PDF_A_2B = "pdf-a-2b"
    PDF_A_3B = "pdf-a-3b"


class ExportStatus(str, Enum):
    """Progress states, in the order an export walks through them."""

    PREPARING = "preparing"
    RESOLVING_SLOTS = "resolving_slots"
    RENDERING = "rendering"
    GENERATING_PDF = "generating_pdf"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ExportStatus.COMPLETE, ExportStatus.ERROR, ExportStatus.CANCELLED)


QUALITY_DPI = {
    ExportQuality.DRAFT: 72,
    ExportQuality.STANDARD: 150,
    ExportQuality.HIGH: 300,
    ExportQuality.PRINT: 600,
}

# Paper sizes in PDF points.
PAPER_DIMENSIONS = {
    PaperSize.A4: (595.28, 841.89),
    PaperSize.LETTER: (612.0, 792.0),
    PaperSize.LEGAL: (612.0, 1008.0),
}

_OPTION_ALIASES = {
    "quality": "quality",
    "paperSize": "paper_size",
    "resolveSlots": "resolve_slots",
    "includeHeaders": "include_headers",
    "includeFooters": "include_footers",
    "includeFootnotes": "include_footnotes",
    "includeComments": "include_comments",
    "includeTrackChanges": "include_track_changes",
    "showTrackChangesMarkup": "show_track_changes_markup",
    "pageRange": "page_range",
    "embedFonts": "embed_fonts",
    "pdfACompliance": "pdf_a_compliance",
}


@dataclass(frozen=True)
class ExportOptions:
    """Caller-facing switches for one export."""

    quality: ExportQuality = ExportQuality.STANDARD
    paper_size: PaperSize = PaperSize.A4
    resolve_slots: bool = True
    include_headers: bool = True
    include_footers: bool = True
    include_footnotes: bool = True
    include_comments: bool = False
    include_track_changes: bool = True
    show_track_changes_markup: bool = False
    page_range: PageRange | None = None
    embed_fonts: bool = True
    pdf_a_compliance: PdfACompliance = PdfACompliance.NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "quality", ExportQuality(self.quality))
        object.__setattr__(self, "paper_size", PaperSize(self.paper_size))
        object.__setattr__(self, "pdf_a_compliance", PdfACompliance(self.pdf_a_compliance))
        if isinstance(self.page_range, Mapping):
            object.__setattr__(self, "page_range", PageRange.from_dict(self.page_range))

    def merged(self, overrides: Mapping[str, Any] | None = None) -> "ExportOptions":
        """Return a copy with ``overrides`` applied; camelCase keys are accepted."""

        if not overrides:
            return self
        names = {item.name for item in fields(self)}
        updates: Dict[str, Any] = {}
        for key, value in overrides.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in names:
                raise ValueError(f"Unknown export option: {key}")
            updates[name] = value
        return replace(self, **updates)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ExportOptions":
        return cls().merged(data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "quality": self.quality.value,
            "paperSize": self.paper_size.value,
            "resolveSlots": self.resolve_slots,
            "includeHeaders": self.include_headers,
            "includeFooters": self.include_footers,
            "includeFootnotes": self.include_footnotes,
            "includeComments": self.include_comments,
            "includeTrackChanges": self.include_track_changes,
            "showTrackChangesMarkup": self.show_track_changes_markup,
            "pageRange": self.page_range.to_dict() if self.page_range else None,
            "embedFonts": self.embed_fonts,
            "pdfACompliance": self.pdf_a_compliance.value,
        }


DEFAULT_EXPORT_OPTIONS = ExportOptions()


@dataclass
class PdfMetadata:
    title: str = "Untitled Document"
    author: str = ""
    subject: str = ""
    keywords: str = ""
    creator: str = "Foliokit Editor"
    producer: str = "Foliokit PDF Generator"
    creation_date: datetime | None = None
    modification_date: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "PdfMetadata":
        data = data or {}
        defaults = cls()
        return cls(
            title=data.get("title") or defaults.title,
            author=data.get("author", defaults.author),
            subject=data.get("subject", defaults.subject),
            keywords=data.get("keywords", defaults.keywords),
            creator=data.get("creator") or defaults.creator,
            producer=data.get("producer") or defaults.producer,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "subject": self.subject,
            "keywords": self.keywords,
            "creator": self.creator,
            "producer": self.producer,
            "creationDate": self.creation_date.isoformat() if self.creation_date else None,
            "modificationDate": self.modification_date.isoformat() if self.modification_date else None,
        }


@dataclass(frozen=True)
class ExportFolio:
    """One folio as submitted to the rendering backend."""

    id: str
    index: int
    orientation: Orientation
    html_content: str
    css_styles: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "index": self.index,
            "orientation": self.orientation.value,
            "htmlContent": self.html_content,
            "cssStyles": self.css_styles,
        }


@dataclass
class ExportRequest:
    folios: List[ExportFolio]
    options: ExportOptions
    metadata: PdfMetadata
    resolved_slots: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "folios": [folio.to_dict() for folio in self.folios],
            "options": self.options.to_dict(),
            "metadata": self.metadata.to_dict(),
            "resolvedSlots": dict(self.resolved_slots),
        }


@dataclass
class ExportResponse:
    """Outcome of an export.

    ``html`` is set when the backend asks the caller to render the markup
    itself. ``data`` holds the finished PDF when the backend returned one.
    """

    success: bool
    filename: str | None = None
    page_count: int | None = None
    data: bytes | None = None
    html: str | None = None
    file_size: int | None = None
    storage_key: str | None = None
    error: str | None = None
    cancelled: bool = False

    @property
    def is_client_rendered(self) -> bool:
        return self.success and self.html is not None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        for key, value in (
            ("filename", self.filename),
            ("pageCount", self.page_count),
            ("fileSize", self.file_size),
            ("storageKey", self.storage_key),
            ("error", self.error),
        ):
            if value is not None:
                payload[key] = value
        if self.cancelled:
            payload["cancelled"] = True
        return payload


@dataclass(frozen=True)
class ExportProgress:
    status: ExportStatus
    percentage: int
    message: str
    current_page: int = 0
    total_pages: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status.value,
            "percentage": self.percentage,
            "message": self.message,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


__all__ = [
    "DEFAULT_EXPORT_OPTIONS",
    "ExportFolio",
    "ExportOptions",
    "ExportProgress",
    "ExportQuality",
    "ExportRequest",
    "ExportResponse",
    "ExportStatus",
    "PAPER_DIMENSIONS",
    "PaperSize",
    "PdfACompliance",
    "PdfMetadata",
    "QUALITY_DPI",
]
