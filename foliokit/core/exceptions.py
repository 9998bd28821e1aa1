"""Custom exceptions for foliokit.

Per-unit failures (a page, a slot) are contained by the component that owns
the unit; only whole-document and whole-export failures reach callers.
"""

from __future__ import annotations


class FoliokitError(RuntimeError):
    """Base exception for all foliokit errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown foliokit error occurred."


class DocumentOpenError(FoliokitError):
    """Raised when a PDF cannot be opened at all."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF file."


class IncorrectPasswordError(DocumentOpenError):
    """Raised when an encrypted PDF cannot be decrypted with the given password."""

    @property
    def default_message(self) -> str:
        return "Incorrect password for encrypted PDF."


class PageExtractionError(FoliokitError):
    """Raised when a single page cannot be extracted."""

    def __init__(self, page_number: int, message: str = "") -> None:
        self.page_number = page_number
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return f"Failed to extract page {self.page_number}."


class RasterizationError(PageExtractionError):
    """Raised when a page cannot be rendered to an image."""

    @property
    def default_message(self) -> str:
        return f"Failed to render page {self.page_number} as an image."


class SlotResolutionError(FoliokitError):
    """Raised when one slot cannot be resolved."""

    def __init__(self, message: str = "", *, slot_id: str | None = None) -> None:
        self.slot_id = slot_id
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "Slot could not be resolved."


class ConfigurationError(SlotResolutionError):
    """Raised for unknown data sources or incomplete source configuration."""

    @property
    def default_message(self) -> str:
        return "Data source is not configured."


class ExportError(FoliokitError):
    """Raised when an export cannot be completed."""

    @property
    def default_message(self) -> str:
        return "Failed to export PDF."


class NetworkError(ExportError):
    """Raised when submitting an export request to the backend fails."""

    @property
    def default_message(self) -> str:
        return "Export request failed."


class ExportCancelledError(ExportError):
    """Raised when the caller cancels an export."""

    @property
    def default_message(self) -> str:
        return "Export cancelled"


__all__ = [
    "ConfigurationError",
    "DocumentOpenError",
    "ExportCancelledError",
    "ExportError",
    "FoliokitError",
    "IncorrectPasswordError",
    "NetworkError",
    "PageExtractionError",
    "RasterizationError",
    "SlotResolutionError",
]
