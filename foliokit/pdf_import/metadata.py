"""Document information dictionary helpers for PDF import."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

__all__ = ["PdfDocumentMetadata", "metadata_from_info", "parse_pdf_date"]

_PDF_DATE_PATTERN = re.compile(r"D:(\d{4})(\d{2})(\d{2})(\d{2})?(\d{2})?(\d{2})?")


@dataclass(frozen=True)
class PdfDocumentMetadata:
    """Structured view of a PDF info dictionary."""

    title: str | None = None
    author: str | None = None
    subject: str | None = None
    keywords: str | None = None
    creator: str | None = None
    producer: str | None = None
    creation_date: datetime | None = None
    modification_date: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = {
            "title": self.title,
            "author": self.author,
            "subject": self.subject,
            "keywords": self.keywords,
            "creator": self.creator,
            "producer": self.producer,
            "creationDate": self.creation_date.isoformat() if self.creation_date else None,
            "modificationDate": self.modification_date.isoformat() if self.modification_date else None,
        }
        return {key: value for key, value in payload.items() if value is not None}


def parse_pdf_date(value: object) -> datetime | None:
    """Parse a ``D:YYYYMMDDHHmmSS`` date into a naive :class:`datetime`.

    Year, month and day are required. Missing hour, minute and second
    components default to zero and any timezone suffix is ignored. Malformed
    values return ``None``.
    """

    if not isinstance(value, str):
        return None
    match = _PDF_DATE_PATTERN.search(value)
    if not match:
        return None
    year, month, day, hour, minute, second = (
        int(group) if group is not None else 0 for group in match.groups()
    )
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def metadata_from_info(info: Mapping[str, object] | None) -> PdfDocumentMetadata:
    if not info:
        return PdfDocumentMetadata()

    def _get(key: str) -> str | None:
        value = info.get(f"/{key}")
        if value is None:
            value = info.get(key)
        if value is None:
            return None
        return str(value)

    return PdfDocumentMetadata(
        title=_get("Title"),
        author=_get("Author"),
        subject=_get("Subject"),
        keywords=_get("Keywords"),
        creator=_get("Creator"),
        producer=_get("Producer"),
        creation_date=parse_pdf_date(_get("CreationDate")),
        modification_date=parse_pdf_date(_get("ModDate")),
    )
