"""Built-in ``dynamic_content`` fields.

A slot label is normalised (lowercased, whitespace runs collapsed to ``_``)
and matched against :class:`BuiltinField`. Unknown labels yield ``None`` so
the caller can fall back to document metadata.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:  # pragma: no cover
    from .slots import ResolutionContext

_WHITESPACE = re.compile(r"\s+")

FRENCH_WEEKDAYS = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche")
FRENCH_MONTHS = (
    "janvier",
    "février",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "août",
    "septembre",
    "octobre",
    "novembre",
    "décembre",
)


class BuiltinField(str, Enum):
    PAGE_NUMBER = "page_number"
    TOTAL_PAGES = "total_pages"
    PAGE_OF_TOTAL = "page_of_total"
    DATE = "date"
    DATE_ISO = "date_iso"
    DATE_LONG = "date_long"
    TIME = "time"
    DATETIME = "datetime"
    TITLE = "title"
    AUTHOR = "author"
    VERSION = "version"
    DOCUMENT_ID = "document_id"


def normalize_label(label: str) -> str:
    return _WHITESPACE.sub("_", label.strip().lower())


def parse_builtin_field(label: str | None) -> BuiltinField | None:
    """Map a free-text slot label to a :class:`BuiltinField`."""

    if not label:
        return None
    try:
        return BuiltinField(normalize_label(label))
    except ValueError:
        return None


def format_long_date(moment: datetime) -> str:
    """``lundi 19 octobre 2026``"""

    weekday = FRENCH_WEEKDAYS[moment.weekday()]
    month = FRENCH_MONTHS[moment.month - 1]
    return f"{weekday} {moment.day} {month} {moment.year}"


def _metadata(key: str, default: str = "") -> Callable[["ResolutionContext"], str]:
    def resolve(ctx: "ResolutionContext") -> str:
        return str(ctx.metadata.get(key) or default)

    return resolve


BUILTIN_FORMATTERS: dict[BuiltinField, Callable[["ResolutionContext"], str]] = {
    BuiltinField.PAGE_NUMBER: lambda ctx: str(ctx.page_number),
    BuiltinField.TOTAL_PAGES: lambda ctx: str(ctx.total_pages),
    BuiltinField.PAGE_OF_TOTAL: lambda ctx: f"{ctx.page_number} / {ctx.total_pages}",
    BuiltinField.DATE: lambda ctx: ctx.now.strftime("%d/%m/%Y"),
    BuiltinField.DATE_ISO: lambda ctx: ctx.now.strftime("%Y-%m-%d"),
    BuiltinField.DATE_LONG: lambda ctx: format_long_date(ctx.now),
    BuiltinField.TIME: lambda ctx: ctx.now.strftime("%H:%M"),
    BuiltinField.DATETIME: lambda ctx: ctx.now.strftime("%d/%m/%Y %H:%M:%S"),
    BuiltinField.TITLE: _metadata("title", "Untitled"),
    BuiltinField.AUTHOR: _metadata("author"),
    BuiltinField.VERSION: _metadata("version", "1.0"),
    BuiltinField.DOCUMENT_ID: lambda ctx: ctx.document_id,
}


def resolve_builtin(field: BuiltinField, context: "ResolutionContext") -> str:
    return BUILTIN_FORMATTERS[field](context)


__all__ = [
    "BUILTIN_FORMATTERS",
    "BuiltinField",
    "format_long_date",
    "normalize_label",
    "parse_builtin_field",
    "resolve_builtin",
]
