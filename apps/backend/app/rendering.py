"""Assemble printable HTML from an export request."""

from __future__ import annotations

import html
import re
from typing import Mapping, Sequence

from foliokit.pdf_export.types import PAPER_DIMENSIONS, PaperSize

from .models import ExportFolioModel, ExportMetadataModel, ExportOptionsModel, ExportRequestModel

_INSERTION_TAG = re.compile(r"<ins[^>]*>(.*?)</ins>", re.IGNORECASE | re.DOTALL)
_DELETION_TAG = re.compile(r"<del[^>]*>.*?</del>", re.IGNORECASE | re.DOTALL)
_INSERTION_SPAN = re.compile(
    r"<span[^>]*data-revision-type=\"insertion\"[^>]*>(.*?)</span>", re.IGNORECASE | re.DOTALL
)
_DELETION_SPAN = re.compile(
    r"<span[^>]*data-revision-type=\"deletion\"[^>]*>.*?</span>", re.IGNORECASE | re.DOTALL
)
_COMMENT_SPAN = re.compile(r"<span[^>]*data-comment[^>]*>(.*?)</span>", re.IGNORECASE | re.DOTALL)

_TITLE_STRIP = re.compile(r"[^a-zA-Z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")

TRACK_CHANGES_MARKUP_CSS = """
ins, .insertion-node { background-color: #dbeafe; color: #1e40af; text-decoration: underline; }
del, .deletion-node { color: #3b82f6; text-decoration: line-through; }
"""

COMMENT_HIGHLIGHT_CSS = """
.comment-highlight { background-color: #fef3c7; border-bottom: 2px solid #f59e0b; }
"""


def filter_folios(folios: Sequence[ExportFolioModel], options: ExportOptionsModel) -> list[ExportFolioModel]:
    page_range = options.page_range
    if page_range is None:
        return list(folios)
    return [folio for folio in folios if page_range.start <= folio.index <= page_range.end]


def substitute_slots(markup: str, resolved_slots: Mapping[str, str]) -> str:
    """Replace ``{{ slotId }}`` markers with escaped resolved values."""

    for slot_id, value in resolved_slots.items():
        pattern = re.compile(r"\{\{\s*" + re.escape(slot_id) + r"\s*\}\}")
        replacement = html.escape(value, quote=False)
        markup = pattern.sub(lambda _match: replacement, markup)
    return markup


def accept_track_changes(markup: str) -> str:
    """Keep inserted text and drop deleted text."""

    markup = _INSERTION_TAG.sub(r"\1", markup)
    markup = _DELETION_TAG.sub("", markup)
    markup = _INSERTION_SPAN.sub(r"\1", markup)
    return _DELETION_SPAN.sub("", markup)


def strip_comments(markup: str) -> str:
    return _COMMENT_SPAN.sub(r"\1", markup)


def process_markup(markup: str, options: ExportOptionsModel, resolved_slots: Mapping[str, str]) -> str:
    processed = substitute_slots(markup, resolved_slots)
    if options.include_track_changes and not options.show_track_changes_markup:
        processed = accept_track_changes(processed)
    if not options.include_comments:
        processed = strip_comments(processed)
    return processed


def page_box_size(orientation: str, paper_size: str) -> tuple[float, float]:
    """Return ``(width, height)`` in points for a folio page box."""

    width, height = PAPER_DIMENSIONS[PaperSize(paper_size)]
    if orientation == "landscape":
        return height, width
    return width, height


def export_filename(title: str, timestamp_ms: int) -> str:
    sanitized = _TITLE_STRIP.sub("", title)
    sanitized = _WHITESPACE.sub("-", sanitized).lower()[:50]
    return f"{sanitized or 'document'}-{timestamp_ms}.pdf"


def _render_page(folio: ExportFolioModel, options: ExportOptionsModel, resolved_slots: Mapping[str, str], last: bool) -> str:
    width, height = page_box_size(folio.orientation, options.paper_size)
    page_break = "auto" if last else "always"
    return (
        f'<div class="pdf-page" data-folio-id="{html.escape(folio.id)}" style="'
        f"width: {width}pt; height: {height}pt; page-break-after: {page_break}; "
        'box-sizing: border-box; overflow: hidden; position: relative; background: white;">'
        f"<style>{folio.css_styles}</style>"
        f"{process_markup(folio.html_content, options, resolved_slots)}"
        "</div>"
    )


def _head(metadata: ExportMetadataModel, options: ExportOptionsModel) -> str:
    extra_css = ""
    if options.show_track_changes_markup:
        extra_css += TRACK_CHANGES_MARKUP_CSS
    if options.include_comments:
        extra_css += COMMENT_HIGHLIGHT_CSS
    return f"""<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{html.escape(metadata.title)}</title>
<meta name="author" content="{html.escape(metadata.author)}">
<meta name="description" content="{html.escape(metadata.subject)}">
<meta name="keywords" content="{html.escape(metadata.keywords)}">
<style>
@page {{ size: {options.paper_size}; margin: 0; }}
* {{ -webkit-print-color-adjust: exact !important; print-color-adjust: exact !important; }}
html, body {{ margin: 0; padding: 0; font-family: 'Times New Roman', Times, serif; font-size: 12pt; line-height: 1.5; color: #000; background: #fff; }}
.pdf-page {{ margin: 0 auto; padding: 20mm; }}
.comment-marker, .slot-marker, .collaboration-cursor, .presence-indicator {{ display: none !important; }}
table {{ border-collapse: collapse; width: 100%; }}
td, th {{ border: 1px solid #000; padding: 6pt; }}
img {{ max-width: 100%; height: auto; }}
{extra_css}</style>
</head>"""


def build_export_html(request: ExportRequestModel) -> tuple[str, int]:
    """Return the printable document and the number of pages it holds."""

    folios = filter_folios(request.folios, request.options)
    pages = [
        _render_page(folio, request.options, request.resolved_slots, position == len(folios) - 1)
        for position, folio in enumerate(folios)
    ]
    document = (
        '<!DOCTYPE html>\n<html lang="fr">\n'
        f"{_head(request.metadata, request.options)}\n"
        "<body>\n" + "\n".join(pages) + "\n</body>\n</html>"
    )
    return document, len(folios)


__all__ = [
    "accept_track_changes",
    "build_export_html",
    "export_filename",
    "filter_folios",
    "page_box_size",
    "process_markup",
    "strip_comments",
    "substitute_slots",
]
