"""Positioned text items and reading-order reconstruction.

Glyph runs pulled out of a content stream carry no notion of a line. Lines
are rebuilt from positions in two passes: a sort that treats runs within
``SAME_LINE_SORT_TOLERANCE`` points vertically as the same row (ordered by
``x``), then a grouping pass that keeps appending runs to the current line
while they stay within ``LINE_GROUPING_THRESHOLD`` of the line's first run.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, Sequence

__all__ = [
    "LINE_GROUPING_THRESHOLD",
    "SAME_LINE_SORT_TOLERANCE",
    "SCANNED_MIN_CHARACTERS",
    "SCANNED_MIN_DENSITY",
    "TextItem",
    "group_lines",
    "is_scanned_page",
    "reconstruct_text",
    "sort_items",
]

SAME_LINE_SORT_TOLERANCE = 5.0
LINE_GROUPING_THRESHOLD = 10.0

# Tunable heuristics for image-only pages.
SCANNED_MIN_CHARACTERS = 50
SCANNED_MIN_DENSITY = 1e-4


@dataclass(frozen=True)
class TextItem:
    """A glyph run positioned in top-down page coordinates."""

    text: str
    x: float
    y: float
    width: float
    height: float
    font_name: str
    font_size: float

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "fontName": self.font_name,
            "fontSize": self.font_size,
        }


def _compare(a: TextItem, b: TextItem) -> float:
    y_diff = a.y - b.y
    if abs(y_diff) > SAME_LINE_SORT_TOLERANCE:
        return y_diff
    return a.x - b.x


def sort_items(items: Iterable[TextItem]) -> list[TextItem]:
    """Return ``items`` in top-to-bottom, left-to-right reading order."""

    return sorted(items, key=cmp_to_key(_compare))


def group_lines(items: Sequence[TextItem]) -> list[list[TextItem]]:
    """Group reading-ordered ``items`` into lines."""

    if not items:
        return []
    ordered = sort_items(items)
    lines: list[list[TextItem]] = []
    current: list[TextItem] = []
    last_y = ordered[0].y
    for item in ordered:
        if abs(item.y - last_y) > LINE_GROUPING_THRESHOLD:
            if current:
                lines.append(current)
            current = [item]
            last_y = item.y
        else:
            current.append(item)
    if current:
        lines.append(current)
    return lines


def reconstruct_text(items: Sequence[TextItem]) -> str:
    """Join positioned runs into text, one output line per visual line."""

    return "\n".join(" ".join(item.text for item in line) for line in group_lines(items))


def is_scanned_page(total_characters: int, width: float, height: float) -> bool:
    """Classify a page as image-only when it carries negligible text."""

    if total_characters < SCANNED_MIN_CHARACTERS:
        return True
    area = width * height
    if area <= 0:
        return True
    return total_characters / area < SCANNED_MIN_DENSITY
