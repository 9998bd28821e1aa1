from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Sequence
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import DictionaryObject, NameObject, NumberObject, StreamObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

LONG_LINE = "The quick brown fox jumps over the lazy dog again and again"

TextRun = Sequence[Any]  # (x, y, text[, font_size])


def _add_text(writer: PdfWriter, page, runs: Iterable[TextRun]) -> None:
    font_dict = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
        }
    )
    font_ref = writer._add_object(font_dict)
    page[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
    )
    operations = []
    for run in runs:
        x, y, text = run[0], run[1], run[2]
        size = run[3] if len(run) > 3 else 12
        operations.append(f"BT /F1 {size} Tf {x} {y} Td ({text}) Tj ET")
    content_bytes = "\n".join(operations).encode("latin-1")
    stream = StreamObject()
    stream[NameObject("/Length")] = NumberObject(len(content_bytes))
    stream._data = content_bytes
    page[NameObject("/Contents")] = writer._add_object(stream)


def build_pdf(
    pages: Sequence[Mapping[str, Any]],
    *,
    metadata: Mapping[str, str] | None = None,
    password: str | None = None,
) -> bytes:
    """Build a PDF where each page entry may set width, height, rotate and text runs."""

    writer = PdfWriter()
    for entry in pages:
        page = writer.add_blank_page(width=entry.get("width", 612), height=entry.get("height", 792))
        runs = entry.get("text") or []
        if runs:
            _add_text(writer, page, runs)
        if entry.get("rotate"):
            page.rotate(entry["rotate"])
    if metadata:
        writer.add_metadata(dict(metadata))
    if password is not None:
        writer.encrypt(user_password=password, algorithm="RC4-128")
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def pdf_builder() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture()
def text_page() -> dict[str, Any]:
    return {"text": [(72, 720, LONG_LINE), (72, 700, "Second line of text")]}


@pytest.fixture()
def three_page_pdf(text_page: dict[str, Any]) -> bytes:
    return build_pdf(
        [text_page, text_page, {"width": 842, "height": 595, "text": text_page["text"]}],
        metadata={
            "/Title": "Quarterly Report",
            "/Author": "Foliokit",
            "/CreationDate": "D:20240115103000+01'00'",
        },
    )


@pytest.fixture()
def sample_pdf(tmp_path: Path, three_page_pdf: bytes) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(three_page_pdf)
    return pdf_path


class FakeRasterizer:
    """Records sessions and renders, failing on the configured page numbers."""

    def __init__(self, fail_on: Iterable[int] = ()) -> None:
        self.fail_on = set(fail_on)
        self.calls: list[tuple[int, float]] = []
        self.sessions = 0
        self.closed = 0

    def open(self, data: bytes, *, password: str | None = None) -> "FakeRasterizer":
        self.sessions += 1
        return self

    def render(self, page_number: int, *, scale: float) -> str:
        self.calls.append((page_number, scale))
        if page_number in self.fail_on:
            raise RuntimeError("renderer exploded")
        return f"data:image/png;base64,page{page_number}"

    def close(self) -> None:
        self.closed += 1

    def __enter__(self) -> "FakeRasterizer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@pytest.fixture()
def fake_rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture()
def rasterizer_factory() -> Callable[..., FakeRasterizer]:
    return FakeRasterizer


@pytest.fixture()
def long_line() -> str:
    return LONG_LINE
