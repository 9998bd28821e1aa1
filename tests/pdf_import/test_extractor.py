from __future__ import annotations

from datetime import datetime
from io import BytesIO

import pytest

from foliokit.core.model import Orientation, PageRange
from foliokit.pdf_import import raster
from foliokit.pdf_import.extractor import ImportOptions, PdfImportService, import_pdf


def test_import_extracts_geometry_text_and_metadata(three_page_pdf: bytes, fake_rasterizer, long_line: str) -> None:
    result = PdfImportService(fake_rasterizer).import_pdf(three_page_pdf)

    assert result.success is True
    assert result.total_pages == 3
    assert [page.page_number for page in result.pages] == [1, 2, 3]
    assert result.warnings is None

    first = result.pages[0]
    assert (first.width, first.height) == (612.0, 792.0)
    assert first.orientation is Orientation.PORTRAIT
    assert first.text_content == f"{long_line}\nSecond line of text"
    assert first.is_scanned is False
    assert first.image_data_url is None
    assert result.pages[2].orientation is Orientation.LANDSCAPE
    assert fake_rasterizer.calls == []

    assert result.metadata is not None
    assert result.metadata.title == "Quarterly Report"
    assert result.metadata.creation_date == datetime(2024, 1, 15, 10, 30, 0)


def test_text_items_are_positioned_top_down(three_page_pdf: bytes, fake_rasterizer, long_line: str) -> None:
    page = PdfImportService(fake_rasterizer).import_pdf(three_page_pdf).pages[0]

    headline = page.text_items[0]
    assert headline.text == long_line
    assert headline.x == pytest.approx(72.0)
    assert headline.y == pytest.approx(792.0 - 720.0)
    assert headline.font_size == pytest.approx(12.0)
    assert headline.height == pytest.approx(12.0)
    assert headline.font_name == "Helvetica"
    assert headline.width > 0


def test_failing_page_is_reported_and_omitted(three_page_pdf: bytes, rasterizer_factory) -> None:
    rasterizer = rasterizer_factory(fail_on={2})

    result = PdfImportService(rasterizer).import_pdf(three_page_pdf, ImportOptions(render_as_images=True))

    assert result.success is True
    assert result.total_pages == 3
    assert [page.page_number for page in result.pages] == [1, 3]
    assert result.warnings is not None and len(result.warnings) == 1
    assert "page 2" in result.warnings[0]
    assert result.pages[0].image_data_url == "data:image/png;base64,page1"


def test_page_range_is_clamped_and_reports_progress(three_page_pdf: bytes, fake_rasterizer) -> None:
    progress: list[tuple[int, int]] = []

    result = PdfImportService(fake_rasterizer).import_pdf(
        three_page_pdf,
        ImportOptions(page_range=PageRange(2, 10)),
        on_progress=lambda current, total: progress.append((current, total)),
    )

    assert [page.page_number for page in result.pages] == [2, 3]
    assert progress == [(1, 2), (2, 2)]


def test_blank_pages_are_scanned_and_rasterized(pdf_builder, fake_rasterizer) -> None:
    data = pdf_builder([{"width": 300, "height": 300}])

    result = PdfImportService(fake_rasterizer).import_pdf(data, ImportOptions(image_scale=2.0))

    page = result.pages[0]
    assert page.is_scanned is True
    assert page.text_content == ""
    assert page.image_data_url == "data:image/png;base64,page1"
    assert fake_rasterizer.calls == [(1, 2.0)]


def test_scanned_pages_are_not_rasterized_when_ocr_is_requested(pdf_builder, fake_rasterizer) -> None:
    data = pdf_builder([{}])

    result = PdfImportService(fake_rasterizer).import_pdf(data, ImportOptions(use_ocr=True))

    assert result.pages[0].is_scanned is True
    assert result.pages[0].image_data_url is None
    assert fake_rasterizer.calls == []


def test_rotated_pages_swap_dimensions(pdf_builder, fake_rasterizer) -> None:
    data = pdf_builder([{"width": 612, "height": 792, "rotate": 90}])

    page = PdfImportService(fake_rasterizer).import_pdf(data, ImportOptions(extract_text=False)).pages[0]

    assert (page.width, page.height) == (792.0, 612.0)
    assert page.orientation is Orientation.LANDSCAPE


def test_corrupt_input_fails_without_pages(fake_rasterizer) -> None:
    result = PdfImportService(fake_rasterizer).import_pdf(b"this is not a pdf")

    assert result.success is False
    assert result.total_pages == 0
    assert result.pages == []
    assert result.error


def test_wrong_password_fails_the_whole_import(pdf_builder, fake_rasterizer, long_line: str) -> None:
    data = pdf_builder([{"text": [(72, 720, long_line)]}], password="secret")

    denied = PdfImportService(fake_rasterizer).import_pdf(data, ImportOptions(password="wrong"))
    granted = PdfImportService(fake_rasterizer).import_pdf(data, ImportOptions(password="secret"))

    assert denied.success is False
    assert denied.error == "Incorrect password for encrypted PDF."
    assert granted.success is True
    assert granted.pages[0].text_content == long_line


def test_sources_may_be_paths_or_streams(sample_pdf, fake_rasterizer) -> None:
    service = PdfImportService(fake_rasterizer)

    assert service.import_pdf(sample_pdf, ImportOptions(extract_text=False)).total_pages == 3
    assert service.import_pdf(str(sample_pdf), ImportOptions(extract_text=False)).total_pages == 3
    assert service.get_page_count(BytesIO(sample_pdf.read_bytes())) == 3


def test_get_page_count_returns_zero_on_failure(fake_rasterizer) -> None:
    assert PdfImportService(fake_rasterizer).get_page_count(b"%PDF-broken") == 0


def test_result_serializes_with_camel_case_keys(three_page_pdf: bytes, fake_rasterizer) -> None:
    payload = import_pdf(three_page_pdf, ImportOptions(page_range=PageRange(1, 1)), rasterizer=fake_rasterizer).to_dict()

    assert payload["success"] is True
    assert payload["totalPages"] == 3
    page = payload["pages"][0]
    assert set(page) >= {"pageNumber", "width", "height", "orientation", "textContent", "textItems", "isScanned"}
    assert page["textItems"][0]["fontName"] == "Helvetica"
    assert payload["metadata"]["title"] == "Quarterly Report"


def test_default_rasterizer_renders_png(pdf_builder) -> None:
    data = pdf_builder([{"width": 100, "height": 100}])

    result = PdfImportService().import_pdf(data, ImportOptions(render_as_images=True, image_scale=1.0))

    assert result.pages[0].image_data_url.startswith("data:image/png;base64,")


def test_pages_are_rendered_from_one_session_per_import(three_page_pdf: bytes, fake_rasterizer) -> None:
    result = PdfImportService(fake_rasterizer).import_pdf(three_page_pdf, ImportOptions(render_as_images=True))

    assert [page.image_data_url for page in result.pages] == [
        "data:image/png;base64,page1",
        "data:image/png;base64,page2",
        "data:image/png;base64,page3",
    ]
    assert fake_rasterizer.sessions == 1
    assert fake_rasterizer.closed == 1


def test_default_rasterizer_parses_the_document_once(three_page_pdf: bytes, monkeypatch) -> None:
    opened = []
    real_document = raster.pdfium.PdfDocument

    def counting_document(*args, **kwargs):
        document = real_document(*args, **kwargs)
        opened.append(document)
        return document

    monkeypatch.setattr(raster.pdfium, "PdfDocument", counting_document)

    result = PdfImportService().import_pdf(three_page_pdf, ImportOptions(render_as_images=True, image_scale=0.5))

    assert len(opened) == 1
    assert all(page.image_data_url.startswith("data:image/png;base64,") for page in result.pages)


def test_default_rasterizer_skips_parsing_when_nothing_is_rendered(three_page_pdf: bytes, monkeypatch) -> None:
    opened = []
    monkeypatch.setattr(raster.pdfium, "PdfDocument", lambda *args, **kwargs: opened.append(args))

    result = PdfImportService().import_pdf(three_page_pdf)

    assert len(result.pages) == 3
    assert opened == []
