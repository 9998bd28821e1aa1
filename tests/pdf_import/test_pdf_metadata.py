from __future__ import annotations

from datetime import datetime

from foliokit.pdf_import.metadata import PdfDocumentMetadata, metadata_from_info, parse_pdf_date


def test_parse_full_pdf_date() -> None:
    assert parse_pdf_date("D:20240115103045+01'00'") == datetime(2024, 1, 15, 10, 30, 45)


def test_parse_pdf_date_defaults_missing_time_components() -> None:
    assert parse_pdf_date("D:20240115") == datetime(2024, 1, 15)
    assert parse_pdf_date("D:2024011509") == datetime(2024, 1, 15, 9)


def test_malformed_pdf_dates_return_none() -> None:
    assert parse_pdf_date("yesterday") is None
    assert parse_pdf_date("D:2024") is None
    assert parse_pdf_date("D:20241345") is None
    assert parse_pdf_date(None) is None


def test_metadata_from_info_accepts_slash_prefixed_keys() -> None:
    metadata = metadata_from_info(
        {
            "/Title": "Report",
            "/Author": "Ada",
            "/Producer": "pypdf",
            "/CreationDate": "D:20230301120000Z",
            "/ModDate": "garbage",
        }
    )

    assert metadata.title == "Report"
    assert metadata.author == "Ada"
    assert metadata.producer == "pypdf"
    assert metadata.creation_date == datetime(2023, 3, 1, 12, 0, 0)
    assert metadata.modification_date is None
    assert metadata.to_dict() == {
        "title": "Report",
        "author": "Ada",
        "producer": "pypdf",
        "creationDate": "2023-03-01T12:00:00",
    }


def test_metadata_from_empty_info() -> None:
    assert metadata_from_info(None) == PdfDocumentMetadata()
    assert metadata_from_info({}).to_dict() == {}
