from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from apps.backend.app.main import app
from apps.backend.app.models import ExportOptionsModel
from apps.backend.app.rendering import (
    accept_track_changes,
    export_filename,
    process_markup,
    strip_comments,
    substitute_slots,
)
from apps.backend.app.store import ExportStore

client = TestClient(app)


def _folio(index: int, html: str = "<p>Body</p>", orientation: str = "portrait") -> dict:
    return {
        "id": f"folio-{index}",
        "index": index,
        "orientation": orientation,
        "htmlContent": html,
        "cssStyles": ".editor-content { margin: 0; }",
    }


def _export(**body) -> dict:
    payload = {"folios": [_folio(0)], "metadata": {"title": "Board Minutes"}}
    payload.update(body)
    return payload


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_export_returns_printable_html() -> None:
    response = client.post(
        "/api/export-pdf",
        json=_export(folios=[_folio(0, "<p>Hello {{ name }}</p>"), _folio(1)], resolvedSlots={"name": "<Ada>"}),
    )

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-cache"
    body = response.json()
    assert body["success"] is True
    assert body["method"] == "client-side"
    assert body["pageCount"] == 2
    assert body["filename"].startswith("board-minutes-") and body["filename"].endswith(".pdf")
    assert body["storageKey"].startswith("exports/temp/")
    assert body["metadata"]["title"] == "Board Minutes"
    html = body["html"]
    assert "<title>Board Minutes</title>" in html
    assert "Hello &lt;Ada&gt;" in html
    assert html.count('class="pdf-page"') == 2
    assert "width: 595.28pt; height: 841.89pt" in html


def test_export_page_box_follows_orientation_and_paper() -> None:
    response = client.post(
        "/api/export-pdf",
        json=_export(folios=[_folio(0, orientation="landscape")], options={"paperSize": "letter"}),
    )

    assert "width: 792.0pt; height: 612.0pt" in response.json()["html"]


def test_export_page_range_filters_folios() -> None:
    response = client.post(
        "/api/export-pdf",
        json=_export(folios=[_folio(i) for i in range(4)], options={"pageRange": {"start": 2, "end": 3}}),
    )

    body = response.json()
    assert body["pageCount"] == 2
    assert 'data-folio-id="folio-0"' not in body["html"]
    assert 'data-folio-id="folio-3"' in body["html"]


def test_export_without_folios_is_rejected() -> None:
    response = client.post("/api/export-pdf", json={"folios": []})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No folios provided for export"}


def test_export_with_invalid_options_is_unprocessable() -> None:
    response = client.post("/api/export-pdf", json=_export(options={"quality": "ultra"}))

    assert response.status_code == 422


def test_stored_export_can_be_fetched_by_key() -> None:
    created = client.post("/api/export-pdf", json=_export()).json()

    response = client.get("/api/export-pdf", params={"key": created["storageKey"]})

    assert response.status_code == 200
    body = response.json()
    assert body["html"] == created["html"]
    assert body["filename"] == created["filename"]
    assert body["pageCount"] == 1


def test_unknown_export_key_is_not_found() -> None:
    response = client.get("/api/export-pdf", params={"key": "exports/temp/missing.html"})

    assert response.status_code == 404
    assert response.json()["error"] == "Export not found or expired"


def test_capabilities_are_listed_without_key() -> None:
    body = client.get("/api/export-pdf").json()

    assert body["service"] == "pdf-export"
    assert body["capabilities"]["maxPages"] == 100
    assert body["capabilities"]["qualityLevels"] == ["draft", "standard", "high", "print"]
    assert body["capabilities"]["qualityDpi"] == {"draft": 72, "standard": 150, "high": 300, "print": 600}
    assert body["methods"]["available"] == "client-side"


def test_track_changes_are_accepted_and_comments_stripped() -> None:
    markup = (
        '<p>Keep <ins data-id="1">new</ins><del>old</del> '
        '<span data-revision-type="insertion">added</span>'
        '<span data-revision-type="deletion">removed</span> '
        '<span class="comment-highlight" data-comment-id="c1">noted</span></p>'
    )

    processed = process_markup(markup, ExportOptionsModel(), {})

    assert processed == "<p>Keep new added noted</p>"


def test_markup_is_kept_when_requested() -> None:
    markup = '<ins>new</ins><span data-comment-id="c1">noted</span>'
    options = ExportOptionsModel(showTrackChangesMarkup=True, includeComments=True)

    assert process_markup(markup, options, {}) == markup


def test_markup_helpers() -> None:
    assert accept_track_changes("<del>gone</del><ins>here</ins>") == "here"
    assert strip_comments('<span data-comment="x">text</span>') == "text"
    assert substitute_slots("{{a}} and {{  a }} but {{ b }}", {"a": "1 & 2"}) == "1 &amp; 2 and 1 &amp; 2 but {{ b }}"
    assert export_filename("Rapport: Q3 / 2024!", 1700000000000) == "rapport-q3-2024-1700000000000.pdf"
    assert export_filename("***", 1) == "document-1.pdf"


def test_export_store_expires_entries() -> None:
    moment = [1000.0]
    store = ExportStore(ttl=60, clock=lambda: moment[0])

    record = store.put("<html></html>", filename="a.pdf", page_count=1, quality="standard")
    assert store.get(record.key) == record
    assert record.expires_at == 1060.0

    moment[0] = 1060.0
    assert store.get(record.key) is None
    assert len(store) == 0


def test_export_store_purges_expired_entries_on_put() -> None:
    moment = [0.0]
    store = ExportStore(ttl=10, clock=lambda: moment[0])
    store.put("one", filename="1.pdf", page_count=1, quality="draft")

    moment[0] = 20.0
    second = store.put("two", filename="2.pdf", page_count=1, quality="draft")

    assert len(store) == 1
    assert store.get(second.key).html == "two"


def test_import_endpoint_returns_pages_and_folios(three_page_pdf: bytes) -> None:
    response = client.post(
        "/api/import-pdf",
        files={"file": ("report.pdf", three_page_pdf, "application/pdf")},
        data={"options": json.dumps({"pageRange": {"start": 1, "end": 2}, "scannedPageMode": "placeholder"})},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalPages"] == 3
    assert [page["pageNumber"] for page in body["pages"]] == [1, 2]
    assert body["summary"]["total"] == 2
    assert body["summary"]["textBased"] == 2
    assert body["folios"][0]["sourcePageNumber"] == 1
    assert body["metadata"]["title"] == "Quarterly Report"


def test_import_endpoint_uses_placeholders_for_scanned_pages(pdf_builder) -> None:
    data = pdf_builder([{}])

    response = client.post(
        "/api/import-pdf",
        files={"file": ("scan.pdf", data, "application/pdf")},
        data={"options": json.dumps({"scannedPageMode": "placeholder", "useOcr": True})},
    )

    folio = response.json()["folios"][0]
    assert folio["content"] == "[Page 1 - Scanned content]"
    assert folio["contentType"] == "text"


@pytest.mark.parametrize(
    ("files", "data", "fragment"),
    [
        ({"file": ("empty.pdf", b"", "application/pdf")}, {}, "is empty"),
        ({"file": ("bad.pdf", b"not a pdf", "application/pdf")}, {}, "PDF"),
        ({"file": ("bad.pdf", b"%PDF", "application/pdf")}, {"options": "[1]"}, "must be a JSON object"),
        ({"file": ("bad.pdf", b"%PDF", "application/pdf")}, {"options": '{"scannedPageMode": "ocr"}'}, "Invalid"),
    ],
)
def test_import_endpoint_rejects_bad_input(files, data, fragment: str) -> None:
    response = client.post("/api/import-pdf", files=files, data=data)

    assert response.status_code == 400
    assert fragment in response.json()["detail"]
