"""FastAPI application rendering folio exports and importing PDFs."""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from json import JSONDecodeError

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse

from foliokit import __version__
from foliokit.core.model import PageRange
from foliokit.core.utils import get_logger
from foliokit.pdf_import.extractor import ImportOptions, PdfImportResult, PdfImportService
from foliokit.pdf_export.types import QUALITY_DPI, ExportQuality
from foliokit.pdf_import.folios import FolioCreator, ScannedPageMode, get_folio_summary

from .models import ExportRequestModel
from .rendering import build_export_html, export_filename
from .store import ExportStore

LOGGER = get_logger("foliokit.backend")

app = FastAPI(title="Foliokit API", version=__version__)
DOCS_PREFIX = "/api"

export_store = ExportStore()

CAPABILITIES = {
    "service": "pdf-export",
    "version": "1.0.0",
    "capabilities": {
        "maxPages": 100,
        "supportedFormats": ["a4", "letter", "legal"],
        "qualityLevels": [quality.value for quality in QUALITY_DPI],
        "qualityDpi": {quality.value: dpi for quality, dpi in QUALITY_DPI.items()},
        "features": ["slot_resolution", "track_changes", "comments", "multi_page", "metadata"],
    },
    "methods": {"available": "client-side", "future": ["server-side-rendering", "external-service"]},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _parse_json_mapping(raw_value: str | None, *, field_name: str) -> dict[str, object] | None:
    """Parse an optional JSON encoded mapping from a multipart form field."""

    if raw_value is None or not raw_value.strip():
        return None

    try:
        payload = json.loads(raw_value)
    except JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"{field_name} must be valid JSON.") from exc

    if payload is None:
        return None

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a JSON object.")

    return payload


def _build_import_options(payload: dict[str, object] | None) -> tuple[ImportOptions, ScannedPageMode]:
    payload = payload or {}
    try:
        page_range = PageRange.from_dict(payload.get("pageRange"))  # type: ignore[arg-type]
        options = ImportOptions(
            extract_text=bool(payload.get("extractText", True)),
            render_as_images=bool(payload.get("renderAsImages", False)),
            image_scale=float(payload.get("imageScale", 1.5)),  # type: ignore[arg-type]
            page_range=page_range,
            use_ocr=bool(payload.get("useOcr", False)),
            password=payload.get("password") or None,  # type: ignore[arg-type]
        )
        mode = ScannedPageMode(payload.get("scannedPageMode", ScannedPageMode.IMAGE.value))
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid import options: {exc}") from exc
    return options, mode


@app.get("/health", response_class=JSONResponse)
async def health() -> dict[str, str]:
    """Lightweight health endpoint for uptime checks."""
    return {"status": "ok"}


@app.get(
    f"{DOCS_PREFIX}/openapi.json",
    include_in_schema=False,
    name="prefixed_openapi",
)
async def prefixed_openapi() -> JSONResponse:
    """Expose the OpenAPI schema under the gateway's ``/api`` prefix."""

    return JSONResponse(app.openapi())


@app.get(f"{DOCS_PREFIX}/docs", include_in_schema=False)
async def prefixed_swagger_ui(request: Request) -> HTMLResponse:
    """Serve Swagger UI from the same ``/api`` prefix used by the gateway."""

    return get_swagger_ui_html(
        openapi_url=str(request.url_for("prefixed_openapi")),
        title=f"{app.title} - Swagger UI",
    )


@app.post(f"{DOCS_PREFIX}/export-pdf", response_class=JSONResponse)
async def export_pdf(request: ExportRequestModel) -> JSONResponse:
    """Build printable HTML for the submitted folios.

    The markup is kept in the export store for an hour and returned for
    client-side rendering.
    """

    if not request.folios:
        return _error(400, "No folios provided for export")

    try:
        document, page_count = build_export_html(request)
    except Exception as exc:
        LOGGER.error("Export rendering failed: %s", exc)
        return _error(500, str(exc) or "Unknown error occurred")

    filename = export_filename(request.metadata.title, int(time.time() * 1000))
    record = export_store.put(
        document,
        filename=filename,
        page_count=page_count,
        quality=request.options.quality,
    )
    LOGGER.info(
        "Stored export %s (%s pages, %s dpi)",
        record.key,
        page_count,
        QUALITY_DPI[ExportQuality(request.options.quality)],
    )

    return JSONResponse(
        {
            "success": True,
            "method": "client-side",
            "html": document,
            "filename": filename,
            "pageCount": page_count,
            "storageKey": record.key,
            "expiresAt": datetime.fromtimestamp(record.expires_at, tz=timezone.utc).isoformat(),
            "metadata": {
                "title": request.metadata.title,
                "author": request.metadata.author,
                "subject": request.metadata.subject,
                "keywords": request.metadata.keywords,
                "creationDate": request.metadata.creation_date,
            },
        },
        headers={"Cache-Control": "no-cache"},
    )


@app.get(f"{DOCS_PREFIX}/export-pdf", response_class=JSONResponse)
async def export_info(key: str | None = None) -> JSONResponse:
    """Return a stored export by ``key``, or the service capabilities."""

    if not key:
        return JSONResponse(CAPABILITIES)

    record = export_store.get(key)
    if record is None:
        return _error(404, "Export not found or expired")
    return JSONResponse(
        {
            "success": True,
            "html": record.html,
            "filename": record.filename,
            "pageCount": record.page_count,
        }
    )


@app.post(f"{DOCS_PREFIX}/import-pdf", response_class=JSONResponse)
async def import_pdf_endpoint(
    file: UploadFile = File(..., description="PDF to import."),
    options: str | None = Form(
        None,
        description="Optional JSON object with import and folio creation options.",
    ),
) -> JSONResponse:
    """Extract pages from an uploaded PDF and convert them into folios."""

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail=f"File '{file.filename}' is empty.")

    import_options, scanned_mode = _build_import_options(_parse_json_mapping(options, field_name="options"))
    result, folios = await run_in_threadpool(_perform_import, contents, import_options, scanned_mode)

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Invalid PDF file.")

    payload = result.to_dict()
    payload["folios"] = [folio.to_dict() for folio in folios]
    payload["summary"] = get_folio_summary(folios)
    return JSONResponse(payload)


def _perform_import(data: bytes, options: ImportOptions, scanned_mode: ScannedPageMode):
    """Run the blocking import pipeline; called from a worker thread."""

    result: PdfImportResult = PdfImportService().import_pdf(data, options)
    if not result.success:
        return result, []
    return result, FolioCreator(scanned_page_mode=scanned_mode).create_folios(result.pages)


__all__ = ["app", "export_store"]
