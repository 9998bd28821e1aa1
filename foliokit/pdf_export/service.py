"""Export orchestration: slots, serialization, submission and progress.

An export moves strictly forward through
``preparing -> [resolving_slots] -> rendering -> generating_pdf ->
finalizing -> complete``. Any failure ends in ``error`` and a cancellation
ends in ``cancelled``. Every step reports through
:attr:`ExportServiceConfig.on_progress` with a percentage that never
decreases.
"""

from __future__ import annotations

import asyncio
import base64
import math
import re
from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence

import httpx

from ..core.config import DEFAULT_EXPORT_API_URL, ExportServiceConfig
from ..core.exceptions import ExportCancelledError, ExportError, FoliokitError, NetworkError
from ..core.model import DataSource, Folio
from ..core.utils import get_logger, now
from .cancellation import CancellationToken
from .renderers import BrowserPrintRenderer, ClientRenderer
from .serializers import FolioSerializer, PlainTextSerializer
from .slots import ResolutionContext, SlotResolver
from .styles import DEFAULT_EXPORT_STYLES
from .types import (
    DEFAULT_EXPORT_OPTIONS,
    ExportFolio,
    ExportOptions,
    ExportProgress,
    ExportRequest,
    ExportResponse,
    ExportStatus,
    PdfMetadata,
)

LOGGER = get_logger("foliokit.pdf_export")

PAGE_COUNT_HEADER = "X-Foliokit-Page-Count"

_FILENAME_PATTERN = re.compile(r"filename\*?=(?:UTF-8'')?\"?([^\";]+)\"?", re.IGNORECASE)


def filename_from_disposition(header: str | None) -> str | None:
    if not header:
        return None
    match = _FILENAME_PATTERN.search(header)
    return match.group(1).strip() if match else None


def filter_folios(folios: Sequence[Folio], options: ExportOptions) -> list[Folio]:
    """Keep the folios whose ``index`` lies inside ``options.page_range``."""

    if options.page_range is None:
        return list(folios)
    return [folio for folio in folios if folio.index in options.page_range]


def _decode_data(raw: Any) -> bytes | None:
    if not raw:
        return None
    text = str(raw)
    if text.startswith("data:"):
        text = text.split(",", 1)[-1]
    return base64.b64decode(text)


class PdfExportService:
    """Export folios through a rendering backend.

    ``serializer`` turns folio content into markup, ``renderer`` handles
    client-rendered replies and ``client`` (an ``httpx.AsyncClient``) is
    used for submissions when given.
    """

    def __init__(
        self,
        config: ExportServiceConfig | None = None,
        *,
        resolver: SlotResolver | None = None,
        serializer: FolioSerializer | None = None,
        renderer: ClientRenderer | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ExportServiceConfig()
        self.slot_resolver = resolver or SlotResolver()
        self.serializer: FolioSerializer = serializer or PlainTextSerializer()
        self.renderer: ClientRenderer = renderer or BrowserPrintRenderer()
        self._client = client
        self._token: CancellationToken | None = None
        self._last_percentage = 0

    @property
    def in_progress(self) -> bool:
        return self._token is not None

    def cancel(self) -> None:
        """Cancel the running export, if any."""

        if self._token is not None:
            LOGGER.info("Export cancellation requested")
            self._token.cancel()

    async def export_to_pdf(
        self,
        folios: Sequence[Folio],
        options: ExportOptions | Mapping[str, Any] | None = None,
        metadata: PdfMetadata | Mapping[str, Any] | None = None,
        *,
        user_values: Mapping[str, str] | None = None,
        data_sources: Iterable[DataSource] = (),
    ) -> ExportResponse:
        token = CancellationToken()
        self._token = token
        self._last_percentage = 0
        total = len(folios)

        try:
            merged_options = (
                options if isinstance(options, ExportOptions) else DEFAULT_EXPORT_OPTIONS.merged(options)
            )
            stamp = now()
            base_metadata = metadata if isinstance(metadata, PdfMetadata) else PdfMetadata.from_dict(metadata)
            merged_metadata = replace(base_metadata, creation_date=stamp, modification_date=stamp)

            self._report(ExportStatus.PREPARING, 5, "Preparing document for export...", 0, total)
            export_folios = filter_folios(folios, merged_options)
            count = len(export_folios)

            resolved_slots: dict[str, str] = {}
            if merged_options.resolve_slots:
                self._report(ExportStatus.RESOLVING_SLOTS, 15, "Resolving document slots...", 0, count)
                resolved_slots = await self._resolve_slots(
                    export_folios, merged_metadata, user_values or {}, list(data_sources)
                )
            token.raise_if_cancelled()

            self._report(ExportStatus.RENDERING, 30, "Rendering pages...", 0, count)
            serialized = self._serialize(export_folios, merged_options)
            request = ExportRequest(
                folios=serialized,
                options=merged_options,
                metadata=merged_metadata,
                resolved_slots=resolved_slots,
            )

            self._report(ExportStatus.GENERATING_PDF, 60, "Generating PDF...", count, count)
            response = await self._submit(request, token)

            self._report(ExportStatus.FINALIZING, 90, "Finalizing export...", count, count)
            if response.is_client_rendered:
                response = await self._render_client_side(response)

            self._report(ExportStatus.COMPLETE, 100, "Export complete!", count, count)
            LOGGER.info("Exported %s folios as %s", count, response.filename)
            return response
        except ExportCancelledError as exc:
            self._report(ExportStatus.CANCELLED, self._last_percentage, exc.message, 0, total, error=exc.message)
            return ExportResponse(success=False, error=exc.message, cancelled=True)
        except Exception as exc:
            message = exc.message if isinstance(exc, FoliokitError) else str(exc) or "Unknown error occurred"
            LOGGER.error("Export failed: %s", message)
            self._report(ExportStatus.ERROR, self._last_percentage, message, 0, total, error=message)
            return ExportResponse(success=False, error=message)
        finally:
            self._token = None

    async def _resolve_slots(
        self,
        folios: Sequence[Folio],
        metadata: PdfMetadata,
        user_values: Mapping[str, str],
        data_sources: list[DataSource],
    ) -> dict[str, str]:
        slots = [slot for folio in folios for slot in folio.slots]
        context = ResolutionContext(
            document_id=metadata.title,
            page_number=1,
            total_pages=len(folios),
            metadata={
                "title": metadata.title,
                "author": metadata.author,
                "subject": metadata.subject,
                "version": "1.0",
            },
            data_sources=data_sources,
            user_values=user_values,
            now=metadata.creation_date or now(),
        )
        result = await self.slot_resolver.resolve_all(slots, context)
        for error in result.errors:
            LOGGER.warning("Slot %s fell back to its placeholder: %s", error.slot_id, error.error)
        return result.values

    def _serialize(self, folios: Sequence[Folio], options: ExportOptions) -> list[ExportFolio]:
        serialized: list[ExportFolio] = []
        count = len(folios)
        for position, folio in enumerate(folios):
            self._report(
                ExportStatus.RENDERING,
                30 + math.floor(position / count * 30),
                f"Rendering page {position + 1} of {count}...",
                position + 1,
                count,
            )
            serialized.append(
                ExportFolio(
                    id=folio.id,
                    index=folio.index,
                    orientation=folio.orientation,
                    html_content=self.serializer(folio, options),
                    css_styles=DEFAULT_EXPORT_STYLES,
                )
            )
        return serialized

    async def _submit(self, request: ExportRequest, token: CancellationToken) -> ExportResponse:
        attempts = self.config.retry_count + 1
        last_error: ExportError | None = None
        for attempt in range(1, attempts + 1):
            token.raise_if_cancelled()
            try:
                return await token.run(self._post(request))
            except NetworkError as exc:
                last_error = exc
                LOGGER.warning("Export attempt %s/%s failed: %s", attempt, attempts, exc.message)
            if attempt < attempts:
                await token.sleep(self.config.retry_delay * attempt)
        raise last_error or ExportError()

    async def _post(self, request: ExportRequest) -> ExportResponse:
        payload = request.to_dict()
        try:
            if self._client is not None:
                response = await self._client.post(self.config.api_url, json=payload, timeout=self.config.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    response = await client.post(self.config.api_url, json=payload)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Export request failed: {exc}") from exc

        if response.is_error:
            raise NetworkError(f"API request failed: {response.status_code}")
        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> ExportResponse:
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/pdf"):
            page_count = response.headers.get(PAGE_COUNT_HEADER)
            return ExportResponse(
                success=True,
                data=response.content,
                filename=filename_from_disposition(response.headers.get("content-disposition")),
                page_count=int(page_count) if page_count and page_count.isdigit() else None,
                file_size=len(response.content),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ExportError("Export backend returned an unreadable response") from exc
        if not isinstance(body, Mapping):
            raise ExportError("Export backend returned an unreadable response")
        if not body.get("success"):
            raise ExportError(str(body.get("error") or "Failed to export PDF"))

        data = _decode_data(body.get("data"))
        return ExportResponse(
            success=True,
            filename=body.get("filename"),
            page_count=body.get("pageCount"),
            data=data,
            html=body.get("html"),
            file_size=body.get("fileSize") or (len(data) if data else None),
            storage_key=body.get("storageKey"),
        )

    async def _render_client_side(self, response: ExportResponse) -> ExportResponse:
        filename = response.filename or "document.pdf"
        output = await asyncio.to_thread(self.renderer, response.html or "", filename)
        LOGGER.debug("Client-side rendering wrote %s", output)
        return ExportResponse(
            success=True,
            filename=filename,
            page_count=response.page_count,
            storage_key=response.storage_key,
        )

    def _report(
        self,
        status: ExportStatus,
        percentage: int,
        message: str,
        current_page: int,
        total_pages: int,
        *,
        error: str | None = None,
    ) -> None:
        self._last_percentage = max(self._last_percentage, percentage)
        progress = ExportProgress(
            status=status,
            percentage=self._last_percentage,
            message=message,
            current_page=current_page,
            total_pages=total_pages,
            error=error,
        )
        LOGGER.debug("Export progress %s %s%%", status.value, progress.percentage)
        self.config.on_progress(progress)


async def export_to_pdf(
    folios: Sequence[Folio],
    *,
    api_url: str = DEFAULT_EXPORT_API_URL,
    options: ExportOptions | Mapping[str, Any] | None = None,
    metadata: PdfMetadata | Mapping[str, Any] | None = None,
    on_progress=None,
    **service_kwargs: Any,
) -> ExportResponse:
    """Run a single export with a throwaway :class:`PdfExportService`."""

    config = ExportServiceConfig(api_url=api_url, on_progress=on_progress)
    service = PdfExportService(config, **service_kwargs)
    return await service.export_to_pdf(folios, options, metadata)


__all__ = [
    "PAGE_COUNT_HEADER",
    "PdfExportService",
    "export_to_pdf",
    "filename_from_disposition",
    "filter_folios",
]
