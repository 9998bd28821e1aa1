"""Resolve slot placeholders into export strings.

Resolution walks an ordered chain of strategies and stops at the first one
that produces a value:

1. the value cache, keyed by ``(slot id, page number)``
2. a user override from the resolution context
3. the value already stored on a filled slot
4. type-specific resolution
5. the slot's default value, else ``""``

Only values produced by steps 4 and 5 are cached.

``at_fetcher`` fetches are deduplicated through a per-resolver map from
:class:`FetchKey` to the :class:`asyncio.Task` performing the fetch. The task
is stored before the first ``await`` so concurrent slots that reference the
same field share one request and observe the same result or failure.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import httpx

from ..core.exceptions import ConfigurationError, FoliokitError, SlotResolutionError
from ..core.model import DataSource, DataSourceKind, Slot, SlotType
from ..core.utils import get_logger, get_nested_value, now, stringify_value
from .builtins import parse_builtin_field, resolve_builtin
from .fetchers import DEFAULT_FETCH_TIMEOUT, FetcherRegistry
from .fetchers import registry as default_fetchers

LOGGER = get_logger("foliokit.pdf_export.slots")


@dataclass(frozen=True)
class FetchKey:
    source_id: str
    field_path: str


@dataclass
class ResolutionContext:
    """Snapshot of everything a resolution pass may read."""

    document_id: str = ""
    page_number: int = 1
    total_pages: int = 1
    metadata: Mapping[str, Any] = field(default_factory=dict)
    data_sources: Sequence[DataSource] = field(default_factory=list)
    user_values: Mapping[str, str] = field(default_factory=dict)
    now: datetime = field(default_factory=now)


@dataclass(frozen=True)
class SlotError:
    slot_id: str
    error: str


@dataclass(frozen=True)
class SlotWarning:
    slot_id: str
    message: str


@dataclass
class ResolutionResult:
    values: Dict[str, str] = field(default_factory=dict)
    errors: List[SlotError] = field(default_factory=list)
    warnings: List[SlotWarning] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "values": dict(self.values),
            "errors": [{"slotId": item.slot_id, "error": item.error} for item in self.errors],
            "warnings": [{"slotId": item.slot_id, "message": item.message} for item in self.warnings],
        }


def parse_source_reference(source: str) -> tuple[str, str]:
    """Split ``@sourceId.path`` or ``@sourceId/segment.path``.

    The source id runs up to the first ``.`` or ``/``; any ``/`` left in the
    remaining path becomes a ``.`` separator.
    """

    reference = source.strip().lstrip("@")
    for index, char in enumerate(reference):
        if char in "./":
            return reference[:index], reference[index + 1 :].replace("/", ".")
    return reference, ""


def fallback_value(slot: Slot) -> str:
    """Text used in place of a slot whose resolution failed."""

    return slot.metadata.placeholder or f"[{slot.metadata.label or slot.id}]"


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, FoliokitError):
        return exc.message
    return str(exc) or "Unknown error"


Strategy = Callable[[Slot, ResolutionContext, List[str]], Awaitable[Optional[str]]]


class SlotResolver:
    """Resolve slots against a :class:`ResolutionContext`.

    Both caches live as long as the resolver. Call :meth:`clear_cache` or use
    a new resolver to force fresh values.
    """

    def __init__(
        self,
        data_sources: Iterable[DataSource] = (),
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        fetchers: FetcherRegistry | None = None,
    ) -> None:
        self._data_sources: Dict[str, DataSource] = {}
        self._cache: Dict[tuple[str, int], str] = {}
        self._fetch_cache: Dict[FetchKey, asyncio.Task] = {}
        self._client = client
        self.timeout = timeout
        self.fetchers = fetchers or default_fetchers
        for source in data_sources:
            self.register_data_source(source)

        self._type_resolvers: Dict[SlotType, Callable[..., Awaitable[Optional[str]]]] = {
            SlotType.DYNAMIC_CONTENT: self._resolve_dynamic_content,
            SlotType.AT_FETCHER: self._resolve_at_fetcher,
            SlotType.DONNEE: self._resolve_donnee,
            SlotType.ANCRE: self._resolve_structural,
            SlotType.SECTION_SPECIALE: self._resolve_structural,
            SlotType.COMMENTAIRE: self._resolve_structural,
        }
        self.strategies: List[Strategy] = [
            self._from_cache,
            self._from_user_values,
            self._from_stored_value,
            self._computed,
        ]

    @property
    def data_sources(self) -> Mapping[str, DataSource]:
        return dict(self._data_sources)

    def register_data_source(self, source: DataSource) -> None:
        self._data_sources[source.id] = source

    def clear_cache(self) -> None:
        self._cache.clear()
        self._fetch_cache.clear()

    async def resolve_slot(self, slot: Slot, context: ResolutionContext) -> str:
        """Resolve ``slot``; failures degrade to :func:`fallback_value`."""

        try:
            return await self._resolve(slot, context, [])
        except Exception as exc:
            LOGGER.warning("Slot %s could not be resolved: %s", slot.id, _error_message(exc))
            return fallback_value(slot)

    async def resolve_all(self, slots: Sequence[Slot], context: ResolutionContext) -> ResolutionResult:
        """Resolve every slot concurrently.

        The returned ``values`` hold one entry per slot. A failing slot gets
        its fallback text and an entry in ``errors`` without affecting the
        others.
        """

        result = ResolutionResult()
        if not slots:
            return result

        notes: List[List[str]] = [[] for _ in slots]
        outcomes = await asyncio.gather(
            *(self._resolve(slot, context, slot_notes) for slot, slot_notes in zip(slots, notes)),
            return_exceptions=True,
        )
        for slot, outcome, slot_notes in zip(slots, outcomes, notes):
            if isinstance(outcome, BaseException):
                message = _error_message(outcome)
                LOGGER.warning("Slot %s could not be resolved: %s", slot.id, message)
                result.errors.append(SlotError(slot.id, message))
                result.values[slot.id] = fallback_value(slot)
            else:
                result.values[slot.id] = outcome
            result.warnings.extend(SlotWarning(slot.id, note) for note in slot_notes)

        LOGGER.info(
            "Resolved %s slots (%s errors, %s warnings)",
            len(slots),
            len(result.errors),
            len(result.warnings),
        )
        return result

    async def _resolve(self, slot: Slot, context: ResolutionContext, notes: List[str]) -> str:
        for strategy in self.strategies:
            value = await strategy(slot, context, notes)
            if value is not None:
                return value
        return ""

    async def _from_cache(self, slot: Slot, context: ResolutionContext, notes: List[str]) -> Optional[str]:
        return self._cache.get((slot.id, context.page_number))

    async def _from_user_values(self, slot: Slot, context: ResolutionContext, notes: List[str]) -> Optional[str]:
        return context.user_values.get(slot.id) or None

    async def _from_stored_value(self, slot: Slot, context: ResolutionContext, notes: List[str]) -> Optional[str]:
        if slot.is_filled and slot.value:
            return slot.value
        return None

    async def _computed(self, slot: Slot, context: ResolutionContext, notes: List[str]) -> str:
        resolver = self._type_resolvers.get(slot.type)
        value = await resolver(slot, context, notes) if resolver is not None else None
        if value is None:
            value = slot.metadata.default_value or ""
        self._cache[(slot.id, context.page_number)] = value
        return value

    async def _resolve_dynamic_content(
        self, slot: Slot, context: ResolutionContext, notes: List[str]
    ) -> Optional[str]:
        label = slot.metadata.label
        builtin = parse_builtin_field(label)
        if builtin is not None:
            return resolve_builtin(builtin, context)
        if label and context.metadata.get(label):
            return stringify_value(context.metadata[label])
        return None

    async def _resolve_at_fetcher(
        self, slot: Slot, context: ResolutionContext, notes: List[str]
    ) -> Optional[str]:
        if not slot.metadata.source:
            raise SlotResolutionError("No source specified for at_fetcher slot", slot_id=slot.id)

        source_id, path = parse_source_reference(slot.metadata.source)
        field_path = slot.metadata.field or path
        source = self._find_source(source_id, context)
        if source is None:
            raise ConfigurationError(f"Data source not found: {source_id}", slot_id=slot.id)

        data = await self._fetch(source, field_path)
        if data is None:
            notes.append(f"No value returned by '{source_id}' for '{field_path}'")
            return None
        return stringify_value(data)

    async def _resolve_donnee(
        self, slot: Slot, context: ResolutionContext, notes: List[str]
    ) -> Optional[str]:
        field_path = slot.metadata.field
        if not field_path:
            return None

        value = get_nested_value(context.metadata, field_path)
        if value is not None:
            return stringify_value(value)

        for source in self._static_sources(context):
            value = get_nested_value(source.data, field_path)
            if value is not None:
                return stringify_value(value)
        return None

    async def _resolve_structural(
        self, slot: Slot, context: ResolutionContext, notes: List[str]
    ) -> Optional[str]:
        # Anchors, special sections and comments never render as text.
        return ""

    def _find_source(self, source_id: str, context: ResolutionContext) -> DataSource | None:
        source = self._data_sources.get(source_id)
        if source is not None:
            return source
        return next((item for item in context.data_sources if item.id == source_id), None)

    def _static_sources(self, context: ResolutionContext) -> Iterable[DataSource]:
        seen: set[str] = set()
        for source in [*context.data_sources, *self._data_sources.values()]:
            if source.id in seen or source.kind is not DataSourceKind.STATIC or not source.data:
                continue
            seen.add(source.id)
            yield source

    async def _fetch(self, source: DataSource, field_path: str) -> Any:
        key = FetchKey(source.id, field_path)
        task = self._fetch_cache.get(key)
        if task is None:
            fetcher = self.fetchers.get(source.kind)
            task = asyncio.ensure_future(fetcher(source, field_path, client=self._client, timeout=self.timeout))
            self._fetch_cache[key] = task
        else:
            LOGGER.debug("Reusing in-flight fetch for %s:%s", source.id, field_path)
        return await task


__all__ = [
    "FetchKey",
    "ResolutionContext",
    "ResolutionResult",
    "SlotError",
    "SlotResolver",
    "SlotWarning",
    "fallback_value",
    "parse_source_reference",
]
