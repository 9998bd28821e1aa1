"""Fetch strategies for ``at_fetcher`` data sources.

Each :class:`~foliokit.core.model.DataSourceKind` maps to one coroutine
function registered with :func:`register_fetcher`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Awaitable, Callable, Dict, Iterable

import httpx

from ..core.exceptions import ConfigurationError, SlotResolutionError
from ..core.model import DataSource, DataSourceKind
from ..core.utils import get_logger, get_nested_value

LOGGER = get_logger("foliokit.pdf_export.fetchers")

DEFAULT_FETCH_TIMEOUT = 10.0

Fetcher = Callable[..., Awaitable[Any]]


class FetcherRegistry:
    """Registry of fetch coroutines keyed by data source kind."""

    def __init__(self) -> None:
        self._fetchers: Dict[DataSourceKind, Fetcher] = {}

    def register(self, kind: DataSourceKind, fetcher: Fetcher) -> None:
        if kind in self._fetchers:
            raise ValueError(f"Fetcher for '{kind.value}' is already registered")
        self._fetchers[kind] = fetcher

    def get(self, kind: DataSourceKind) -> Fetcher:
        try:
            return self._fetchers[kind]
        except KeyError as exc:
            known = ", ".join(item.value for item in self.kinds()) or "none"
            raise ConfigurationError(
                f"No fetcher registered for '{kind.value}' sources (registered: {known})"
            ) from exc

    def kinds(self) -> Iterable[DataSourceKind]:
        return sorted(self._fetchers, key=lambda kind: kind.value)


registry = FetcherRegistry()


def register_fetcher(kind: DataSourceKind):
    def decorator(func: Fetcher) -> Fetcher:
        registry.register(kind, func)
        return func

    return decorator


def build_api_url(source: DataSource, field_path: str) -> str:
    if not source.base_url:
        raise ConfigurationError(f"No base URL for API source '{source.id}'")
    return f"{source.base_url.rstrip('/')}/{field_path.replace('.', '/')}"


@register_fetcher(DataSourceKind.STATIC)
async def fetch_static(
    source: DataSource,
    field_path: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> Any:
    return get_nested_value(source.data or {}, field_path)


@register_fetcher(DataSourceKind.API)
async def fetch_api(
    source: DataSource,
    field_path: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> Any:
    """GET ``base_url/<field path with dots as slashes>``.

    The field path is looked up again inside the JSON body. A scalar body is
    taken as the value itself.
    """

    url = build_api_url(source, field_path)
    headers = {"Content-Type": "application/json"}
    if source.auth_token:
        headers["Authorization"] = f"Bearer {source.auth_token}"

    LOGGER.debug("Fetching %s for source %s", url, source.id)
    try:
        if client is not None:
            response = await client.get(url, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned_client:
                response = await owned_client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        raise SlotResolutionError(f"API request failed: {exc}") from exc

    if response.is_error:
        raise SlotResolutionError(f"API request failed: {response.status_code}")
    try:
        payload = response.json()
    except ValueError as exc:
        raise SlotResolutionError(f"API response for '{source.id}' is not valid JSON") from exc

    if isinstance(payload, Mapping) or (isinstance(payload, Sequence) and not isinstance(payload, str)):
        return get_nested_value(payload, field_path)
    return payload


@register_fetcher(DataSourceKind.DATABASE)
async def fetch_database(
    source: DataSource,
    field_path: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> Any:
    # Database sources need a server-side connector; none is wired in.
    LOGGER.debug("Database source %s is not connected; returning no value", source.id)
    return None


__all__ = [
    "DEFAULT_FETCH_TIMEOUT",
    "FetcherRegistry",
    "build_api_url",
    "fetch_api",
    "fetch_database",
    "fetch_static",
    "register_fetcher",
    "registry",
]
