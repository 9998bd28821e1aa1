"""Configuration objects for foliokit services."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from .utils import update_dict

ENV_PREFIX = "FOLIOKIT_"

DEFAULT_EXPORT_API_URL = "http://localhost:8000/api/export-pdf"


def _noop(_progress: Any) -> None:
    return None


@dataclass
class ExportServiceConfig:
    """Settings for :class:`foliokit.pdf_export.service.PdfExportService`.

    ``retry_delay`` is the base of the linear backoff: attempt ``n`` waits
    ``retry_delay * n`` seconds before the next submission.
    """

    api_url: str = DEFAULT_EXPORT_API_URL
    timeout: float = 60.0
    retry_count: int = 2
    retry_delay: float = 1.0
    on_progress: Callable[[Any], None] = field(default=_noop)

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must not be negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.on_progress is None:
            self.on_progress = _noop

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "ExportServiceConfig":
        """Build a configuration from ``FOLIOKIT_EXPORT_*`` variables."""

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        update_dict(
            values,
            api_url=env.get(f"{ENV_PREFIX}EXPORT_API_URL"),
            timeout=_parse_number(env.get(f"{ENV_PREFIX}EXPORT_TIMEOUT"), float),
            retry_count=_parse_number(env.get(f"{ENV_PREFIX}EXPORT_RETRY_COUNT"), int),
            retry_delay=_parse_number(env.get(f"{ENV_PREFIX}EXPORT_RETRY_DELAY"), float),
        )
        update_dict(values, **overrides)
        return cls(**values)


def _parse_number(raw: str | None, kind: type) -> Any:
    if raw is None or not raw.strip():
        return None
    try:
        return kind(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid numeric configuration value: {raw!r}") from exc


__all__ = ["DEFAULT_EXPORT_API_URL", "ENV_PREFIX", "ExportServiceConfig"]
