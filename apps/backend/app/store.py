"""In-memory storage for rendered exports."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional

EXPORT_TTL_SECONDS = 3600


@dataclass(frozen=True)
class StoredExport:
    key: str
    html: str
    filename: str
    page_count: int
    quality: str
    created_at: float
    expires_at: float


class ExportStore:
    """Keep export markup for a limited time, keyed by a random storage key."""

    def __init__(self, ttl: float = EXPORT_TTL_SECONDS, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self._clock = clock
        self._items: Dict[str, StoredExport] = {}
        self._lock = Lock()

    def put(self, html: str, *, filename: str, page_count: int, quality: str) -> StoredExport:
        created = self._clock()
        record = StoredExport(
            key=f"exports/temp/{uuid.uuid4()}.html",
            html=html,
            filename=filename,
            page_count=page_count,
            quality=quality,
            created_at=created,
            expires_at=created + self.ttl,
        )
        with self._lock:
            self._purge_expired(created)
            self._items[record.key] = record
        return record

    def get(self, key: str) -> Optional[StoredExport]:
        """Return the export stored under ``key`` unless it has expired."""

        with self._lock:
            record = self._items.get(key)
            if record is None:
                return None
            if record.expires_at <= self._clock():
                self._items.pop(key, None)
                return None
            return record

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _purge_expired(self, moment: float) -> None:
        expired = [key for key, record in self._items.items() if record.expires_at <= moment]
        for key in expired:
            self._items.pop(key, None)


__all__ = ["EXPORT_TTL_SECONDS", "ExportStore", "StoredExport"]
