"""Cooperative cancellation for export calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from ..core.exceptions import ExportCancelledError

T = TypeVar("T")


class CancellationToken:
    """One-shot flag shared by an export call and whoever may cancel it."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ExportCancelledError()

    async def sleep(self, delay: float) -> None:
        """Wait ``delay`` seconds, raising as soon as the token is cancelled."""

        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise ExportCancelledError()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        On cancellation the pending operation is cancelled and
        :class:`ExportCancelledError` is raised.
        """

        operation = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({operation, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            operation.cancel()
            raise
        finally:
            waiter.cancel()
        if operation.done():
            return operation.result()
        operation.cancel()
        await asyncio.wait({operation})
        raise ExportCancelledError()


__all__ = ["CancellationToken"]
