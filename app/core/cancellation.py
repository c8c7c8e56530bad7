"""Cooperative cancellation for long-running discovery runs."""

import asyncio

from app.core.errors import DiscoveryCancelledError


class CancellationToken:
    """Set once by the caller; checked by the run before each network call."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise DiscoveryCancelledError(self.reason or "cancelled")
