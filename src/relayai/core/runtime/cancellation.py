from __future__ import annotations

import threading
import time

from relayai.core.runtime.errors import CancellationError


class CancelToken:
    """Cooperative cancellation with an optional deadline.

    Pass one token to ``AIDispatcher.send_request`` and call ``cancel()`` from
    another thread to stop a retry loop. Backoff sleeps wake up immediately.
    """

    def __init__(self, *, timeout_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout_seconds if timeout_seconds is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError("request cancelled by caller")
        if self.expired:
            raise CancellationError("request deadline exceeded")

    def sleep(self, seconds: float) -> None:
        self.raise_if_cancelled()
        remaining = self.remaining()
        wait_for = seconds if remaining is None else min(seconds, remaining)
        self._event.wait(max(0.0, wait_for))
        self.raise_if_cancelled()
