"""
Cooperative cancellation for blocking and CPU-bound work.

A CancelToken is fired either explicitly (``cancel()``) or by reaching its
deadline. Long-running loops poll ``raise_if_done()``; blocking socket code
reads ``remaining()`` to bound its timeouts and registers a callback to be
woken on explicit cancellation.
"""

import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime

from wow.errors import WowError


class ContextError(WowError):
    """Work was stopped by its cancel token."""


class Cancelled(ContextError):
    def __init__(self, message: str = "operation cancelled"):
        super().__init__(message)


class DeadlineExceeded(ContextError, TimeoutError):
    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message)


def monotonic_deadline(deadline: datetime) -> float:
    """Translate a wall-clock deadline into the monotonic clock."""
    remaining = (deadline - datetime.now(UTC)).total_seconds()
    return time.monotonic() + remaining


class CancelToken:
    def __init__(
        self,
        *,
        timeout: float | None = None,
        deadline: datetime | None = None,
        parent: "CancelToken | None" = None,
    ):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._parent = parent

        limits = []
        if timeout is not None:
            limits.append(time.monotonic() + timeout)
        if deadline is not None:
            limits.append(monotonic_deadline(deadline))
        self._deadline = min(limits) if limits else None

        if parent is not None:
            parent.add_callback(self.cancel)

    def child(
        self, *, timeout: float | None = None, deadline: datetime | None = None
    ) -> "CancelToken":
        """Derive a token that fires with this one or at its own deadline."""
        return CancelToken(timeout=timeout, deadline=deadline, parent=self)

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            callback()

    def detach(self) -> None:
        """Stop following the parent; call when a derived token is no longer used."""
        if self._parent is not None:
            self._parent.remove_callback(self.cancel)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once on explicit cancellation (immediately if already fired)."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    @property
    def deadline(self) -> float | None:
        """Effective monotonic deadline, including the parents'."""
        own = self._deadline
        inherited = self._parent.deadline if self._parent is not None else None
        if own is None:
            return inherited
        if inherited is None:
            return own
        return min(own, inherited)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        deadline = self.deadline
        return deadline is not None and time.monotonic() >= deadline

    @property
    def done(self) -> bool:
        return self._event.is_set() or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    def raise_if_done(self) -> None:
        # Explicit cancellation takes precedence over an elapsed deadline
        if self._event.is_set():
            raise Cancelled()
        if self.expired:
            raise DeadlineExceeded()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until explicitly cancelled; True if that happened."""
        return self._event.wait(timeout)
