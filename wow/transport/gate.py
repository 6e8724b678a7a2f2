import threading


class ConnectionGate:
    """
    Admission accounting for in-flight connections.

    One condition guards both the draining latch and the live counter, so an
    admission can never slip in after drain() has started waiting.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._draining = False
        self._active = 0

    @property
    def draining(self) -> bool:
        with self._cond:
            return self._draining

    @property
    def active(self) -> int:
        with self._cond:
            return self._active

    def try_admit(self) -> bool:
        with self._cond:
            if self._draining:
                return False
            self._active += 1
            return True

    def release(self) -> None:
        with self._cond:
            if self._active == 0:
                raise RuntimeError("release() called without a matching admission")
            self._active -= 1
            if self._active == 0:
                self._cond.notify_all()

    def drain(self, timeout: float | None = None) -> bool:
        """Stop admissions and wait for in-flight connections; False on timeout."""
        with self._cond:
            self._draining = True
            return self._cond.wait_for(lambda: self._active == 0, timeout)
