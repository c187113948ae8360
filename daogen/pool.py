"""A token pool that bounds how many tasks run at once."""

from __future__ import annotations

import threading


class Pool:
    """Hands out at most ``size`` tokens; a negative size means no limit."""

    def __init__(self, size: int) -> None:
        self._limited = size >= 0
        self._size = size if self._limited else 0
        self._taken = 0
        self._pending = 0
        self._cond = threading.Condition()

    def wait(self) -> None:
        """Take a token, blocking while all tokens are in use."""
        if not self._limited:
            return
        with self._cond:
            self._pending += 1
            while self._taken >= self._size:
                self._cond.wait()
            self._taken += 1

    def done(self) -> None:
        """Return a token."""
        if not self._limited:
            return
        with self._cond:
            while self._taken == 0:
                self._cond.wait()
            self._taken -= 1
            self._pending -= 1
            self._cond.notify_all()

    def num(self) -> int:
        """Number of tokens currently handed out."""
        with self._cond:
            return self._taken if self._limited else 0

    def size(self) -> int:
        """Total number of tokens."""
        return self._size

    def wait_all(self) -> None:
        """Block until every token taken has been returned."""
        with self._cond:
            while self._pending > 0:
                self._cond.wait()

    def async_wait_all(self) -> threading.Event:
        """Return an event that is set once every token has been returned."""
        event = threading.Event()

        def _watch() -> None:
            self.wait_all()
            event.set()

        threading.Thread(target=_watch, daemon=True).start()
        return event

    def __enter__(self) -> Pool:
        self.wait()
        return self

    def __exit__(self, *exc: object) -> None:
        self.done()