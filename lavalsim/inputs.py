"""Sources a core can read values from."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque

from .errors import require


class Fetchable(ABC):
    """Anything a core multiplexer can point to."""

    @abstractmethod
    def get_from(self, carry: bool) -> tuple[bool, int] | None:
        """Return ``(negative, value)`` if a value is offered, else None."""


class Input(Fetchable):
    """A queue of values fed from outside the machine."""

    def __init__(self, lock: threading.Lock | None = None) -> None:
        self._lock = lock if lock is not None else threading.Lock()
        self._queue: deque[int] = deque()

    def put(self, value: int) -> None:
        self._queue.append(value)

    def get_from(self, carry: bool) -> tuple[bool, int] | None:
        require(not carry, "Cannot get carry from input")

        with self._lock:
            if not self._queue:
                return None
            # The newest value is delivered while the oldest one is dropped.
            value = self._queue[-1]
            self._queue.popleft()
            return (False, value)