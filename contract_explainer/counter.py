"""Process-wide counter with get, increment and set."""

from __future__ import annotations

import threading


class Counter:
    """A non-negative integer guarded by a lock."""

    def __init__(self, value: int = 0) -> None:
        if value < 0:
            raise ValueError("counter value must be non-negative")
        self._value = value
        self._lock = threading.Lock()

    def get(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        """Add one and return the new value."""

        with self._lock:
            self._value += 1
            return self._value

    def set(self, value: int) -> int:
        """Replace the value and return it.

        Raises:
            ValueError: If ``value`` is negative.
        """

        if value < 0:
            raise ValueError("counter value must be non-negative")
        with self._lock:
            self._value = value
            return self._value
