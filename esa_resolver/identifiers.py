"""Process-wide unique unit identifiers."""

from __future__ import annotations

import threading
from pathlib import Path


class IdentifierSource:
    """Monotonic counter safe under concurrent ``next_id`` calls."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    @classmethod
    def continuing(cls, data_dir: Path) -> IdentifierSource:
        """Start after the highest numbered working directory under ``data_dir``."""
        highest = 0
        if data_dir.is_dir():
            for child in data_dir.iterdir():
                if child.is_dir() and child.name.isdigit():
                    highest = max(highest, int(child.name))
        return cls(start=highest + 1)

    def next_id(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
        return value

    def peek(self) -> int:
        """Return the identifier the next call will issue."""
        with self._lock:
            return self._next
