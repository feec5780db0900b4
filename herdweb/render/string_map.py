"""A thread-safe mapping of strings to strings."""

from __future__ import annotations

import threading
from typing import Dict, Iterator, List, Optional, Tuple


class StringMap:
    """Thread-safe map whose keys and values are strings."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def store(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any earlier value."""
        with self._lock:
            self._data[key] = value

    def load(self, key: str) -> Optional[str]:
        """Return the value for ``key``, or None when it is absent."""
        with self._lock:
            return self._data.get(key)

    def load_or_store(self, key: str, value: str) -> str:
        """Return the existing value for ``key``, storing ``value`` if there is none."""
        with self._lock:
            return self._data.setdefault(key, value)

    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""
        with self._lock:
            self._data.pop(key, None)

    def items(self) -> Iterator[Tuple[str, str]]:
        """Iterate over a snapshot of the key/value pairs."""
        with self._lock:
            snapshot = list(self._data.items())
        return iter(snapshot)

    def keys(self) -> List[str]:
        """Return the keys in sorted order."""
        with self._lock:
            return sorted(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)