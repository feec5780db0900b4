"""A small, convenient view on the values of a session."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional


class Session:
    """Session values with a hook that persists them.

    ``saver`` is called with the values mapping when :meth:`save` runs.
    """

    def __init__(
        self,
        values: Optional[Dict[Any, Any]] = None,
        saver: Optional[Callable[[Dict[Any, Any]], Any]] = None,
    ) -> None:
        self.values: Dict[Any, Any] = {} if values is None else values
        self._saver = saver

    def save(self) -> None:
        """Persist the current session."""
        if self._saver is not None:
            self._saver(self.values)

    def get(self, name: Any) -> Any:
        """Return the value stored under ``name``, or None."""
        return self.values.get(name)

    def get_once(self, name: Any) -> Any:
        """Return the value under ``name`` and remove it, or None if absent."""
        return self.values.pop(name, None)

    def set(self, name: Any, value: Any) -> None:
        """Store ``value`` under ``name``, replacing any earlier value."""
        self.values[name] = value

    def delete(self, name: Any) -> None:
        """Remove ``name`` from the session."""
        self.values.pop(name, None)

    def clear(self) -> None:
        """Remove every value from the session."""
        self.values.clear()