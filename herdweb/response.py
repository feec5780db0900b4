"""A response writer that records the status and size it was given."""

from __future__ import annotations

import logging
from typing import Any

_log = logging.getLogger("herdweb.response")


class Response:
    """Wraps a response writer and captures its status code and body size.

    The wrapped writer needs ``write_header(code)`` and ``write(bytes)``;
    ``headers`` and ``flush()`` are passed through when it has them.
    """

    def __init__(self, writer: Any) -> None:
        self.writer = writer
        self.status = 0
        self.size = 0

    @property
    def headers(self) -> Any:
        return self.writer.headers

    def write_header(self, code: int) -> None:
        """Set the status code; a second, different code is ignored with a warning."""
        if code == self.status:
            return
        if self.status > 0:
            _log.warning(
                "Headers were already written. Wanted to override status code %d with %d",
                self.status,
                code,
            )
            return
        self.status = code
        self.writer.write_header(code)

    def write(self, data: bytes) -> Any:
        """Write part of the body, recording its size."""
        self.size = len(data)
        return self.writer.write(data)

    def flush(self) -> None:
        """Flush the wrapped writer if it can be flushed."""
        flush = getattr(self.writer, "flush", None)
        if callable(flush):
            flush()