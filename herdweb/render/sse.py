"""Server-sent events for browser EventSource objects."""

from __future__ import annotations

from typing import Any

from herdweb.render.formats import _marshal
from herdweb.render.renderer import RenderError


class EventSource:
    """Streams typed JSON messages to a flushable response.

    The response needs ``headers``, ``write(bytes)`` and ``flush()``.
    """

    def __init__(self, response: Any) -> None:
        if not callable(getattr(response, "flush", None)):
            raise RenderError("streaming is not supported")
        self.response = response
        headers = response.headers
        headers["Content-Type"] = "text/event-stream"
        headers["Cache-Control"] = "no-cache"
        headers["Connection"] = "keep-alive"
        headers["Access-Control-Allow-Origin"] = "*"

    def write(self, event_type: str, data: Any) -> None:
        """Send one message of ``event_type`` carrying ``data`` and flush it."""
        payload = _marshal({"data": data, "type": event_type})
        self.response.write(f"data: {payload}\n\n".encode("utf-8"))
        self.flush()

    def flush(self) -> None:
        """Push buffered messages to the client."""
        self.response.flush()