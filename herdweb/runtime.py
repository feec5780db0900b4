"""Build information and version of the framework."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

VERSION = "v1.1.0"

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class BuildInfo:
    """Information about the build of the running application."""

    version: str = ""
    time: datetime = field(default=_ZERO_TIME)

    def __str__(self) -> str:
        return f"{self.version} ({self.time})"


_build = BuildInfo()
_build_set = False
_build_lock = threading.Lock()


def build() -> BuildInfo:
    """Return the current build information; zero values in development."""
    return _build


def set_build(info: BuildInfo) -> None:
    """Set the build information; only the first call has any effect."""
    global _build, _build_set
    with _build_lock:
        if _build_set:
            return
        _build = info
        _build_set = True