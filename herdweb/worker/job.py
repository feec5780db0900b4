"""Jobs and their arguments, as handed to a background worker."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


class Args(dict):
    """Arguments passed into a job handler."""

    def __str__(self) -> str:
        return _to_json(dict(sorted(self.items())))


@dataclass
class Job:
    """A unit of work to be processed by a worker."""

    queue: str = ""
    args: Args = field(default_factory=Args)
    handler: str = ""

    def __str__(self) -> str:
        args = None if self.args is None else dict(sorted(self.args.items()))
        return _to_json({"Queue": self.queue, "Args": args, "Handler": self.handler})