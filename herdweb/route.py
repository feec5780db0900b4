"""Information about mapped routes and the helpers that build their paths."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import quote, quote_plus

from herdweb.naming import camelize
from herdweb.render.assets import SafeHTML

RouteHelperFunc = Callable[[Mapping[str, Any]], SafeHTML]
"""Builds the path of a route from a mapping of parameters."""

_PATH_SAFE = "/:@!$&'()*+,;=-._~"


def _fmt(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    return str(value)


def add_extra_params(path: str, opts: Mapping[str, Any]) -> str:
    """Append, as a sorted query string, the options whose value is not in ``path``."""
    pending = {str(k): _fmt(v) for k, v in opts.items() if _fmt(v) not in path}
    if not pending:
        return path

    if "?" not in path:
        path += "?"
    elif not path.endswith("?"):
        path += "&"

    query = "&".join(f"{quote_plus(k)}={quote_plus(pending[k])}" for k in sorted(pending))
    return path + query


def _variables(template: str) -> Iterator[Tuple[int, int, str, Optional[str]]]:
    """Yield (start, end, name, pattern) for each ``{name[:pattern]}`` in ``template``."""
    depth = 0
    start = -1
    for pos, char in enumerate(template):
        if char == "{":
            if depth == 0:
                start = pos
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                raise ValueError(f"unbalanced braces in {template!r}")
            if depth == 0:
                name, sep, pattern = template[start + 1 : pos].partition(":")
                yield start, pos + 1, name.strip(), pattern.strip() if sep else None
    if depth != 0:
        raise ValueError(f"unbalanced braces in {template!r}")


def _expand(template: str, values: Mapping[str, str], default_pattern: str) -> str:
    pieces: List[str] = []
    last = 0
    for start, end, name, pattern in _variables(template):
        if name not in values:
            raise ValueError(f"missing route variable {name!r}")
        value = values[name]
        expected = pattern or default_pattern
        if re.fullmatch(expected, value) is None:
            raise ValueError(f"variable {name!r} does not match {expected!r}, got {value!r}")
        pieces.append(template[last:start])
        pieces.append(value)
        last = end
    pieces.append(template[last:])
    return "".join(pieces)


@dataclass
class RouteInfo:
    """A mapped route: its method, path, handler and name."""

    method: str
    path: str
    handler_name: str = ""
    resource_name: str = ""
    path_name: str = ""
    aliases: List[str] = field(default_factory=list)
    handler: Optional[Callable[..., Any]] = None
    host: str = ""

    def __str__(self) -> str:
        payload: dict = {
            "method": self.method,
            "path": self.path,
            "handler": self.handler_name,
        }
        if self.resource_name:
            payload["resourceName"] = self.resource_name
        payload["pathName"] = self.path_name
        payload["aliases"] = list(self.aliases)
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def name(self, name: str) -> "RouteInfo":
        """Give the route a custom name, camelized and ending in ``Path``."""
        name = camelize(name)
        if not name.endswith("Path"):
            name += "Path"
        self.path_name = name
        return self

    def _url(self, values: Mapping[str, str]) -> str:
        path = quote(_expand(self.path, values, "[^/]+"), safe=_PATH_SAFE)
        if self.host:
            return "http://" + _expand(self.host, values, "[^.]+") + path
        return path

    def build_path_helper(self) -> RouteHelperFunc:
        """Return a function that builds this route's path from parameters."""

        def helper(opts: Mapping[str, Any]) -> SafeHTML:
            values = {str(k): _fmt(v) for k, v in opts.items()}
            try:
                url = self._url(values)
            except ValueError as exc:
                raise ValueError(f"missing parameters for {self.path}: {exc}") from exc
            return SafeHTML(add_extra_params(url, opts))

        return helper


class RouteList(list):
    """The routes of an application in the order they were mapped."""

    def lookup(self, name: str) -> RouteInfo:
        """Return the route whose path name is ``name``."""
        for route in self:
            if route.path_name == name:
                return route
        raise LookupError("path name not found")