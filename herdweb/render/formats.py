"""Renderers for JSON and XML encodings of a value."""

from __future__ import annotations

import dataclasses
import json as _json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, BinaryIO, List, Optional

from herdweb.render.renderer import Data, RenderError, Renderer

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"json: unsupported type: {type(value).__name__}")


def _marshal(value: Any) -> str:
    """Encode ``value`` as compact JSON with HTML-sensitive characters escaped."""
    try:
        text = _json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError) as exc:
        raise RenderError(str(exc)) from exc
    for char, escaped in _JSON_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


@dataclass
class JSONRenderer(Renderer):
    """Renders a value as JSON followed by a newline."""

    value: Any
    content_type = "application/json; charset=utf-8"

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        w.write((_marshal(self.value) + "\n").encode("utf-8"))


_XML_TEXT_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&#34;"),
    ("'", "&#39;"),
    ("\t", "&#x9;"),
    ("\n", "&#xA;"),
    ("\r", "&#xD;"),
)

_SCALAR_NAMES = ((bool, "bool"), (int, "int"), (float, "float64"), (str, "string"))


def _is_struct(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _type_name(value: Any) -> str:
    if _is_struct(value):
        return getattr(value, "xml_name", None) or type(value).__name__
    for kind, name in _SCALAR_NAMES:
        if isinstance(value, kind):
            return name
    raise RenderError(f"xml: unsupported type: {type(value).__name__}")


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, float):
        text = repr(value)
    elif isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("utf-8", errors="replace")
    elif isinstance(value, (str, int)):
        text = str(value)
    else:
        raise RenderError(f"xml: unsupported type: {type(value).__name__}")
    for char, escaped in _XML_TEXT_ESCAPES:
        text = text.replace(char, escaped)
    return text


class _XMLWriter:
    def __init__(self) -> None:
        self.parts: List[str] = []

    def _newline(self, depth: int) -> None:
        if self.parts:
            self.parts.append("\n" + "  " * depth)

    def element(self, name: Optional[str], value: Any, depth: int) -> None:
        if value is None:
            return
        if isinstance(value, Mapping):
            raise RenderError(f"xml: unsupported type: {type(value).__name__}")
        if isinstance(value, (list, tuple)):
            for item in value:
                self.element(name, item, depth)
            return
        tag = name or _type_name(value)
        self._newline(depth)
        self.parts.append(f"<{tag}>")
        if _is_struct(value):
            before = len(self.parts)
            for field in dataclasses.fields(value):
                self.element(field.name, getattr(value, field.name), depth + 1)
            if len(self.parts) > before:
                self._newline(depth)
        else:
            self.parts.append(_xml_text(value))
        self.parts.append(f"</{tag}>")


@dataclass
class XMLRenderer(Renderer):
    """Renders a value as indented XML preceded by the XML header.

    Dataclasses become elements named after their class (or their
    ``xml_name`` class attribute) with one child element per field.
    """

    value: Any
    content_type = "application/xml; charset=utf-8"

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        w.write(XML_HEADER.encode("utf-8"))
        writer = _XMLWriter()
        writer.element(None, self.value, 0)
        w.write("".join(writer.parts).encode("utf-8"))


def json(value: Any) -> Renderer:
    """Render ``value`` with the ``application/json`` content type."""
    return JSONRenderer(value)


def xml(value: Any) -> Renderer:
    """Render ``value`` with the ``application/xml`` content type."""
    return XMLRenderer(value)