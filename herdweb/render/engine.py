"""The render engine and the template-backed renderers it builds."""

from __future__ import annotations

import json as _jsonlib
from dataclasses import dataclass
from html import unescape as _unescape
from typing import Any, BinaryIO, Dict, Optional

import markdown as _markdown

from herdweb.render.assets import SafeHTML
from herdweb.render.auto import HTMLAutoRenderer
from herdweb.render.download import download as _download
from herdweb.render.formats import json as _json_renderer
from herdweb.render.formats import xml as _xml_renderer
from herdweb.render.options import Options
from herdweb.render.renderer import Data, RenderError, Renderer, func as _func_renderer
from herdweb.render.template import TemplateRenderer, jinja_engine


def markdown_engine(source: str, data: Dict[str, Any], helpers: Dict[str, Any]) -> str:
    """Run ``source`` through Markdown, then through the Jinja engine.

    Plain-text content skips the Markdown step.
    """
    if data.get("contentType") == "text/plain":
        return jinja_engine(source, data, helpers)
    converted = _unescape(_markdown.markdown(source))
    if not converted.endswith("\n"):
        converted += "\n"
    return jinja_engine(converted, data, helpers)


def _truncate(text: Any, size: int = 50, trail: str = "...") -> str:
    text = str(text)
    if len(text) <= size:
        return text
    return text[: max(size - len(trail), 0)] + trail


def _default_helpers() -> Dict[str, Any]:
    return {
        "raw": SafeHTML,
        "toJSON": lambda value: SafeHTML(_jsonlib.dumps(value, default=str)),
        "markdown": lambda text: SafeHTML(_markdown.markdown(str(text))),
        "truncate": _truncate,
    }


def _ctx_value(ctx: Any, key: str) -> Any:
    getter = getattr(ctx, "get", None)
    if callable(getter):
        return getter(key)
    return None


@dataclass
class StringRenderer(Renderer):
    """Runs a string through the engine's ``text`` template engine."""

    engine: "Engine"
    body: str
    content_type = "text/plain; charset=utf-8"

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        engine = self.engine.template_engines.get("text")
        if engine is None:
            raise RenderError("could not find a template engine for text")
        text = engine(self.body, {} if data is None else data, self.engine.helpers)
        w.write(text.encode("utf-8"))


class Engine:
    """Builds renderers that share templates, helpers, layouts and engines."""

    def __init__(self, options: Optional[Options] = None) -> None:
        opts = Options() if options is None else options

        helpers = opts.helpers if opts.helpers is not None else {}
        if not helpers:
            helpers = _default_helpers()

        engines = opts.template_engines if opts.template_engines is not None else {}
        for ext in ("html", "plush", "text", "txt", "js"):
            engines.setdefault(ext, jinja_engine)
        engines.setdefault("md", markdown_engine)
        engines.setdefault("tmpl", jinja_engine)

        self.html_layout = opts.html_layout
        self.javascript_layout = opts.javascript_layout
        self.templates_fs = opts.templates_fs
        self.assets_fs = opts.assets_fs
        self.helpers: Dict[str, Any] = helpers
        self.template_engines = engines
        self.default_content_type = opts.default_content_type or "text/html; charset=utf-8"

    def html(self, *args: str) -> Renderer:
        """Render templates as HTML; the second name, or ``html_layout``, is the layout."""
        names = [name[1:] if name.startswith("/") else name for name in args]
        if self.html_layout and len(names) == 1:
            names.append(self.html_layout)
        return TemplateRenderer(self, "text/html; charset=utf-8", names)

    def javascript(self, *args: str) -> Renderer:
        """Render templates as JavaScript; the second name, or ``javascript_layout``, is the layout."""
        names = list(args)
        if self.javascript_layout and len(names) == 1:
            names.append(self.javascript_layout)
        return TemplateRenderer(self, "application/javascript", names)

    def plain(self, *args: str) -> Renderer:
        """Render templates as plain text."""
        return TemplateRenderer(self, "text/plain; charset=utf-8", list(args))

    def string(self, text: str, *args: Any) -> Renderer:
        """Render ``text`` (``%``-formatted with ``args`` if given) as a plain-text template."""
        if args:
            text = text % args
        return StringRenderer(self, text)

    def template(self, content_type: str, *args: str) -> Renderer:
        """Render templates with the given content type."""
        return TemplateRenderer(self, content_type, list(args))

    def json(self, value: Any) -> Renderer:
        """Render ``value`` as JSON."""
        return _json_renderer(value)

    def xml(self, value: Any) -> Renderer:
        """Render ``value`` as XML."""
        return _xml_renderer(value)

    def func(self, content_type: str, fn) -> Renderer:
        """Render through a plain function."""
        return _func_renderer(content_type, fn)

    def download(self, ctx: Any, name: str, reader: BinaryIO) -> Renderer:
        """Render ``reader`` as a file attachment called ``name``."""
        return _download(ctx, name, reader)

    def auto(self, ctx: Any, model: Any) -> Renderer:
        """Render ``model`` as JSON, XML or HTML according to the request's content type."""
        content_type = _ctx_value(ctx, "contentType")
        if not isinstance(content_type, str) or not content_type:
            content_type = self.default_content_type
        content_type = content_type.strip().lower()
        if "json" in content_type:
            return self.json(model)
        if "xml" in content_type:
            return self.xml(model)
        return HTMLAutoRenderer(self, model)


def html(*args: str) -> Renderer:
    """Render templates as HTML with a default engine."""
    return Engine().html(*args)


def javascript(*args: str) -> Renderer:
    """Render templates as JavaScript with a default engine."""
    return Engine().javascript(*args)


def plain(*args: str) -> Renderer:
    """Render templates as plain text with a default engine."""
    return Engine().plain(*args)


def string(text: str, *args: Any) -> Renderer:
    """Render a string template with a default engine."""
    return Engine().string(text, *args)


def template(content_type: str, *args: str) -> Renderer:
    """Render templates of the given content type with a default engine."""
    return Engine().template(content_type, *args)


def auto(ctx: Any, model: Any) -> Renderer:
    """Render ``model`` automatically with a default engine."""
    return Engine().auto(ctx, model)