"""Renderer that resolves named templates and runs them through template engines."""

from __future__ import annotations

import io
import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

import jinja2

from herdweb.render.assets import (
    SafeHTML,
    ASSET_MAP,
    asset_path_for,
    img_tag,
    javascript_tag,
    load_manifest,
    stylesheet_tag,
)
from herdweb.render.renderer import Data, RenderError, Renderer
from herdweb.render.string_map import StringMap

_log = logging.getLogger("herdweb.render")

_LANG_TAG = re.compile(r"^([a-z]{2,3})(-[a-z0-9]{2,8})*$", re.IGNORECASE)


def _ext(name: str) -> str:
    base_start = name.rfind("/") + 1
    dot = name.rfind(".")
    return name[dot:] if dot >= base_start else ""


def _normalize(name: str) -> str:
    while name.startswith("./"):
        name = name[2:]
    return name.lstrip("/")


def _fs_read(fs: Any, name: str) -> bytes:
    name = _normalize(name)
    if isinstance(fs, Mapping):
        if name not in fs:
            raise FileNotFoundError(name)
        content = fs[name]
        return content.encode("utf-8") if isinstance(content, str) else bytes(content)
    path = Path(fs) / name
    if not path.is_file():
        raise FileNotFoundError(name)
    return path.read_bytes()


def _fs_walk(fs: Any) -> Iterator[str]:
    if isinstance(fs, Mapping):
        yield from (_normalize(k) for k in fs)
        return
    root = Path(fs)
    for path in sorted(root.rglob("*")):
        if path.is_file():
            yield path.relative_to(root).as_posix()


def fix_extension(name: str, content_type: str) -> str:
    """Append an extension fitting ``content_type`` when ``name`` has none."""
    if _ext(name) == "":
        if "html" in content_type:
            name += ".html"
        elif "javascript" in content_type:
            name += ".js"
        elif "markdown" in content_type:
            name += ".md"
    return name


def jinja_engine(source: str, data: Dict[str, Any], helpers: Dict[str, Any]) -> str:
    """Render ``source`` as a Jinja template with ``data`` and ``helpers``.

    A ``partial(name, locals)`` helper renders a partial fetched through the
    ``partialFeeder`` helper; a ``layout`` local wraps it in another partial.
    """

    @jinja2.pass_context
    def partial(context, name, extra=None):
        feeder = helpers.get("partialFeeder")
        if feeder is None:
            raise RenderError("no partialFeeder helper defined")
        scope = {**context.get_all(), **data, **(extra or {})}
        layout = scope.pop("layout", None)
        out = jinja_engine(feeder(name), scope, helpers)
        if layout:
            scope["yield"] = SafeHTML(out)
            out = jinja_engine(feeder(layout), scope, helpers)
        return SafeHTML(out)

    env = jinja2.Environment(autoescape=True, keep_trailing_newline=True)
    env.globals.update(helpers)
    env.globals["partial"] = partial
    try:
        return env.from_string(source).render(**data)
    except jinja2.TemplateError as exc:
        raise RenderError(str(exc)) from exc


class TemplateRenderer(Renderer):
    """Renders named templates in turn; each result is the next one's ``yield``.

    ``options`` provides ``templates_fs``, ``assets_fs``, ``helpers`` and
    ``template_engines``.
    """

    def __init__(self, options: Any, content_type: str, names: List[str]) -> None:
        self.options = options
        self.content_type = content_type
        self.names = list(names)
        self._aliases = StringMap()

    def _resolve(self, name: str) -> bytes:
        fs = self.options.templates_fs
        if fs is None:
            raise RenderError("no templates fs defined")
        try:
            return _fs_read(fs, name)
        except FileNotFoundError:
            pass
        alias = self._aliases.load(_normalize(name))
        if alias is None:
            raise RenderError(f"could not find template {name}")
        try:
            return _fs_read(fs, alias)
        except FileNotFoundError as exc:
            raise RenderError(f"could not find template {alias}") from exc

    def _update_aliases(self) -> None:
        fs = self.options.templates_fs
        if fs is None:
            return
        for path in _fs_walk(fs):
            shortcut = path.replace(".plush.", ".", 1)
            self._aliases.store(shortcut, path)
            words = posix_basename(shortcut).split(".")
            if len(words) <= 2:
                continue
            for word in words[1:-1]:
                match = _LANG_TAG.match(word)
                if not match:
                    continue
                base = match.group(1).lower()
                self._aliases.store(shortcut.replace(word, base, 1), path)
                self._aliases.store(path.replace(word, base, 1), path)

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        if data is None:
            data = {}
        self._update_aliases()
        body = ""
        for name in self.names:
            try:
                body = self._exec(name, data)
            except Exception as exc:
                raise RenderError(f"{name}: {exc}") from exc
            data["yield"] = SafeHTML(body)
        w.write(body.encode("utf-8"))

    def partial_feeder(self, name: str) -> str:
        """Return the source of partial ``name`` (stored as ``_name``)."""
        directory, _, file = name.rpartition("/")
        name = f"{directory}/_{file}" if directory else f"_{file}"
        name = fix_extension(name, self.content_type.lower())
        return self._resolve(name).decode("utf-8")

    def asset_path(self, file: str) -> str:
        """Return the public path of asset ``file``, reading the manifest if needed."""
        if len(ASSET_MAP) == 0 or os.environ.get("APP_ENV") != "production":
            fs = self.options.assets_fs
            manifest = None
            if fs is not None:
                for candidate in ("manifest.json", "assets/manifest.json"):
                    try:
                        manifest = _fs_read(fs, candidate)
                        break
                    except FileNotFoundError:
                        continue
            if manifest is not None:
                try:
                    load_manifest(io.StringIO(manifest.decode("utf-8")))
                except ValueError as exc:
                    raise RenderError(f"your manifest.json is not correct: {exc}") from exc
        return asset_path_for(file)

    def _asset_helpers(self, helpers: Dict[str, Any]) -> Dict[str, Any]:
        helpers["assetPath"] = self.asset_path

        def wrap(tag):
            def helper(file, options=None):
                return tag(self.asset_path(file), options or {})

            return helper

        helpers["javascriptTag"] = wrap(javascript_tag)
        helpers["stylesheetTag"] = wrap(stylesheet_tag)
        helpers["imgTag"] = wrap(img_tag)
        return helpers

    def _exec(self, name: str, data: Data) -> str:
        ct = self.content_type.lower()
        data["contentType"] = ct
        name = fix_extension(name, ct)
        source = self._localized_resolve(name, data)

        helpers = dict(self.options.helpers or {})
        if helpers.get("partialFeeder") is None:
            helpers["partialFeeder"] = self.partial_feeder
        helpers = self._asset_helpers(helpers)

        body = source.decode("utf-8")
        engines = self.options.template_engines or {}
        for ext in _exts(name):
            engine = engines.get(ext)
            if engine is None:
                _log.error("could not find a template engine for %s", ext)
                continue
            body = engine(body, data, helpers)
        return body

    def _localized_resolve(self, name: str, data: Data) -> bytes:
        languages = data.get("languages")
        if not isinstance(languages, list) or not languages:
            return self._resolve(name)
        default = languages[-1]
        ext = _ext(name)
        raw = name[: len(name) - len(ext)] if ext else name
        for lang in languages:
            if lang == default:
                break
            full = lang.lower()
            short = full.split("-")[0]
            candidates = [f"{raw}.{full}{ext}"]
            if full != short:
                candidates.append(f"{raw}.{short}{ext}")
            for candidate in candidates:
                try:
                    return self._resolve(candidate)
                except RenderError:
                    continue
        return self._resolve(name)


def posix_basename(path: str) -> str:
    return path.rpartition("/")[2]


def _exts(name: str) -> List[str]:
    exts = []
    while True:
        ext = _ext(name)
        if not ext:
            break
        name = name[: -len(ext)]
        exts.append(ext[1:].lower())
    if not exts:
        return ["html"]
    return sorted(exts, reverse=True)