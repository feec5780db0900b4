"""Asset paths, the asset manifest and HTML tags that point at assets."""

from __future__ import annotations

import html
import json
import posixpath
from typing import IO, Any, Mapping, Optional

from herdweb.render.string_map import StringMap


class SafeHTML(str):
    """A string of markup that templates must not escape again."""

    def __html__(self) -> str:
        return str(self)


ASSET_MAP = StringMap()
"""Logical asset names mapped to their fingerprinted file names."""


def asset_path_for(file: str) -> str:
    """Return the public path of ``file``, following the manifest if it names it."""
    target = ASSET_MAP.load(file) or file
    return posixpath.normpath("/assets/" + target.lstrip("/"))


def load_manifest(stream: IO) -> None:
    """Read a JSON manifest of name -> file into the asset map."""
    manifest = json.load(stream)
    if not isinstance(manifest, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in manifest.items()
    ):
        raise ValueError("manifest must be an object of strings")
    for key, value in manifest.items():
        ASSET_MAP.store(key, value.replace("\\", "/"))


def _attrs(attrs: Mapping[str, Any]) -> str:
    return " ".join(
        f'{k}="{html.escape(str(v), quote=True)}"' for k, v in sorted(attrs.items())
    )


def javascript_tag(src: str, options: Optional[Mapping[str, Any]] = None) -> SafeHTML:
    """Build a ``<script>`` tag for ``src``."""
    attrs = {"type": "text/javascript", **(options or {}), "src": src}
    return SafeHTML(f"<script {_attrs(attrs)}></script>")


def stylesheet_tag(src: str, options: Optional[Mapping[str, Any]] = None) -> SafeHTML:
    """Build a stylesheet ``<link>`` tag for ``src``."""
    attrs = {"media": "screen", "rel": "stylesheet", **(options or {}), "href": src}
    return SafeHTML(f"<link {_attrs(attrs)} />")


def img_tag(src: str, options: Optional[Mapping[str, Any]] = None) -> SafeHTML:
    """Build an ``<img>`` tag for ``src``."""
    attrs = {**(options or {}), "src": src}
    return SafeHTML(f"<img {_attrs(attrs)} />")