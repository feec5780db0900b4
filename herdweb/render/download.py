"""Renderer for downloading dynamically generated data as a file."""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

from herdweb.render.renderer import Data, RenderError, Renderer

_DEFAULT_TYPE = "application/octet-stream"


def _type_by_extension(ext: str) -> Optional[str]:
    if not ext:
        return None
    if not mimetypes.inited:
        mimetypes.init()
    found = mimetypes.types_map.get(ext) or mimetypes.types_map.get(ext.lower())
    if found and found.startswith("text/") and "charset" not in found:
        found += "; charset=utf-8"
    return found


def _add_header(headers: Any, key: str, value: str) -> None:
    if hasattr(headers, "add_header"):
        headers.add_header(key, value)
    else:
        headers[key] = value


@dataclass
class DownloadRenderer(Renderer):
    """Writes the whole reader as an attachment named ``name``.

    ``ctx`` must carry a ``response`` whose ``headers`` receive
    Content-Disposition and Content-Length.
    """

    ctx: Any
    name: str
    reader: BinaryIO

    @property
    def content_type(self) -> str:
        return _type_by_extension(os.path.splitext(self.name)[1]) or _DEFAULT_TYPE

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        body = self.reader.read()
        w.write(body)

        response = getattr(self.ctx, "response", None)
        if response is None:
            raise RenderError("context has no response writer")

        headers = response.headers
        _add_header(headers, "Content-Disposition", f"attachment; filename={self.name}")
        _add_header(headers, "Content-Length", str(len(body)))


def download(ctx: Any, name: str, reader: BinaryIO) -> Renderer:
    """Render ``reader`` as a file attachment called ``name``.

    Meant for generated data such as exports, not for serving large
    static files: the whole reader is held in memory.
    """
    return DownloadRenderer(ctx, name, reader)