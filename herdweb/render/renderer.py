"""The renderer interface and the function-backed renderer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, Optional

Data = Dict[str, Any]
"""Data handed to a renderer."""

RendererFunc = Callable[[BinaryIO, Optional[Data]], Any]


class RenderError(Exception):
    """Raised when a renderer cannot produce its output."""


class Renderer(ABC):
    """Something that writes a response body of a known content type.

    ``w`` is a binary stream; renderers write bytes to it.
    """

    content_type: str

    @abstractmethod
    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        """Write the rendered output to ``w``."""


@dataclass
class FuncRenderer(Renderer):
    """Renderer that delegates to a plain function."""

    content_type: str
    render_func: RendererFunc

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        self.render_func(w, data)


def func(content_type: str, fn: RendererFunc) -> Renderer:
    """Build a renderer from a content type and a render function."""
    return FuncRenderer(content_type, fn)