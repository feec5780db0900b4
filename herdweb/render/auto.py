"""Renderer that picks an HTML template, or a redirect, from a model and the request."""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, BinaryIO, List, Optional

from herdweb.naming import pluralize, singularize, underscore, var_case
from herdweb.render.renderer import Data, RenderError, Renderer

if TYPE_CHECKING:
    from herdweb.render.engine import Engine

_COLLECTIONS = (list, tuple, set, frozenset)


class RedirectError(Exception):
    """Signals that the response is a redirect and no template should be rendered."""

    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"redirect with status {status} to {url}")
        self.status = status
        self.url = url


def _is_plural(model: Any) -> bool:
    return isinstance(model, _COLLECTIONS) or isinstance(model, Mapping)


def _type_name(model: Any) -> str:
    if isinstance(model, _COLLECTIONS):
        item_type = getattr(type(model), "item_type", None)
        if isinstance(item_type, type):
            return item_type.__name__
        for item in model:
            return type(item).__name__
        raise RenderError("cannot tell the model name of an empty collection")
    return type(model).__name__


def _name_words(model: Any) -> List[str]:
    words = underscore(_type_name(model)).split("_")
    return words or [""]


class HTMLAutoRenderer(Renderer):
    """Chooses index, show, new or edit templates, or a redirect, for a model.

    Template lookup for a model named ``Car``:
    GET /cars -> cars/index.html, GET /cars/1 -> cars/show.html,
    GET /cars/new -> cars/new.html, GET /cars/1/edit -> cars/edit.html;
    POST, PUT and DELETE redirect when the model has an ``id``, otherwise
    render new.html (POST, DELETE) or edit.html (PUT).
    """

    content_type = "text/html"

    def __init__(self, engine: "Engine", model: Any) -> None:
        self.engine = engine
        self.model = model

    def render(self, w: BinaryIO, data: Optional[Data] = None) -> None:
        data = {} if data is None else data

        words = _name_words(self.model)
        head, last = words[:-1], words[-1]
        plural_file = "_".join(head + [pluralize(last)])

        plural = _is_plural(self.model)
        if plural:
            data[var_case(plural_file)] = self.model
        else:
            data[var_case("_".join(head + [singularize(last)]))] = self.model

        prefix = plural_file
        custom_prefix = data.get("template_prefix")
        if isinstance(custom_prefix, str):
            prefix = custom_prefix

        method = data.get("method")
        if method in ("PUT", "POST", "DELETE"):
            redirect = self._redirect(data)
            if redirect is not None and 300 <= redirect.status < 400:
                raise redirect
            page = "edit.html" if method == "PUT" else "new.html"
            self._page(prefix, page, w, data)
            return

        current = data.get("current_path")
        if not isinstance(current, str):
            page = "index.html"
        elif current.endswith("/edit/"):
            page = "edit.html"
        elif current.endswith("/new/"):
            page = "new.html"
        elif not plural:
            page = "show.html"
        else:
            page = "index.html"
        self._page(prefix, page, w, data)

    def _page(self, prefix: str, page: str, w: BinaryIO, data: Data) -> None:
        self.engine.html(posixpath.join(prefix, page)).render(w, data)

    def _redirect(self, data: Data) -> Optional[RedirectError]:
        ident = getattr(self.model, "id", None)
        if not ident:
            return None

        method = data.get("method")
        if not isinstance(method, str):
            method = "GET"
        current = data.get("current_path")
        url = "" if current is None else str(current)
        ident_text = str(ident)
        if url.endswith("/"):
            url = url[:-1]

        if method == "DELETE":
            if url.endswith(ident_text):
                url = url[: len(url) - len(ident_text)]
        elif not url.endswith(ident_text):
            url = posixpath.normpath(posixpath.join(url, ident_text))

        code = 302
        status = data.get("status")
        if isinstance(status, int) and not isinstance(status, bool) and status >= 300:
            code = status
        return RedirectError(code, url)