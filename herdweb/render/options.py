"""Options that configure a render engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

TemplateEngine = Callable[[str, Dict[str, Any], Dict[str, Any]], str]
"""A template engine takes the source, the data and the helpers and returns text."""


@dataclass
class Options:
    """Settings for a render engine.

    ``templates_fs`` and ``assets_fs`` hold templates and public assets:
    a directory path or a mapping of relative names to contents.
    """

    html_layout: str = ""
    javascript_layout: str = ""
    templates_fs: Optional[Any] = None
    assets_fs: Optional[Any] = None
    helpers: Dict[str, Any] = field(default_factory=dict)
    template_engines: Dict[str, TemplateEngine] = field(default_factory=dict)
    default_content_type: str = ""