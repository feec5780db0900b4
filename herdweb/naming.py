"""Word inflection and the naming of routes after their paths."""

from __future__ import annotations

import re
from typing import List

_WORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")

_IRREGULAR = {
    "child": "children",
    "person": "people",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "foot": "feet",
    "tooth": "teeth",
    "ox": "oxen",
}
_IRREGULAR_SINGULAR = {plural: single for single, plural in _IRREGULAR.items()}

_UNCOUNTABLE = {
    "equipment",
    "information",
    "rice",
    "money",
    "species",
    "series",
    "fish",
    "sheep",
    "deer",
    "news",
}

_SINGULAR_RULES = (
    ("sses", "ss"),
    ("zzes", "zz"),
    ("xes", "x"),
    ("ches", "ch"),
    ("shes", "sh"),
    ("ies", "y"),
)
_KEEP_SUFFIXES = ("ss", "us", "is")


def _match_case(source: str, result: str) -> str:
    if len(source) > 1 and source.isupper():
        return result.upper()
    if source[:1].isupper():
        return result[:1].upper() + result[1:]
    return result


def _replace_suffix(word: str, length: int, replacement: str) -> str:
    if word.isupper():
        replacement = replacement.upper()
    return word[: len(word) - length] + replacement


def singularize(word: str) -> str:
    """Return the singular form of ``word``."""
    lower = word.lower()
    if not lower or lower in _UNCOUNTABLE or lower in _IRREGULAR:
        return word
    if lower in _IRREGULAR_SINGULAR:
        return _match_case(word, _IRREGULAR_SINGULAR[lower])
    for suffix, replacement in _SINGULAR_RULES:
        if lower.endswith(suffix) and len(lower) > len(suffix):
            return _replace_suffix(word, len(suffix), replacement)
    if lower.endswith(_KEEP_SUFFIXES):
        return word
    if lower.endswith("s") and len(lower) > 1:
        return word[:-1]
    return word


def pluralize(word: str) -> str:
    """Return the plural form of ``word``."""
    lower = word.lower()
    if not lower or lower in _UNCOUNTABLE or lower in _IRREGULAR_SINGULAR:
        return word
    if lower in _IRREGULAR:
        return _match_case(word, _IRREGULAR[lower])
    if singularize(word) != word:
        return word
    if len(lower) > 1 and lower.endswith("y") and lower[-2] not in "aeiou":
        return _replace_suffix(word, 1, "ies")
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return _replace_suffix(word, 0, "es")
    return _replace_suffix(word, 0, "s")


def _words(text: str) -> List[str]:
    return _WORD.findall(text)


def underscore(text: str) -> str:
    """Return ``text`` as lower-case words joined by underscores."""
    return "_".join(word.lower() for word in _words(text))


def camelize(text: str) -> str:
    """Return ``text`` in lower camel case, keeping acronyms in later words."""
    words = _words(text)
    if not words:
        return ""
    first, rest = words[0], words[1:]
    return first.lower() + "".join(word[:1].upper() + word[1:] for word in rest)


def var_case(text: str) -> str:
    """Return ``text`` as a variable name in lower camel case."""
    return camelize(text.strip())


class RouteNamer:
    """Names a route after its path when no name is given explicitly."""

    def name_route(self, path: str) -> str:
        """Return the route name derived from ``path``."""
        if path in ("/", ""):
            return "root"

        parts = path.split("/")
        result: List[str] = []
        for index, part in enumerate(parts):
            original = part
            previous = parts[index - 1] if index > 0 else ""
            following = parts[index + 1] if index + 1 < len(parts) else ""

            is_identifier = "{" in part and singularize(previous) in part
            if is_identifier or part == "{id}" or part == "":
                continue

            if "{" in following:
                part = singularize(part)

            if original in ("new", "edit"):
                result.insert(0, part)
                continue

            result.append(part)

        if not result:
            return "unnamed"
        return var_case("_".join(result))