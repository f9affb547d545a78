"""Shared HTML utilities for building output documents."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from soar.config import DOCUMENT_SKELETON, SOAR_HTML_PARSER

try:
    from bs4 import BeautifulSoup
    from bs4.element import Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for document rendering (pip install beautifulsoup4)."
    ) from exc


ROOT_CONTAINERS = frozenset({"html", "head", "body"})
CLASS_KEYS = frozenset({"class", "className", "class_"})
RESERVED_PREFIX = "_"

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def new_document(parser: str = SOAR_HTML_PARSER) -> BeautifulSoup:
    """Create an empty document with html/head/body already in place."""
    return BeautifulSoup(DOCUMENT_SKELETON, parser)


def find_root_container(document: BeautifulSoup, name: str) -> Tag:
    """Find the singleton html, head or body element of a document.

    Missing containers are created and attached where they belong, so
    documents that did not start from the skeleton still work.
    """
    found = document.find(name)
    if found is not None:
        return found
    element = document.new_tag(name)
    if name == "html":
        document.append(element)
        return element
    html = find_root_container(document, "html")
    if name == "head":
        html.insert(0, element)
    else:
        html.append(element)
    return element


def default_parent(document: BeautifulSoup) -> Tag | BeautifulSoup:
    """Where top-level nodes of a tree are appended."""
    body = document.find("body")
    return body if body is not None else document


def css_property_name(key: str) -> str:
    """Convert ``fontSize`` or ``font_size`` to ``font-size``.

    Custom properties (``--accent``) are left alone.
    """
    if key.startswith("--"):
        return key
    key = _CAMEL_BOUNDARY_RE.sub(r"-\1", key).replace("_", "-")
    return key.lower()


def style_to_text(value: Any) -> str:
    """Serialize a ``style`` prop to inline CSS text.

    Strings are used verbatim. Mappings become ``prop: value`` pairs joined
    with ``; `` and ``None`` values are dropped.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        declarations = [
            f"{css_property_name(str(key))}: {_stringify(val)}"
            for key, val in value.items()
            if val is not None
        ]
        return "; ".join(declarations)
    return _stringify(value)


def class_to_text(value: Any) -> str:
    """Serialize a class prop given as a string or a list of tokens."""
    if isinstance(value, (list, tuple)):
        return " ".join(str(token) for token in value if token)
    return _stringify(value)


def apply_attributes(element: Tag, props: Mapping[str, Any]) -> None:
    """Set element attributes from node props.

    Keys starting with an underscore are bookkeeping and never emitted.
    """
    for key, value in props.items():
        if key.startswith(RESERVED_PREFIX):
            continue
        if key == "style":
            element["style"] = style_to_text(value)
        elif key in CLASS_KEYS:
            element["class"] = class_to_text(value)
        else:
            element[key] = _stringify(value)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
