"""Virtual node model for component trees.

A tree is built from :func:`jsx` calls (or :func:`h` for positional
children). Tag nodes become elements when rendered; callable types are
functional components that are expanded lazily by the renderer. Style text
can be attached to any node with :meth:`Node.styled` without touching its
children.
"""

from __future__ import annotations

import itertools
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from soar.hash_utils import scope_id_for

Children = Union[str, "Node", Sequence["Children"], bool, None]
Component = Callable[..., Union[Children, Awaitable[Children]]]
ElementType = Union[str, Component]

_ISOLATED_ATTR = "__soar_isolated__"
_node_ids = itertools.count(1)


class Style(str):
    """Scoped style source text."""


class GlobalStyle(str):
    """Style source text that is emitted without scoping."""


def _join_template(first: Any, values: Sequence[Any]) -> str:
    """Concatenate template fragments with interpolated values.

    With values, ``first`` is the sequence of literal fragments surrounding
    them: ``first[0] + str(values[0]) + first[1] + ...``. Without values it is
    plain text (or a sequence of text pieces).
    """
    if isinstance(first, str):
        return first + "".join(str(value) for value in values)
    fragments = list(first)
    if not values:
        return "".join(str(fragment) for fragment in fragments)
    if len(fragments) != len(values) + 1:
        raise ValueError(
            f"Template needs {len(values) + 1} fragments for {len(values)} values, "
            f"got {len(fragments)}"
        )
    parts = [str(fragments[0])]
    for value, fragment in zip(values, fragments[1:]):
        parts.append(str(value))
        parts.append(str(fragment))
    return "".join(parts)


def css(first: str | Sequence[str], *values: Any) -> Style:
    """Build scoped style text.

    ``css("color: red;")`` returns the text as is, ``css(a, b)`` concatenates
    strings or other Style values, and ``css(["color: ", ";"], "red")`` is the
    template form.
    """
    return Style(_join_template(first, values))


def global_css(first: str | Sequence[str], *values: Any) -> GlobalStyle:
    """Build style text that bypasses scoping entirely."""
    return GlobalStyle(_join_template(first, values))


@dataclass(eq=False)
class Node:
    """A node in the virtual tree."""

    type: ElementType
    props: dict[str, Any] = field(default_factory=dict)
    children: Children = None
    style: str | None = None
    global_style: str | None = None
    id: int = field(default_factory=lambda: next(_node_ids), init=False)

    def styled(self, style: str | Sequence[str], *values: Any) -> Node:
        """Attach style text and return this same node.

        A :class:`GlobalStyle` value (from :func:`global_css`) is stored as
        the node's unscoped style instead.
        """
        text = _join_template(style, values)
        if isinstance(style, GlobalStyle):
            self.global_style = text
        else:
            self.style = text
        return self

    def global_styled(self, style: str | Sequence[str], *values: Any) -> Node:
        """Attach unscoped style text and return this same node."""
        self.global_style = _join_template(style, values)
        return self

    @property
    def name(self) -> str:
        if isinstance(self.type, str):
            return self.type
        return getattr(self.type, "__name__", type(self.type).__name__)

    def scope_id(self, length: int) -> str | None:
        """The scope this node introduces, or None if it carries no style."""
        if self.style is None or not self.style.strip():
            return None
        return scope_id_for(self.style, length)

    def __repr__(self) -> str:
        return f"Node({self.name}-{self.id})"


def jsx(
    type: ElementType, props: dict[str, Any] | None = None, /, **kwargs: Any
) -> Node:
    """Create a node, extracting ``children`` from the props."""
    merged = {**(props or {}), **kwargs}
    children = merged.pop("children", None)
    return Node(type=type, props=merged, children=children)


jsxs = jsx


def h(
    type: ElementType, props: dict[str, Any] | None = None, /, *children: Children
) -> Node:
    """Create a node with positional children.

    A single child is stored as is; several are kept as a list.
    """
    node = jsx(type, props)
    if len(children) == 1:
        node.children = children[0]
    elif children:
        node.children = list(children)
    return node


def Fragment(*, children: Children = None, **_: Any) -> Children:  # noqa: N802
    """Group children without introducing an element."""
    return children


def isolated(component: Component) -> Component:
    """Mark a component so its expansion does not inherit the caller's scope."""
    setattr(component, _ISOLATED_ATTR, True)
    return component


def is_isolated(component: Any) -> bool:
    return bool(getattr(component, _ISOLATED_ATTR, False))


def format_children(children: Children) -> str:
    """Compact description of a children value for log output."""
    if children is None or isinstance(children, bool):
        return ""
    if isinstance(children, str):
        return ""
    if isinstance(children, Node):
        return f"{children.name}-{children.id}"
    if isinstance(children, Iterable):
        return "[" + " ".join(format_children(child) for child in children) + "]"
    return ""
