"""Render node trees into HTML documents with scoped styles."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

from soar.config import (
    SOAR_HTML_PARSER,
    SOAR_MINIFY_CSS,
    SOAR_SCOPE_ATTRIBUTE,
    SOAR_SCOPE_LENGTH,
)
from soar.exceptions import ComponentError, SoarError
from soar.html_utils import (
    ROOT_CONTAINERS,
    apply_attributes,
    default_parent,
    find_root_container,
    new_document,
)
from soar.jsx import Children, Node, format_children, is_isolated
from soar.schemas import StyleFragment
from soar.style import StyleCollector, compile_styles

logger = logging.getLogger(__name__)


@dataclass
class RenderOptions:
    """Options for a render pass.

    Attributes:
        scope_length: Number of hex digest characters in a scope identifier.
        scope_attribute: Attribute that marks scoped elements.
        minify: If True, minify the compiled stylesheet.
        parser: BeautifulSoup parser used for new documents.
    """

    scope_length: int = SOAR_SCOPE_LENGTH
    scope_attribute: str = SOAR_SCOPE_ATTRIBUTE
    minify: bool = SOAR_MINIFY_CSS
    parser: str = SOAR_HTML_PARSER


@dataclass(frozen=True)
class _Context:
    """Traversal state threaded through the walk."""

    parent: Tag | BeautifulSoup
    scope: str | None = None
    # Scope introduced by a component whose first elements are still to come
    pending_host: str | None = None


async def render_to_string(root: Children, options: RenderOptions | None = None) -> str:
    """Render a tree into a fresh document and serialize it."""
    opts = options or RenderOptions()
    document = new_document(opts.parser)
    await render(root, document, opts)
    return str(document)


async def render(
    root: Children,
    document: BeautifulSoup,
    options: RenderOptions | None = None,
) -> list[StyleFragment]:
    """Expand ``root`` into ``document`` and append its compiled stylesheet.

    Children are processed strictly in order, each subtree fully expanded
    before the next sibling starts, so document order follows tree order.

    Args:
        root: Root node (or any children value) to render.
        document: Document to mutate. It must not be shared with a concurrent
            render.
        options: Render options. Uses defaults if None.

    Returns:
        The style fragments collected during the walk, in discovery order.

    Raises:
        ComponentError: If a functional component fails. Document changes
            made before the failure are kept.
        StyleCompileError: If a collected style cannot be compiled. No
            stylesheet is appended in that case.
    """
    opts = options or RenderOptions()
    renderer = _Renderer(document, opts)
    await renderer.walk(root, _Context(parent=default_parent(document)))

    fragments = renderer.styles.fragments
    stylesheet = compile_styles(
        fragments, attribute=opts.scope_attribute, minify=opts.minify
    )
    if stylesheet:
        style = document.new_tag("style")
        style.string = stylesheet
        find_root_container(document, "head").append(style)
    return fragments


class _Renderer:
    def __init__(self, document: BeautifulSoup, options: RenderOptions) -> None:
        self.document = document
        self.options = options
        self.styles = StyleCollector()

    async def walk(self, node: Children, ctx: _Context) -> None:
        if node is None or isinstance(node, bool):
            return
        if isinstance(node, str):
            ctx.parent.append(self.document.new_string(node))
            return
        if isinstance(node, Node):
            await self._walk_node(node, ctx)
            return
        if isinstance(node, (bytes, bytearray)):
            text = node.decode("utf-8", errors="replace")
            ctx.parent.append(self.document.new_string(text))
            return
        if isinstance(node, Sequence) or inspect.isgenerator(node):
            for child in node:
                await self.walk(child, ctx)
            return
        self._append_text(node, ctx)

    async def _walk_node(self, node: Node, ctx: _Context) -> None:
        if not isinstance(node.type, str) and not callable(node.type):
            logger.warning("Unknown node type %r, rendering %r as text", node.type, node)
            self._append_text(node, ctx)
            return

        if node.global_style:
            self.styles.add_global(node.global_style)

        scope = node.scope_id(self.options.scope_length)
        if scope is not None:
            self.styles.add(scope, node.style)
            logger.debug("Scope %s introduced by %r", scope, node)

        if isinstance(node.type, str):
            host = scope or ctx.pending_host
            await self._walk_element(node, ctx, scope or ctx.scope, host)
        else:
            await self._walk_component(node, ctx, scope)

    async def _walk_element(
        self, node: Node, ctx: _Context, scope: str | None, host: str | None
    ) -> None:
        tag_name = node.type
        if tag_name in ROOT_CONTAINERS:
            element = find_root_container(self.document, tag_name)
        else:
            element = self.document.new_tag(tag_name)
            ctx.parent.append(element)

        apply_attributes(element, node.props)
        if scope is not None:
            element[self.options.scope_attribute] = scope
        if host is not None:
            self.styles.add_host(host, tag_name)

        if node.children is not None:
            await self.walk(node.children, _Context(parent=element, scope=scope))

    async def _walk_component(
        self, node: Node, ctx: _Context, scope: str | None
    ) -> None:
        logger.debug("Expanding %r with children %s", node, format_children(node.children))
        try:
            result = node.type(**node.props, children=node.children)
            if inspect.isawaitable(result):
                result = await result
        except SoarError:
            raise
        except Exception as exc:
            raise ComponentError(f"Component {node.name!r} failed: {exc}") from exc

        if scope is not None:
            inner = _Context(parent=ctx.parent, scope=scope, pending_host=scope)
        elif is_isolated(node.type):
            inner = _Context(parent=ctx.parent)
        else:
            inner = ctx
        await self.walk(result, inner)

    def _append_text(self, value: Any, ctx: _Context) -> None:
        ctx.parent.append(self.document.new_string(str(value)))
