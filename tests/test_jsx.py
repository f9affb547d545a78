"""Tests for the node model."""

from __future__ import annotations

import pytest

from soar.hash_utils import digest
from soar.jsx import (
    Fragment,
    GlobalStyle,
    Node,
    Style,
    css,
    format_children,
    global_css,
    h,
    is_isolated,
    isolated,
    jsx,
    jsxs,
)


def Card(*, children=None, **props):  # noqa: N802
    return h("section", None, children)


class TestJsx:
    """Tests for node construction."""

    def test_extracts_children_from_props(self) -> None:
        """Children are carried separately from props."""
        node = jsx("div", {"id": "main", "children": "hello"})

        assert node.type == "div"
        assert node.props == {"id": "main"}
        assert node.children == "hello"

    def test_accepts_keyword_props(self) -> None:
        """Keyword arguments are merged into props."""
        node = jsx("a", {"href": "/"}, title="Home", children=["x"])

        assert node.props == {"href": "/", "title": "Home"}
        assert node.children == ["x"]

    def test_does_not_mutate_given_props(self) -> None:
        """The caller's props mapping is left untouched."""
        props = {"children": "text", "id": "a"}
        jsx("p", props)

        assert props == {"children": "text", "id": "a"}

    def test_starts_unstyled(self) -> None:
        """New nodes carry no style."""
        node = jsx("div")

        assert node.style is None
        assert node.global_style is None
        assert node.scope_id(6) is None

    def test_ids_are_unique_and_increasing(self) -> None:
        """Each node receives a fresh sequential id."""
        first, second = jsx("div"), jsx("div")

        assert second.id > first.id

    def test_structurally_equal_nodes_are_distinct(self) -> None:
        """Nodes compare by identity, not structure."""
        assert jsx("div") != jsx("div")

    def test_jsxs_is_alias(self) -> None:
        """jsxs builds nodes like jsx."""
        assert jsxs is jsx


class TestH:
    """Tests for positional-children construction."""

    def test_single_child_kept_as_is(self) -> None:
        """A single child is not wrapped in a list."""
        child = h("span")
        node = h("div", None, child)

        assert node.children is child

    def test_several_children_become_list(self) -> None:
        """Several children are stored in order."""
        node = h("ul", {"class": "list"}, h("li"), "text", h("li"))

        assert isinstance(node.children, list)
        assert len(node.children) == 3
        assert node.children[1] == "text"

    def test_no_children(self) -> None:
        """Without children the field stays None."""
        assert h("br").children is None


class TestStyled:
    """Tests for attaching style to nodes."""

    def test_returns_same_node(self) -> None:
        """styled() is fluent and keeps identity."""
        node = h("div", None, "child")
        result = node.styled("color: red;")

        assert result is node
        assert node.style == "color: red;"
        assert node.children == "child"

    def test_template_form(self) -> None:
        """Fragments and values are interleaved."""
        node = h("div").styled(["color: ", "; margin: ", "px;"], "red", 4)

        assert node.style == "color: red; margin: 4px;"

    def test_styled_routes_global_css(self) -> None:
        """styled() stores GlobalStyle text as the unscoped style."""
        node = h("div").styled(global_css("body { margin: 0 }"))

        assert node.global_style == "body { margin: 0 }"
        assert node.style is None
        assert node.scope_id(6) is None

    def test_global_styled(self) -> None:
        """global_styled() sets the unscoped style."""
        node = h("div").global_styled("body { margin: 0 }")

        assert node.global_style == "body { margin: 0 }"
        assert node.style is None

    def test_scope_id_is_digest_of_style(self) -> None:
        """A styled node introduces the digest of its style text."""
        node = h("div").styled("color: red;")

        assert node.scope_id(6) == digest("color: red;", 6)

    def test_blank_style_introduces_no_scope(self) -> None:
        """Whitespace-only style does not create a scope."""
        assert h("div").styled("   ").scope_id(6) is None


class TestCss:
    """Tests for css and global_css helpers."""

    def test_plain_string(self) -> None:
        """Plain text is returned as a Style."""
        style = css("color: red;")

        assert style == "color: red;"
        assert isinstance(style, Style)

    def test_concatenates_styles(self) -> None:
        """Several pieces are concatenated in order."""
        assert css(css("a: 1;"), " b: 2;") == "a: 1; b: 2;"

    def test_template_form(self) -> None:
        """Values are placed between literal fragments."""
        assert css(["width: ", "px;"], 10) == "width: 10px;"

    def test_global_css(self) -> None:
        """global_css builds GlobalStyle text."""
        style = global_css(["html { font-size: ", "; }"], "16px")

        assert isinstance(style, GlobalStyle)
        assert style == "html { font-size: 16px; }"

    def test_mismatched_template_raises(self) -> None:
        """A template needs one more fragment than values."""
        with pytest.raises(ValueError):
            css(["a", "b", "c"], 1)


class TestComponents:
    """Tests for Fragment and isolated."""

    def test_fragment_returns_children(self) -> None:
        """Fragment is a pass-through component."""
        children = ["a", h("b")]

        assert Fragment(children=children) is children

    def test_isolated_marks_component(self) -> None:
        """isolated() flags the component and returns it."""

        def Widget(*, children=None):  # noqa: N802
            return children

        assert not is_isolated(Widget)
        assert isolated(Widget) is Widget
        assert is_isolated(Widget)

    def test_node_name(self) -> None:
        """Node names come from the tag or the component function."""
        assert h("div").name == "div"
        assert jsx(Card).name == "Card"


class TestFormatChildren:
    """Tests for format_children function."""

    def test_formats_nested_structure(self) -> None:
        """Tags and components show name and id, lists use brackets."""
        div = h("div")
        card = jsx(Card)

        assert format_children([div, [card, "text"], None]) == (
            f"[div-{div.id} [Card-{card.id} ] ]"
        )

    def test_empty_values(self) -> None:
        """Text, None and booleans format to nothing."""
        assert format_children(None) == ""
        assert format_children(True) == ""
        assert format_children("hello") == ""

    def test_repr(self) -> None:
        """repr shows the name and id."""
        node = Node(type="p")

        assert repr(node) == f"Node(p-{node.id})"
