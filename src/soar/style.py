"""Compile collected style fragments into one scoped stylesheet.

Every selector in a scoped fragment is rewritten so it only matches elements
carrying the fragment's scope attribute, e.g. ``p`` becomes
``p[scope="1a2b3c"]``. Segments wrapped in ``:global(...)`` are unwrapped and
left alone. Bare declarations apply to the elements the style was attached
to, and CSS nesting (``&``) is flattened against the enclosing selector.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from soar.config import SOAR_MINIFY_CSS, SOAR_SCOPE_ATTRIBUTE
from soar.exceptions import StyleCompileError
from soar.schemas import StyleFragment

try:
    import rcssmin
    import tinycss2
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "tinycss2 and rcssmin are required for style compilation "
        "(pip install tinycss2 rcssmin)."
    ) from exc

logger = logging.getLogger(__name__)

NESTING = "&"
_COMBINATORS = frozenset({">", "+", "~"})
# At-rules whose blocks hold rules that still need scoping
_GROUPING_AT_RULES = frozenset({"media", "supports", "container", "layer"})
_GLOBAL_ROOT = ":root"


@dataclass
class _Declaration:
    tokens: list[Any]


@dataclass
class _QualifiedRule:
    prelude: list[Any]
    content: list[Any]


@dataclass
class _AtRule:
    name: str
    prelude: list[Any]
    content: list[Any] | None


class StyleCollector:
    """Accumulates style fragments for one render pass.

    Fragments keep first-discovery order. Recording a scope that is already
    known only adds the new host, so identical style blocks produce a
    single fragment.
    """

    def __init__(self) -> None:
        self._fragments: dict[tuple[str | None, str | None], StyleFragment] = {}

    def add(self, scope: str, css: str) -> StyleFragment:
        key = (scope, None)
        fragment = self._fragments.get(key)
        if fragment is None:
            fragment = StyleFragment(scope=scope, css=css)
            self._fragments[key] = fragment
        return fragment

    def add_host(self, scope: str, tag: str) -> None:
        fragment = self._fragments.get((scope, None))
        if fragment is not None and tag not in fragment.hosts:
            fragment.hosts.append(tag)

    def add_global(self, css: str) -> StyleFragment:
        key = (None, css)
        fragment = self._fragments.get(key)
        if fragment is None:
            fragment = StyleFragment(scope=None, css=css)
            self._fragments[key] = fragment
        return fragment

    @property
    def fragments(self) -> list[StyleFragment]:
        return list(self._fragments.values())

    def __len__(self) -> int:
        return len(self._fragments)


def scope_attribute_selector(scope: str, attribute: str = SOAR_SCOPE_ATTRIBUTE) -> str:
    """Attribute selector matching elements marked with ``scope``."""
    return f'[{attribute}="{scope}"]'


def scope_selector(
    selector: str, scope: str | None, attribute: str = SOAR_SCOPE_ATTRIBUTE
) -> str:
    """Rewrite a selector list so each selector is constrained to ``scope``.

    Each compound segment gets the scope attribute: it replaces a bare
    ``*``, follows a type selector, and otherwise leads the segment (so it
    sits before a class, id or pseudo-class). Segments containing
    ``:global(...)`` are unwrapped without the attribute. Segments containing
    ``&`` are left as is since they stand for an already scoped selector;
    this is how globalness carries across ``:global(.a) &``.

    Args:
        selector: Comma-separated selector list.
        scope: Scope identifier. With None, only ``:global`` is unwrapped.
        attribute: Name of the scope marker attribute.

    Returns:
        The rewritten selector list, joined with ``", "``.

    Raises:
        StyleCompileError: If the selector cannot be parsed.
    """
    tokens = _parse(selector)
    marker = scope_attribute_selector(scope, attribute) if scope else None
    rewritten = []
    for selector_tokens in _split_selector_list(_strip(tokens)):
        pieces, _ = _rewrite_selector(selector_tokens, marker)
        rewritten.append("".join(pieces))
    return ", ".join(rewritten)


def host_selectors(
    fragment: StyleFragment, attribute: str = SOAR_SCOPE_ATTRIBUTE
) -> list[str]:
    """Selectors for the elements a fragment's bare declarations apply to."""
    if fragment.scope is None:
        return [_GLOBAL_ROOT]
    marker = scope_attribute_selector(fragment.scope, attribute)
    if not fragment.hosts:
        return [marker]
    return [f"{host}{marker}" for host in fragment.hosts]


def compile_fragment(
    fragment: StyleFragment, attribute: str = SOAR_SCOPE_ATTRIBUTE
) -> str:
    """Compile one fragment into flat CSS rules, one rule per line."""
    if not fragment.css.strip():
        return ""
    tokens = _parse(fragment.css)
    marker = (
        scope_attribute_selector(fragment.scope, attribute)
        if fragment.scope
        else None
    )
    rules = _compile_block(
        tokens, host_selectors(fragment, attribute), marker, nested=False
    )
    return "\n".join(rules)


def compile_styles(
    fragments: Iterable[StyleFragment],
    *,
    attribute: str = SOAR_SCOPE_ATTRIBUTE,
    minify: bool = SOAR_MINIFY_CSS,
) -> str:
    """Compile fragments, in order, into a single stylesheet.

    Raises:
        StyleCompileError: If any fragment is malformed. Nothing is returned
            for the other fragments in that case.
    """
    fragments = list(fragments)
    blocks = []
    for fragment in fragments:
        compiled = compile_fragment(fragment, attribute)
        if compiled:
            blocks.append(compiled)
    stylesheet = "\n".join(blocks)
    if minify and stylesheet:
        stylesheet = rcssmin.cssmin(stylesheet)
    logger.debug(
        "Compiled %d style fragments into %d characters",
        len(fragments),
        len(stylesheet),
    )
    return stylesheet


def _parse(css: str) -> list[Any]:
    tokens = tinycss2.parse_component_value_list(css, skip_comments=True)
    _check_errors(tokens)
    return tokens


def _check_errors(tokens: Sequence[Any]) -> None:
    for token in tokens:
        if token.type == "error":
            raise StyleCompileError(
                f"Invalid style at line {token.source_line}, column {token.source_column}: "
                f"{token.message}"
            )
        if token.type == "function":
            _check_errors(token.arguments)
        elif token.type.endswith("block"):
            _check_errors(token.content)


def _strip(tokens: Sequence[Any]) -> list[Any]:
    start, end = 0, len(tokens)
    while start < end and tokens[start].type in ("whitespace", "comment"):
        start += 1
    while end > start and tokens[end - 1].type in ("whitespace", "comment"):
        end -= 1
    return list(tokens[start:end])


def _is_literal(token: Any, value: str) -> bool:
    return token.type == "literal" and token.value == value


def _is_nesting(token: Any) -> bool:
    return _is_literal(token, NESTING)


def _split_items(tokens: Sequence[Any]) -> list[_Declaration | _QualifiedRule | _AtRule]:
    items: list[_Declaration | _QualifiedRule | _AtRule] = []
    buffer: list[Any] = []
    for token in tokens:
        if token.type == "comment":
            continue
        if _is_literal(token, ";"):
            _flush_statement(buffer, items)
            buffer = []
        elif token.type == "{} block":
            items.append(_block_item(buffer, token.content))
            buffer = []
        else:
            buffer.append(token)
    _flush_statement(buffer, items)
    return items


def _flush_statement(buffer: list[Any], items: list[Any]) -> None:
    stripped = _strip(buffer)
    if not stripped:
        return
    if stripped[0].type == "at-keyword":
        items.append(_AtRule(stripped[0].lower_value, stripped[1:], None))
    else:
        items.append(_Declaration(stripped))


def _block_item(prelude: list[Any], content: list[Any]) -> _QualifiedRule | _AtRule:
    stripped = _strip(prelude)
    if not stripped:
        raise StyleCompileError("Style block without a selector")
    if stripped[0].type == "at-keyword":
        return _AtRule(stripped[0].lower_value, stripped[1:], content)
    return _QualifiedRule(stripped, content)


def _serialize_declaration(tokens: list[Any]) -> str:
    name = tokens[0]
    if name.type != "ident":
        raise StyleCompileError(
            f"Invalid declaration: {tinycss2.serialize(tokens).strip()!r}"
        )
    rest = _strip(tokens[1:])
    if not rest or not _is_literal(rest[0], ":"):
        raise StyleCompileError(f"Expected ':' after property {name.value!r}")
    value = _strip(rest[1:])
    if not value:
        raise StyleCompileError(f"Missing value for property {name.value!r}")
    return f"{tinycss2.serialize([name])}:{tinycss2.serialize(value)}"


def _split_selector_list(tokens: Sequence[Any]) -> list[list[Any]]:
    selectors: list[list[Any]] = [[]]
    for token in tokens:
        if _is_literal(token, ","):
            selectors.append([])
        else:
            selectors[-1].append(token)
    stripped = [_strip(selector) for selector in selectors]
    if any(not selector for selector in stripped):
        raise StyleCompileError("Empty selector in selector list")
    return stripped


def _split_compounds(tokens: Sequence[Any]) -> list[list[Any] | str]:
    """Split a complex selector into compound segments and combinators."""
    parts: list[list[Any] | str] = []
    compound: list[Any] = []
    combinator: str | None = None
    for token in tokens:
        if token.type in ("whitespace", "comment"):
            if compound:
                parts.append(compound)
                compound = []
                combinator = combinator or " "
            continue
        if token.type == "literal" and token.value in _COMBINATORS:
            if compound:
                parts.append(compound)
                compound = []
            if combinator not in (None, " "):
                raise StyleCompileError(
                    f"Unexpected combinator {token.value!r} after {combinator!r}"
                )
            combinator = token.value
            continue
        if combinator is not None:
            parts.append(combinator)
            combinator = None
        compound.append(token)
    if compound:
        parts.append(compound)
    elif combinator is not None:
        raise StyleCompileError(f"Selector ends with combinator {combinator!r}")
    return parts


def _global_argument(compound: Sequence[Any], index: int) -> list[Any] | None:
    """Inner selector if ``compound[index:]`` starts with ``:global(...)``."""
    if not _is_literal(compound[index], ":") or index + 1 >= len(compound):
        return None
    function = compound[index + 1]
    if function.type != "function" or function.lower_name != "global":
        return None
    inner = _strip(function.arguments)
    if not inner:
        raise StyleCompileError(":global() requires a selector")
    return inner


def _has_global(compound: Sequence[Any]) -> bool:
    return any(
        _global_argument(compound, index) is not None
        for index in range(len(compound))
    )


def _render_compound(compound: Sequence[Any]) -> list[str]:
    pieces: list[str] = []
    index = 0
    while index < len(compound):
        inner = _global_argument(compound, index)
        if inner is not None:
            pieces.append(_serialize_unwrapped(inner))
            index += 2
            continue
        token = compound[index]
        pieces.append(NESTING if _is_nesting(token) else _serialize_unwrapped([token]))
        index += 1
    return pieces


def _serialize_unwrapped(tokens: Sequence[Any]) -> str:
    """Serialize tokens, unwrapping :global() inside functional pseudo-classes."""
    parts: list[str] = []
    index = 0
    while index < len(tokens):
        inner = _global_argument(tokens, index)
        if inner is not None:
            parts.append(_serialize_unwrapped(inner))
            index += 2
            continue
        token = tokens[index]
        if token.type == "function":
            parts.append(f"{token.name}({_serialize_unwrapped(token.arguments)})")
        else:
            parts.append(tinycss2.serialize([token]))
        index += 1
    return "".join(parts)


def _scoped_compound(compound: Sequence[Any], marker: str) -> list[str]:
    first = compound[0]
    if _is_literal(first, "*"):
        return [marker, *_render_compound(compound[1:])]
    if first.type == "ident":
        return [tinycss2.serialize([first]), marker, *_render_compound(compound[1:])]
    return [marker, *_render_compound(compound)]


def _rewrite_selector(
    tokens: Sequence[Any], marker: str | None
) -> tuple[list[str], bool]:
    """Rewrite one complex selector.

    Returns the selector pieces, with ``&`` kept as separate pieces, and
    whether the selector starts with a combinator (relative selector).
    """
    parts = _split_compounds(tokens)
    pieces: list[str] = []
    for part in parts:
        if isinstance(part, str):
            pieces.append(" " if part == " " else f" {part} ")
        elif (
            marker is None
            or _has_global(part)
            or any(_is_nesting(token) for token in part)
        ):
            pieces.extend(_render_compound(part))
        else:
            pieces.extend(_scoped_compound(part, marker))
    relative = bool(parts) and isinstance(parts[0], str)
    return pieces, relative


def _resolve(
    pieces: list[str], relative: bool, parents: Sequence[str], nested: bool
) -> list[str]:
    if NESTING not in pieces:
        if relative:
            pieces = [NESTING, *pieces]
        elif nested:
            pieces = [NESTING, " ", *pieces]
        else:
            return ["".join(pieces)]
    return [
        "".join(parent if piece == NESTING else piece for piece in pieces)
        for parent in parents
    ]


def _compile_selectors(
    prelude: Sequence[Any], parents: Sequence[str], marker: str | None, nested: bool
) -> list[str]:
    selectors: list[str] = []
    for tokens in _split_selector_list(prelude):
        pieces, relative = _rewrite_selector(tokens, marker)
        for selector in _resolve(pieces, relative, parents, nested):
            if selector not in selectors:
                selectors.append(selector)
    return selectors


def _compile_block(
    tokens: Sequence[Any], parents: Sequence[str], marker: str | None, nested: bool
) -> list[str]:
    declarations: list[str] = []
    rules: list[str] = []
    for item in _split_items(tokens):
        if isinstance(item, _Declaration):
            declarations.append(_serialize_declaration(item.tokens))
        elif isinstance(item, _QualifiedRule):
            selectors = _compile_selectors(item.prelude, parents, marker, nested)
            rules.extend(_compile_block(item.content, selectors, marker, nested=True))
        else:
            rules.extend(_compile_at_rule(item, parents, marker, nested))
    if declarations:
        rules.insert(0, f"{','.join(parents)}{{{';'.join(declarations)}}}")
    return rules


def _compile_at_rule(
    rule: _AtRule, parents: Sequence[str], marker: str | None, nested: bool
) -> list[str]:
    prelude = tinycss2.serialize(_strip(rule.prelude))
    head = f"@{rule.name} {prelude}" if prelude else f"@{rule.name}"
    if rule.content is None:
        return [f"{head};"]
    if rule.name in _GROUPING_AT_RULES:
        inner = _compile_block(rule.content, parents, marker, nested)
        return [f"{head}{{{''.join(inner)}}}"] if inner else []
    return [f"{head}{{{tinycss2.serialize(_strip(rule.content))}}}"]
