"""soar: render component trees to HTML with scoped styles."""

from soar.exceptions import (
    ComponentError,
    RenderError,
    SoarError,
    StyleCompileError,
    StyleError,
)
from soar.jsx import (
    Fragment,
    GlobalStyle,
    Node,
    Style,
    css,
    global_css,
    h,
    isolated,
    jsx,
    jsxs,
)
from soar.render import RenderOptions, render, render_to_string
from soar.schemas import StyleFragment
from soar.style import compile_styles, scope_selector

__all__ = [
    "ComponentError",
    "Fragment",
    "GlobalStyle",
    "Node",
    "RenderError",
    "RenderOptions",
    "SoarError",
    "Style",
    "StyleCompileError",
    "StyleError",
    "StyleFragment",
    "compile_styles",
    "css",
    "global_css",
    "h",
    "isolated",
    "jsx",
    "jsxs",
    "render",
    "render_to_string",
    "scope_selector",
]
