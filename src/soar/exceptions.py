"""Custom exceptions for soar."""


class SoarError(Exception):
    """Base exception for soar operations."""


class RenderError(SoarError):
    """Error while expanding a node tree into a document."""


class ComponentError(RenderError):
    """A functional component raised or returned a failed awaitable."""


class StyleError(SoarError):
    """Error while collecting or compiling styles."""


class StyleCompileError(StyleError):
    """Style source could not be parsed or scoped."""
