"""Style fragment model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class StyleFragment(BaseModel):
    """Raw style text collected for one scope during a render pass.

    Attributes:
        scope: Scope identifier, or None for unscoped (global) style text.
        css: Raw style source as attached to the node.
        hosts: Tag names of the elements that carry the style directly, in
            discovery order. Bare declarations in ``css`` apply to them.
    """

    scope: str | None = None
    css: str
    hosts: list[str] = Field(default_factory=list)
