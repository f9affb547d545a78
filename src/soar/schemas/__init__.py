"""Shared schemas for soar."""

from soar.schemas.style import StyleFragment

__all__ = ["StyleFragment"]
