from __future__ import annotations


class InvalidGraphError(ValueError):
    """The step list cannot be turned into a single-fork step graph."""


class LayoutCollisionError(ValueError):
    """A tile would overwrite a step that is already placed in the matrix."""
