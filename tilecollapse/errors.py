"""Exceptions raised by tileset loading and the solver."""

from __future__ import annotations


class LoadError(ValueError):
    """A tileset source is malformed or references an unknown tile."""


class InvalidOperation(ValueError):
    """A request the solver refuses without touching the grid."""


class Contradiction(Exception):
    """Propagation emptied a cell's candidate set.

    Carries the coordinates of the cell that ran out of candidates.
    """

    def __init__(self, x: int, y: int) -> None:
        super().__init__(f"cell ({x}, {y}) has no remaining candidates")
        self.x = x
        self.y = y
