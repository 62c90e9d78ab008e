"""Dense 2D grid of cells, each holding its remaining candidate tiles.

Cells are stored row-major (x varies fastest). Neighbours are computed from
coordinates and ``Direction`` offsets on demand; cells hold no references
to each other.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace

import numpy as np

from .types import Direction, TileSet


@dataclass
class Cell:
    x: int
    y: int
    # Ordered, distinct tile indices. Collapsed iff exactly one remains.
    candidates: tuple[int, ...]
    collapsed: bool = False

    @property
    def entropy(self) -> int:
        return len(self.candidates)

    @property
    def tile(self) -> int | None:
        """The resolved tile index, or None while in superposition."""
        return self.candidates[0] if self.collapsed else None

    def set_candidates(self, candidates: tuple[int, ...]) -> None:
        self.candidates = candidates
        self.collapsed = len(candidates) == 1

    def snapshot(self) -> Cell:
        return replace(self)


class Grid:
    def __init__(self, width: int, height: int, cells: list[Cell]) -> None:
        if len(cells) != width * height:
            raise ValueError(
                f"expected {width * height} cells, got {len(cells)}"
            )
        self.width = width
        self.height = height
        self._cells = cells

    @staticmethod
    def initialize(width: int, height: int, tileset: TileSet) -> Grid:
        """Every cell starts in superposition over the whole tileset."""
        if width <= 0 or height <= 0:
            raise ValueError(f"grid must be at least 1x1, got {width}x{height}")
        if len(tileset) == 0:
            raise ValueError("tileset has no tiles")
        all_tiles = tuple(range(len(tileset)))
        cells = []
        for y in range(height):
            for x in range(width):
                cell = Cell(x, y, all_tiles)
                cell.set_candidates(all_tiles)
                cells.append(cell)
        return Grid(width, height, cells)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        if not self.in_bounds(x, y):
            raise IndexError(
                f"({x}, {y}) outside {self.width}x{self.height} grid"
            )
        return self._cells[y * self.width + x]

    def cells(self) -> Iterator[Cell]:
        return iter(self._cells)

    def neighbours(
        self, x: int, y: int
    ) -> Iterator[tuple[Direction, int, int]]:
        """In-bounds neighbours of (x, y) in NESW order."""
        for d in Direction:
            dx, dy = d.offset
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield d, nx, ny

    def restore(self, snapshot: Cell) -> None:
        """Overwrite the live cell at the snapshot's coordinates."""
        cell = self.cell(snapshot.x, snapshot.y)
        cell.candidates = snapshot.candidates
        cell.collapsed = snapshot.collapsed

    def is_fully_collapsed(self) -> bool:
        return all(c.collapsed for c in self._cells)

    def to_array(self) -> np.ndarray:
        """Tile index per cell, shape (height, width); -1 if uncollapsed."""
        values = [c.candidates[0] if c.collapsed else -1 for c in self._cells]
        return np.array(values, dtype=np.int64).reshape(
            self.height, self.width
        )

    def entropy_array(self) -> np.ndarray:
        """Candidate count per cell, shape (height, width)."""
        return np.array(
            [len(c.candidates) for c in self._cells], dtype=np.int64
        ).reshape(self.height, self.width)
