"""Breadth-first constraint propagation across the grid.

After a cell changes, every neighbour is narrowed to the tiles that the
changed cell's candidates allow in that direction. A neighbour that shrinks
is queued in turn, so the change ripples outward until nothing else can be
removed (fixpoint) or some cell is left with no candidates (contradiction).

This is AC-3 restricted to 4-directional arcs on a grid. The allowed set for
a neighbour in direction ``d`` is the union of ``tile.adjacency[d]`` over
the source cell's candidates; the neighbour's own rules are applied when
the neighbour is itself dequeued. Collapsed neighbours are skipped: their
tile is fixed, and an asymmetric rule set is applied exactly as declared,
from the changed cell outward.
"""

from __future__ import annotations

from collections import deque

from .changelog import ChangeLog
from .errors import Contradiction
from .grid import Grid
from .types import Direction, TileSet


def allowed_neighbours(
    candidates: tuple[int, ...], direction: Direction, tileset: TileSet
) -> frozenset[int]:
    """Union of what each candidate permits in ``direction``."""
    if len(candidates) == 1:
        return tileset.tiles[candidates[0]].allowed(direction)
    allowed: set[int] = set()
    for t in candidates:
        allowed |= tileset.tiles[t].allowed(direction)
    return frozenset(allowed)


def propagate(
    grid: Grid,
    tileset: TileSet,
    start: tuple[int, int],
    changelog: ChangeLog,
) -> int:
    """Propagate from ``start`` until fixpoint.

    Every narrowed cell is recorded into ``changelog`` before it is
    mutated. Returns the number of cells narrowed. Raises Contradiction as
    soon as a cell would be emptied; the rest of the queue is abandoned.
    """
    queue = deque([start])
    narrowed = 0
    while queue:
        x, y = queue.popleft()
        source = grid.cell(x, y).candidates
        for direction, nx, ny in grid.neighbours(x, y):
            neighbour = grid.cell(nx, ny)
            if neighbour.collapsed:
                continue
            allowed = allowed_neighbours(source, direction, tileset)
            remaining = tuple(t for t in neighbour.candidates if t in allowed)
            if len(remaining) == len(neighbour.candidates):
                continue
            changelog.record(neighbour)
            if not remaining:
                neighbour.set_candidates(remaining)
                raise Contradiction(nx, ny)
            neighbour.set_candidates(remaining)
            narrowed += 1
            queue.append((nx, ny))
    return narrowed
