"""Observation: pick the most constrained cell and collapse it.

Both functions draw from the solver's single ``PCG32`` stream, so the order
of calls here is part of what a seed reproduces.
"""

from __future__ import annotations

from bisect import bisect_right
from itertools import accumulate

from .grid import Cell, Grid
from .prng import PCG32
from .types import TileSet


def find_lowest_entropy(grid: Grid, rng: PCG32) -> Cell | None:
    """Return an uncollapsed cell with the fewest candidates.

    Ties are broken uniformly at random. Returns None once every cell is
    collapsed. Consumes no PRNG values when the minimum is unique.
    """
    min_entropy = 0
    lowest: list[Cell] = []
    for cell in grid.cells():
        if cell.collapsed:
            continue
        entropy = len(cell.candidates)
        if not lowest or entropy < min_entropy:
            min_entropy = entropy
            lowest = [cell]
        elif entropy == min_entropy:
            lowest.append(cell)

    if not lowest:
        return None
    if len(lowest) == 1:
        return lowest[0]
    return lowest[rng.next_below(len(lowest))]


def choose_weighted(
    candidates: tuple[int, ...], tileset: TileSet, rng: PCG32
) -> int:
    """Select one candidate with probability proportional to its weight.

    Draws r in [0, total) and takes the first candidate whose cumulative
    weight is strictly greater than r.
    """
    cumulative = list(accumulate(tileset.tiles[t].weight for t in candidates))
    r = rng.next_below(cumulative[-1])
    return candidates[bisect_right(cumulative, r)]


def collapse_cell(cell: Cell, tileset: TileSet, rng: PCG32) -> int:
    """Collapse ``cell`` in place to a weighted-random candidate."""
    chosen = choose_weighted(cell.candidates, tileset, rng)
    cell.set_candidates((chosen,))
    return chosen
