"""Wave Function Collapse solver.

Drives the observe / collapse / propagate cycle over a ``Grid``:

  * ``observe.py``: lowest-entropy cell selection and the weighted
    collapse rule.
  * ``propagate.py``: breadth-first narrowing of neighbours until
    fixpoint or contradiction.
  * ``changelog.py``: snapshots of every cell a step touches, so a step
    that ends in a contradiction can be reverted in place.

``Solver.step`` performs exactly one observe-collapse-propagate cycle and
never backtracks on its own; a failed step leaves the grid in its
contradictory state (``has_failed()``) with the change log intact.
``Solver.solve`` loops over steps and spends its backtrack budget on those
failures: it reverts the failed step and, when that step was an
entropy-driven collapse, bans the tile it picked from that cell so the
retry cannot make the same choice. Only the most recent step can be
reverted. When the budget runs out the grid is left as the failed step
left it (not reverted), and ``backtrack()`` can still undo that step.

**Determinism:** all randomness flows through one seeded ``PCG32`` owned
by the solver. Tie-breaking and collapse share that stream, so scan order
and call order are part of what a seed reproduces.

The batch API is ``run(params)`` returning a ``SolveResult``, and
``run_json(dict)`` for a JSON-dict in, JSON-dict out interface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .changelog import ChangeLog
from .errors import Contradiction, InvalidOperation
from .grid import Cell, Grid
from .observe import collapse_cell, find_lowest_entropy
from .prng import PCG32, random_seed
from .propagate import propagate
from .tileset_io import resolve_tileset
from .types import SolverParams, SolveResult, SolveStatus, TileSet

log = logging.getLogger(__name__)


@dataclass
class _StepRecord:
    action: str  # "collapse", "manual", "ban"
    x: int
    y: int
    tile: int


class Solver:
    def __init__(
        self, tileset: TileSet | None = None, seed: int | None = None
    ) -> None:
        self.tileset = tileset
        self.grid: Grid | None = None
        self.rng: PCG32 | None = None
        self.seed = seed
        # Used by initialize() when it is not given a seed of its own.
        self._default_seed = seed
        self.contradiction: Contradiction | None = None
        self.steps_taken = 0
        self.backtracks_used = 0
        self._changelog = ChangeLog()
        self._last_step: _StepRecord | None = None

    def initialize(
        self,
        width: int,
        height: int,
        seed: int | None = None,
        tileset: TileSet | None = None,
    ) -> None:
        """Start a fresh grid in full superposition.

        Without a seed here or at construction a random one is picked; it
        is stored in ``self.seed`` so the run can be reproduced.
        """
        if tileset is not None:
            self.tileset = tileset
        if self.tileset is None:
            raise InvalidOperation("no tileset to initialize with")
        self.grid = Grid.initialize(width, height, self.tileset)
        if seed is None:
            seed = self._default_seed
        self.seed = random_seed() if seed is None else seed
        self.rng = PCG32(self.seed)
        self.contradiction = None
        self.steps_taken = 0
        self.backtracks_used = 0
        self._changelog.reset()
        self._last_step = None
        log.info(
            "Initialized %dx%d grid over %d tiles (seed %d)",
            width,
            height,
            len(self.tileset),
            self.seed,
        )

    def is_collapsed(self) -> bool:
        return (
            self.grid is not None
            and self.contradiction is None
            and self.grid.is_fully_collapsed()
        )

    def has_failed(self) -> bool:
        return self.contradiction is not None

    def cell(self, x: int, y: int) -> Cell:
        """Copy of the cell at (x, y); changing it does not affect the grid."""
        grid = self._require_grid()
        if not grid.in_bounds(x, y):
            raise InvalidOperation(
                f"({x}, {y}) outside {grid.width}x{grid.height} grid"
            )
        return grid.cell(x, y).snapshot()

    def step(self) -> SolveStatus:
        """Run one observe-collapse-propagate cycle."""
        grid = self._require_grid()
        if self.contradiction is not None:
            return SolveStatus.CONTRADICTION

        self._changelog.reset()
        cell = find_lowest_entropy(grid, self.rng)
        if cell is None:
            return SolveStatus.COLLAPSED

        self._changelog.record(cell)
        tile = collapse_cell(cell, self.tileset, self.rng)
        self.steps_taken += 1
        log.debug(
            "Collapsed cell (%d, %d) -> %s",
            cell.x,
            cell.y,
            self.tileset.tiles[tile].name,
        )
        return self._propagate_from(
            _StepRecord("collapse", cell.x, cell.y, tile)
        )

    def manual_set_cell(self, x: int, y: int, tile_name: str) -> SolveStatus:
        """Force an uncollapsed cell to ``tile_name`` and propagate.

        Forcing a tile that propagation had already ruled out for the cell
        is a contradiction, reported through the returned status.
        Raises InvalidOperation, leaving the grid unchanged, when the cell
        is out of bounds or already collapsed, the tile is unknown, or the
        solver is waiting for a backtrack.
        """
        grid = self._require_grid()
        if self.contradiction is not None:
            raise InvalidOperation("solver has failed; backtrack first")
        if not grid.in_bounds(x, y):
            raise InvalidOperation(
                f"({x}, {y}) outside {grid.width}x{grid.height} grid"
            )
        cell = grid.cell(x, y)
        if cell.collapsed:
            raise InvalidOperation(f"cell ({x}, {y}) is already collapsed")
        try:
            tile = self.tileset.index_of(tile_name)
        except KeyError:
            raise InvalidOperation(f"unknown tile {tile_name!r}") from None

        self._changelog.reset()
        self._changelog.record(cell)
        record = _StepRecord("manual", x, y, tile)
        log.debug("Manually set cell (%d, %d) -> %s", x, y, tile_name)
        if tile not in cell.candidates:
            cell.set_candidates(())
            self._last_step = record
            return self._fail(Contradiction(x, y))
        cell.set_candidates((tile,))
        return self._propagate_from(record)

    def backtrack(self) -> SolveStatus:
        """Revert the failed step and clear the contradiction.

        If the failed step was an entropy-driven collapse, the tile it chose
        is then removed from that cell and the removal is propagated as a
        step of its own, which can itself fail.
        """
        grid = self._require_grid()
        if self.contradiction is None:
            raise InvalidOperation("no contradiction to backtrack from")
        restored = self._changelog.revert(grid)
        self._changelog.reset()
        failed = self._last_step
        self._last_step = None
        self.contradiction = None
        self.backtracks_used += 1
        log.warning("Backtracked: restored %d cells", restored)

        if failed is not None and failed.action == "collapse":
            return self._ban(failed.x, failed.y, failed.tile)
        return self._status()

    def solve(
        self, max_steps: int | None = None, max_backtracks: int = 0
    ) -> SolveStatus:
        """Step until collapsed, unsolvable, or ``max_steps`` steps ran.

        Returns COLLAPSED, UNSOLVABLE or IN_PROGRESS. Each contradiction
        costs one unit of ``max_backtracks``; an already-failed solver
        counts too.
        """
        grid = self._require_grid()
        budget = max_backtracks
        steps = 0
        while True:
            if self.contradiction is not None:
                if budget <= 0:
                    return self._finish(SolveStatus.UNSOLVABLE)
                budget -= 1
                self.backtrack()
                continue
            if max_steps is not None and steps >= max_steps:
                if grid.is_fully_collapsed():
                    return self._finish(SolveStatus.COLLAPSED)
                return self._finish(SolveStatus.IN_PROGRESS)
            status = self.step()
            steps += 1
            if status is SolveStatus.COLLAPSED:
                return self._finish(status)

    def result(self, status: SolveStatus | None = None) -> SolveResult:
        grid = self._require_grid()
        if status is None:
            status = self._status()
        names = self.tileset.names
        return SolveResult(
            status=status,
            seed=self.seed,
            width=grid.width,
            height=grid.height,
            tiles=[
                names[c.candidates[0]] if c.collapsed else None
                for c in grid.cells()
            ],
            steps=self.steps_taken,
            backtracks=self.backtracks_used,
            contradiction=(
                (self.contradiction.x, self.contradiction.y)
                if self.contradiction is not None
                else None
            ),
        )

    def _require_grid(self) -> Grid:
        if self.grid is None:
            raise InvalidOperation("solver is not initialized")
        return self.grid

    def _status(self) -> SolveStatus:
        if self.contradiction is not None:
            return SolveStatus.CONTRADICTION
        if self.grid.is_fully_collapsed():
            return SolveStatus.COLLAPSED
        return SolveStatus.IN_PROGRESS

    def _propagate_from(self, record: _StepRecord) -> SolveStatus:
        self._last_step = record
        try:
            propagate(
                self.grid, self.tileset, (record.x, record.y), self._changelog
            )
        except Contradiction as e:
            return self._fail(e)
        return self._status()

    def _fail(self, contradiction: Contradiction) -> SolveStatus:
        self.contradiction = contradiction
        log.warning(
            "Contradiction at (%d, %d) after %s of (%d, %d)",
            contradiction.x,
            contradiction.y,
            self._last_step.action,
            self._last_step.x,
            self._last_step.y,
        )
        return SolveStatus.CONTRADICTION

    def _ban(self, x: int, y: int, tile: int) -> SolveStatus:
        cell = self.grid.cell(x, y)
        # The cell was uncollapsed when chosen, so at least one tile remains.
        remaining = tuple(t for t in cell.candidates if t != tile)
        self._changelog.reset()
        self._changelog.record(cell)
        cell.set_candidates(remaining)
        log.debug(
            "Banned %s from cell (%d, %d)",
            self.tileset.tiles[tile].name,
            x,
            y,
        )
        return self._propagate_from(_StepRecord("ban", x, y, tile))

    def _finish(self, status: SolveStatus) -> SolveStatus:
        log.info(
            "Solve finished: %s after %d steps, %d backtracks",
            status.value,
            self.steps_taken,
            self.backtracks_used,
        )
        return status


def run(params: SolverParams) -> SolveResult:
    """Initialize, apply pins, and solve.

    Pins are hard constraints: one that contradicts ends the run as
    UNSOLVABLE without solving.
    """
    solver = Solver(params.tileset)
    solver.initialize(params.width, params.height, params.seed)
    for pin in params.pins:
        if solver.manual_set_cell(pin.x, pin.y, pin.tile) is (
            SolveStatus.CONTRADICTION
        ):
            return solver.result(SolveStatus.UNSOLVABLE)
    status = solver.solve(params.max_steps, params.max_backtracks)
    return solver.result(status)


def run_json(params_dict: dict) -> dict:
    """JSON-dict in, JSON-dict out wrapper.

    ``tileset`` may be inline tileset JSON or the name of a builtin set.
    """
    tileset = None
    if isinstance(params_dict.get("tileset"), str):
        tileset = resolve_tileset(params_dict["tileset"])
    params = SolverParams.from_dict(params_dict, tileset=tileset)
    return run(params).to_dict()
