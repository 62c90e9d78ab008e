"""Per-step change log used to undo a step that hit a contradiction.

Each step resets the log, and every cell the step mutates is snapshotted
the first time it is touched. Later touches in the same step are ignored,
so the log always holds the state from before the step began and
``revert`` can replay entries in any order. Only one step of history is
kept.
"""

from __future__ import annotations

from .grid import Cell, Grid


class ChangeLog:
    def __init__(self) -> None:
        self._snapshots: dict[tuple[int, int], Cell] = {}

    def reset(self) -> None:
        self._snapshots.clear()

    def record(self, cell: Cell) -> bool:
        """Snapshot ``cell`` unless it was already recorded this step.

        Returns True if a snapshot was taken.
        """
        key = (cell.x, cell.y)
        if key in self._snapshots:
            return False
        self._snapshots[key] = cell.snapshot()
        return True

    def revert(self, grid: Grid) -> int:
        """Restore every recorded cell; returns how many were restored."""
        for snapshot in self._snapshots.values():
            grid.restore(snapshot)
        return len(self._snapshots)

    def touched(self) -> list[tuple[int, int]]:
        return list(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __contains__(self, key: tuple[int, int]) -> bool:
        return key in self._snapshots
