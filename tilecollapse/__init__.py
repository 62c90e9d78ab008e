"""Wave Function Collapse tile-grid generation."""

from .errors import Contradiction, InvalidOperation, LoadError
from .grid import Cell, Grid
from .solver import Solver, run, run_json
from .tileset_io import load_builtin_tileset, load_tileset, resolve_tileset
from .types import (
    Direction,
    Pin,
    SolveResult,
    SolverParams,
    SolveStatus,
    Tile,
    TileSet,
)

__all__ = [
    "Cell",
    "Contradiction",
    "Direction",
    "Grid",
    "InvalidOperation",
    "LoadError",
    "Pin",
    "SolveResult",
    "SolveStatus",
    "Solver",
    "SolverParams",
    "Tile",
    "TileSet",
    "load_builtin_tileset",
    "load_tileset",
    "resolve_tileset",
    "run",
    "run_json",
]
