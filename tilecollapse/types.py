"""Data types for tilesets, solver parameters and results.

Tilesets come from JSON records of the form::

    {"name": "sand", "weight": 2,
     "adjacency": {"north": ["sand", "water"], "east": [...], ...}}

``TileSet.from_dict`` resolves them in two passes: names are given indices
first, then adjacency names are resolved through that map, so a record may
reference tiles declared after it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

from .errors import LoadError


class Direction(IntEnum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    @property
    def offset(self) -> tuple[int, int]:
        """(dx, dy) step towards this direction; y grows southward."""
        return _OFFSETS[self]

    @property
    def key(self) -> str:
        """Lower-case name used in tileset JSON."""
        return self.name.lower()

    def opposite(self) -> Direction:
        return Direction((self + 2) % 4)


_OFFSETS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}

DIRECTION_KEYS = tuple(d.key for d in Direction)

# The collapse draw is one 32-bit PRNG value, so candidate weights must sum
# to at most 2**32.
MAX_TOTAL_WEIGHT = 2**32


@dataclass(frozen=True)
class Tile:
    index: int
    name: str
    weight: int
    # Indexed by Direction; declaration order, duplicates dropped.
    adjacency: tuple[tuple[int, ...], ...]
    _allowed: tuple[frozenset[int], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if len(self.adjacency) != len(Direction):
            raise ValueError(
                f"tile {self.name!r} needs {len(Direction)} adjacency lists"
            )
        object.__setattr__(
            self, "_allowed", tuple(frozenset(a) for a in self.adjacency)
        )

    def allowed(self, direction: Direction) -> frozenset[int]:
        """Tile indices permitted in ``direction`` from this tile."""
        return self._allowed[direction]

    def allows(self, direction: Direction, index: int) -> bool:
        return index in self._allowed[direction]


def _check_weight(name: str, weight: object) -> int:
    # bool is an int subclass; true/false in JSON is a mistake, not a weight.
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise LoadError(f"tile {name!r}: weight must be an integer")
    if weight <= 0:
        raise LoadError(f"tile {name!r}: weight must be positive, got {weight}")
    if weight > MAX_TOTAL_WEIGHT:
        raise LoadError(
            f"tile {name!r}: weight must be at most {MAX_TOTAL_WEIGHT}"
        )
    return weight


def _resolve_adjacency(
    name: str, adjacency: object, index_by_name: dict[str, int]
) -> tuple[tuple[int, ...], ...]:
    if adjacency is None:
        adjacency = {}
    if not isinstance(adjacency, dict):
        raise LoadError(f"tile {name!r}: adjacency must be an object")
    unknown_keys = set(adjacency) - set(DIRECTION_KEYS)
    if unknown_keys:
        raise LoadError(
            f"tile {name!r}: unknown directions {sorted(unknown_keys)}"
        )

    resolved: list[tuple[int, ...]] = []
    for key in DIRECTION_KEYS:
        neighbor_names = adjacency.get(key, [])
        if not isinstance(neighbor_names, list):
            raise LoadError(f"tile {name!r}: {key} must be a list of names")
        indices: list[int] = []
        for neighbor in neighbor_names:
            if not isinstance(neighbor, str):
                raise LoadError(
                    f"tile {name!r}: {key} entries must be strings"
                )
            if neighbor not in index_by_name:
                raise LoadError(
                    f"tile {name!r}: {key} references unknown tile {neighbor!r}"
                )
            idx = index_by_name[neighbor]
            if idx not in indices:
                indices.append(idx)
        resolved.append(tuple(indices))
    return tuple(resolved)


@dataclass(frozen=True)
class TileSet:
    tiles: tuple[Tile, ...]
    name: str | None = None
    index_by_name: dict[str, int] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index_by_name: dict[str, int] = {}
        for i, tile in enumerate(self.tiles):
            if tile.index != i:
                raise ValueError(
                    f"tile {tile.name!r} has index {tile.index}, expected {i}"
                )
            if tile.name in index_by_name:
                raise ValueError(f"duplicate tile name {tile.name!r}")
            index_by_name[tile.name] = i
        object.__setattr__(self, "index_by_name", index_by_name)
        total = sum(t.weight for t in self.tiles)
        if total > MAX_TOTAL_WEIGHT:
            raise LoadError(
                f"total tile weight {total} exceeds {MAX_TOTAL_WEIGHT}"
            )

    def __len__(self) -> int:
        return len(self.tiles)

    def tile(self, index: int) -> Tile:
        return self.tiles[index]

    def index_of(self, name: str) -> int:
        """Raises KeyError for names not in the set."""
        return self.index_by_name[name]

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.tiles]

    @property
    def weights(self) -> list[int]:
        return [t.weight for t in self.tiles]

    def describe(self) -> str:
        """Multi-line dump of every tile and its resolved adjacency."""
        rule = "=" * 35
        lines = []
        if self.name:
            lines.append(f"Tileset: {self.name} ({len(self)} tiles)")
        for tile in self.tiles:
            lines.append(rule)
            lines.append(f"Tile: {tile.name} (Index: {tile.index})")
            lines.append(f"Weight: {tile.weight}")
            lines.append("Adjacency Rules (by index):")
            for d in Direction:
                listed = " ".join(str(i) for i in tile.adjacency[d])
                lines.append(f"  - {d.name.title()}: [ {listed} ]")
        lines.append(rule)
        return "\n".join(lines)

    @staticmethod
    def from_dict(d: dict | list, name: str | None = None) -> TileSet:
        """Build a tileset from a record list or ``{"name", "tiles"}`` object.

        Raises LoadError for anything malformed.
        """
        if isinstance(d, dict):
            records = d.get("tiles")
            if name is None:
                name = d.get("name")
            if not isinstance(records, list):
                raise LoadError("tileset object needs a 'tiles' list")
        elif isinstance(d, list):
            records = d
        else:
            raise LoadError("tileset must be a list of tiles or an object")
        if not records:
            raise LoadError("tileset has no tiles")

        # Pass 1: name -> index
        index_by_name: dict[str, int] = {}
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise LoadError(f"tile #{i} is not an object")
            tile_name = record.get("name")
            if not isinstance(tile_name, str) or not tile_name:
                raise LoadError(f"tile #{i} needs a non-empty string name")
            if tile_name in index_by_name:
                raise LoadError(f"duplicate tile name {tile_name!r}")
            index_by_name[tile_name] = i

        # Pass 2: resolve weights and adjacency through the map
        tiles = []
        for i, record in enumerate(records):
            tile_name = record["name"]
            if "weight" not in record:
                raise LoadError(f"tile {tile_name!r}: missing weight")
            tiles.append(
                Tile(
                    index=i,
                    name=tile_name,
                    weight=_check_weight(tile_name, record["weight"]),
                    adjacency=_resolve_adjacency(
                        tile_name, record.get("adjacency"), index_by_name
                    ),
                )
            )
        return TileSet(tiles=tuple(tiles), name=name)


class SolveStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COLLAPSED = "collapsed"
    # One step hit a contradiction; backtracking has not happened yet.
    CONTRADICTION = "contradiction"
    UNSOLVABLE = "unsolvable"


@dataclass
class Pin:
    x: int
    y: int
    tile: str

    @staticmethod
    def from_dict(d: dict) -> Pin:
        missing = [k for k in ("x", "y", "tile") if k not in d]
        if missing:
            raise LoadError(f"pin missing {', '.join(missing)}")
        return Pin(x=d["x"], y=d["y"], tile=d["tile"])

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "tile": self.tile}


@dataclass
class SolverParams:
    width: int
    height: int
    tileset: TileSet
    seed: int | None = None
    max_steps: int | None = None
    max_backtracks: int = 0
    pins: list[Pin] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict, tileset: TileSet | None = None) -> SolverParams:
        """``tileset`` overrides ``d["tileset"]`` (e.g. a resolved builtin)."""
        required = ["width", "height"]
        if tileset is None:
            required.append("tileset")
        missing = [k for k in required if k not in d]
        if missing:
            raise LoadError(f"solver params missing {', '.join(missing)}")
        if tileset is None:
            tileset = TileSet.from_dict(d["tileset"])
        return SolverParams(
            width=d["width"],
            height=d["height"],
            tileset=tileset,
            seed=d.get("seed"),
            max_steps=d.get("max_steps"),
            max_backtracks=d.get("max_backtracks", 0),
            pins=[Pin.from_dict(p) for p in d.get("pins", [])],
        )


@dataclass
class SolveResult:
    status: SolveStatus
    seed: int
    width: int
    height: int
    # Row-major tile names; None where the cell is still in superposition.
    tiles: list[str | None]
    steps: int = 0
    backtracks: int = 0
    contradiction: tuple[int, int] | None = None

    def tile_at(self, x: int, y: int) -> str | None:
        return self.tiles[y * self.width + x]

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "seed": self.seed,
            "width": self.width,
            "height": self.height,
            "tiles": list(self.tiles),
            "steps": self.steps,
            "backtracks": self.backtracks,
            "contradiction": (
                {"x": self.contradiction[0], "y": self.contradiction[1]}
                if self.contradiction is not None
                else None
            ),
        }
