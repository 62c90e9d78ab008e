"""Load tilesets from JSON files.

Provides helpers for reading tileset JSON into a typed ``TileSet`` (via
``types.py``) and for locating the tilesets shipped with the package:

  - ``tilesets/builtin/``: ready-to-use sets (``pipes``, ``coast``) that
    the CLI accepts by name.
  - ``tilesets/test/``: tiny fixture sets used by the test suite.

Every failure (unreadable file, bad JSON, bad records) surfaces as
``LoadError`` before any solve starts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .errors import LoadError
from .types import TileSet

log = logging.getLogger(__name__)

_TILESETS_DIR = Path(__file__).parent / "tilesets"


def fixture_tileset_path(name: str) -> Path:
    """Return the path to a test fixture tileset JSON file.

    Args:
        name: Tileset name without extension (e.g. "checker").

    Returns:
        Path to ``tilesets/test/{name}.json``.
    """
    return _TILESETS_DIR / "test" / f"{name}.json"


def builtin_tileset_path(name: str) -> Path:
    """Return the path to a built-in tileset JSON file.

    Args:
        name: Tileset name without extension (e.g. "pipes").

    Returns:
        Path to ``tilesets/builtin/{name}.json``.
    """
    return _TILESETS_DIR / "builtin" / f"{name}.json"


def builtin_tileset_names() -> list[str]:
    return sorted(p.stem for p in (_TILESETS_DIR / "builtin").glob("*.json"))


def load_tileset_dict(path: Path) -> dict | list:
    """Read raw tileset JSON without validating it."""
    try:
        with open(path) as f:
            return json.load(f)
    except OSError as e:
        raise LoadError(f"cannot read tileset {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LoadError(f"invalid JSON in {path}: {e}") from e


def load_tileset(path: Path) -> TileSet:
    """Load a JSON tileset file and return a typed ``TileSet``.

    A bare list of tiles takes its name from the file stem.
    """
    path = Path(path)
    data = load_tileset_dict(path)
    tileset = TileSet.from_dict(data, name=_name_for(data, path))
    for tile in tileset.tiles:
        log.debug("Mapped %r -> %d", tile.name, tile.index)
    log.info("Loaded tileset %r with %d tiles", tileset.name, len(tileset))
    return tileset


def load_builtin_tileset(name: str) -> TileSet:
    path = builtin_tileset_path(name)
    if not path.is_file():
        raise LoadError(
            f"no builtin tileset {name!r}; "
            f"available: {', '.join(builtin_tileset_names())}"
        )
    return load_tileset(path)


def resolve_tileset(name_or_path: str) -> TileSet:
    """Load a builtin tileset by name, or a tileset file by path."""
    path = Path(name_or_path)
    if path.suffix == ".json" or path.is_file():
        return load_tileset(path)
    return load_builtin_tileset(name_or_path)


def _name_for(data: dict | list, path: Path) -> str | None:
    if isinstance(data, dict) and data.get("name"):
        return None
    return path.stem
