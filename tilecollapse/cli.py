#!/usr/bin/env python3
"""Command line front end for the solver.

Usage:
    tilecollapse generate --tileset coast --width 24 --height 12 --seed 7
    tilecollapse generate --tileset coast -W 8 -H 8 --pin 0,0,water --backtracks 20
    tilecollapse generate --tileset path/to/tiles.json -W 8 -H 8 --json
    tilecollapse describe --tileset pipes        # verify a tileset loads
    tilecollapse profile --tileset coast -W 64 -H 64 --top 20

``--tileset`` takes a builtin name or a path to a JSON file.

Exit status: 0 collapsed, 1 error, 2 usage, 3 unsolvable, 4 step limit hit.
"""

from __future__ import annotations

import argparse
import cProfile
import json
import pstats
import sys
import time

import numpy as np

from .logging_config import setup_logging
from .solver import run
from .tileset_io import builtin_tileset_names, resolve_tileset
from .types import Pin, SolveResult, SolverParams, SolveStatus

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNSOLVABLE = 3
EXIT_STEP_LIMIT = 4

_EXIT_FOR_STATUS = {
    SolveStatus.COLLAPSED: EXIT_OK,
    SolveStatus.UNSOLVABLE: EXIT_UNSOLVABLE,
    SolveStatus.IN_PROGRESS: EXIT_STEP_LIMIT,
}

UNCOLLAPSED = "?"


def _pin(text: str) -> Pin:
    parts = text.split(",", 2)
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected X,Y,TILE, got {text!r}")
    try:
        return Pin(int(parts[0]), int(parts[1]), parts[2])
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"coordinates must be integers in {text!r}"
        ) from None


def format_grid(result: SolveResult) -> str:
    """One line per row, names padded to a common width, ``?`` if unresolved."""
    cells = np.array(
        [UNCOLLAPSED if t is None else t for t in result.tiles], dtype=object
    ).reshape(result.height, result.width)
    width = max(len(str(v)) for v in cells.flat)
    return "\n".join(
        " ".join(str(v).ljust(width) for v in row).rstrip() for row in cells
    )


def _params_from_args(args) -> SolverParams:
    return SolverParams(
        width=args.width,
        height=args.height,
        tileset=resolve_tileset(args.tileset),
        seed=args.seed,
        max_steps=args.max_steps,
        max_backtracks=args.backtracks,
        pins=list(args.pin or []),
    )


def cmd_generate(args) -> int:
    params = _params_from_args(args)
    t1 = time.perf_counter()
    result = run(params)
    elapsed = time.perf_counter() - t1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_grid(result))
        print()
        print(
            f"{result.status.value}: seed {result.seed}, "
            f"{result.steps} steps, {result.backtracks} backtracks, "
            f"{elapsed:.3f} seconds"
        )
        if result.contradiction is not None:
            x, y = result.contradiction
            print(f"contradiction at ({x}, {y})")
    return _EXIT_FOR_STATUS[result.status]


def cmd_describe(args) -> int:
    print(resolve_tileset(args.tileset).describe())
    return EXIT_OK


def cmd_profile(args) -> int:
    """Run one generation under cProfile."""
    params = _params_from_args(args)
    top_n = args.top

    profiler = cProfile.Profile()
    print(
        f"Profiling: {args.tileset} {params.width}x{params.height} "
        f"(seed {params.seed})..."
    )
    profiler.enable()
    result = run(params)
    profiler.disable()

    print(f"\n{'=' * 70}")
    print(f"Top {top_n} functions by cumulative time ({result.status.value})")
    print(f"{'=' * 70}\n")

    stats = pstats.Stats(profiler, stream=sys.stdout)
    stats.sort_stats("cumulative")
    stats.print_stats(top_n)

    if args.output:
        profiler.dump_stats(args.output)
        print(f"\nProfile data written to {args.output}")
    return EXIT_OK


def _add_solve_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--tileset",
        required=True,
        help=(
            "Builtin tileset name "
            f"({', '.join(builtin_tileset_names())}) or path to a JSON file"
        ),
    )
    parser.add_argument("-W", "--width", type=int, default=16)
    parser.add_argument("-H", "--height", type=int, default=16)
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility; omit for a random one",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop after this many collapse steps (default: until done)",
    )
    parser.add_argument(
        "--backtracks",
        type=int,
        default=0,
        help="Contradictions to recover from before giving up",
    )
    parser.add_argument(
        "--pin",
        type=_pin,
        action="append",
        metavar="X,Y,TILE",
        help="Force a cell to a tile before solving (repeatable)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilecollapse",
        description="Generate tile grids with Wave Function Collapse",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="More logging (-v info, -vv debug)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Solve a grid and print it")
    _add_solve_args(gen)
    gen.add_argument(
        "--json", action="store_true", help="Print the result as JSON"
    )
    gen.set_defaults(func=cmd_generate)

    desc = sub.add_parser("describe", help="Print a tileset's resolved rules")
    desc.add_argument("--tileset", required=True)
    desc.set_defaults(func=cmd_describe)

    prof = sub.add_parser("profile", help="Profile one generation")
    _add_solve_args(prof)
    prof.add_argument("--top", type=int, default=30)
    prof.add_argument("--output", "-o", help="Save .prof file")
    prof.set_defaults(func=cmd_profile)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except ValueError as e:  # LoadError, InvalidOperation, bad grid size
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
