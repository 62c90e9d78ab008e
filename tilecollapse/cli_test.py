import argparse
import json
import logging

import pytest

from tilecollapse import cli
from tilecollapse.logging_config import LOGGER_NAME
from tilecollapse.tileset_io import fixture_tileset_path
from tilecollapse.types import Pin, SolveResult, SolveStatus


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_generate_prints_grid_and_summary(capsys):
    code = cli.main(
        ["generate", "--tileset", "coast", "-W", "4", "-H", "3", "--seed", "1"]
    )
    assert code == cli.EXIT_OK
    lines = capsys.readouterr().out.splitlines()
    rows, blank, summary = lines[:3], lines[3], lines[4]
    names = {"water", "sand", "grass", "forest"}
    for row in rows:
        assert len(row.split()) == 4
        assert set(row.split()) <= names
    assert blank == ""
    assert summary.startswith("collapsed: seed 1, ")
    assert "0 backtracks" in summary


def test_generate_json(capsys):
    code = cli.main(
        [
            "generate",
            "--tileset",
            "coast",
            "-W",
            "3",
            "-H",
            "2",
            "--seed",
            "5",
            "--json",
        ]
    )
    assert code == cli.EXIT_OK
    out = json.loads(capsys.readouterr().out)
    assert out["status"] == "collapsed"
    assert out["seed"] == 5
    assert len(out["tiles"]) == 6


def test_generate_is_reproducible(capsys):
    argv = ["generate", "--tileset", "coast", "-W", "6", "-H", "4"]
    argv += ["--seed", "31", "--json"]
    cli.main(argv)
    first = json.loads(capsys.readouterr().out)
    cli.main(argv)
    assert json.loads(capsys.readouterr().out) == first


def test_contradicting_pins_exit_unsolvable(capsys):
    path = str(fixture_tileset_path("deadlock"))
    code = cli.main(
        [
            "generate",
            "--tileset",
            path,
            "-W",
            "3",
            "-H",
            "1",
            "--seed",
            "1",
            "--pin",
            "0,0,A",
            "--pin",
            "1,0,B",
        ]
    )
    assert code == cli.EXIT_UNSOLVABLE
    out = capsys.readouterr().out
    assert out.splitlines()[0].split() == ["A", "?", "?"]
    assert "unsolvable: seed 1" in out
    assert "contradiction at (1, 0)" in out


def test_step_limit_exit_code(capsys):
    code = cli.main(
        [
            "generate",
            "--tileset",
            "coast",
            "-W",
            "8",
            "-H",
            "8",
            "--seed",
            "2",
            "--max-steps",
            "1",
        ]
    )
    assert code == cli.EXIT_STEP_LIMIT
    assert "in_progress" in capsys.readouterr().out


def test_describe(capsys):
    assert cli.main(["describe", "--tileset", "pipes"]) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "Tileset: pipes (8 tiles)" in out
    assert "Tile: cross (Index: 6)" in out


def test_unknown_tileset_is_error(capsys):
    code = cli.main(["describe", "--tileset", "no_such_set"])
    assert code == cli.EXIT_ERROR
    assert capsys.readouterr().err.startswith("Error: no builtin tileset")


def test_bad_dimensions_is_error(capsys):
    code = cli.main(["generate", "--tileset", "coast", "-W", "0"])
    assert code == cli.EXIT_ERROR
    assert "Error:" in capsys.readouterr().err


def test_unknown_pin_tile_is_error(capsys):
    code = cli.main(
        ["generate", "--tileset", "coast", "-W", "2", "-H", "2"]
        + ["--pin", "0,0,lava"]
    )
    assert code == cli.EXIT_ERROR
    assert "lava" in capsys.readouterr().err


def test_malformed_pin_is_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["generate", "--tileset", "coast", "--pin", "1,2"])
    assert excinfo.value.code == 2


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2


def test_profile_writes_stats(tmp_path, capsys):
    out_file = tmp_path / "run.prof"
    code = cli.main(
        [
            "profile",
            "--tileset",
            "coast",
            "-W",
            "4",
            "-H",
            "4",
            "--seed",
            "1",
            "--top",
            "5",
            "-o",
            str(out_file),
        ]
    )
    assert code == cli.EXIT_OK
    assert out_file.exists()
    out = capsys.readouterr().out
    assert "Top 5 functions by cumulative time (collapsed)" in out


class TestPinArg:
    def test_parses(self):
        assert cli._pin("3,4,corner_ne") == Pin(3, 4, "corner_ne")

    @pytest.mark.parametrize("text", ["1,2", "a,b,water", ""])
    def test_rejects(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            cli._pin(text)


def test_format_grid_pads_and_marks_uncollapsed():
    result = SolveResult(
        status=SolveStatus.IN_PROGRESS,
        seed=0,
        width=2,
        height=2,
        tiles=["water", "sand", None, "grass"],
    )
    assert cli.format_grid(result) == "water sand\n?     grass"
