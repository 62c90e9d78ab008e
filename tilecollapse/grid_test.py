import numpy as np
import pytest

from tilecollapse.grid import Cell, Grid
from tilecollapse.types import Direction, TileSet


def _tileset(n):
    return TileSet.from_dict(
        [{"name": f"t{i}", "weight": 1} for i in range(n)]
    )


class TestInitialize:
    def test_every_cell_in_full_superposition(self):
        grid = Grid.initialize(3, 2, _tileset(4))
        cells = list(grid.cells())
        assert len(cells) == 6
        for cell in cells:
            assert cell.candidates == (0, 1, 2, 3)
            assert not cell.collapsed
            assert cell.entropy == 4
            assert cell.tile is None

    def test_row_major_x_fastest(self):
        grid = Grid.initialize(3, 2, _tileset(2))
        coords = [(c.x, c.y) for c in grid.cells()]
        assert coords == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]

    def test_single_tile_starts_collapsed(self):
        grid = Grid.initialize(2, 2, _tileset(1))
        assert grid.is_fully_collapsed()
        assert grid.cell(1, 1).tile == 0

    @pytest.mark.parametrize("w,h", [(0, 3), (3, 0), (-1, 2)])
    def test_rejects_empty_grid(self, w, h):
        with pytest.raises(ValueError):
            Grid.initialize(w, h, _tileset(2))

    def test_rejects_wrong_cell_count(self):
        with pytest.raises(ValueError):
            Grid(2, 2, [Cell(0, 0, (0,))])


class TestAccess:
    def test_in_bounds(self):
        grid = Grid.initialize(3, 2, _tileset(2))
        assert grid.in_bounds(0, 0)
        assert grid.in_bounds(2, 1)
        assert not grid.in_bounds(3, 0)
        assert not grid.in_bounds(0, 2)
        assert not grid.in_bounds(-1, 0)

    def test_cell_out_of_bounds(self):
        grid = Grid.initialize(3, 2, _tileset(2))
        with pytest.raises(IndexError):
            grid.cell(0, 2)

    def test_neighbours_corner(self):
        grid = Grid.initialize(3, 3, _tileset(2))
        assert list(grid.neighbours(0, 0)) == [
            (Direction.EAST, 1, 0),
            (Direction.SOUTH, 0, 1),
        ]

    def test_neighbours_center(self):
        grid = Grid.initialize(3, 3, _tileset(2))
        assert list(grid.neighbours(1, 1)) == [
            (Direction.NORTH, 1, 0),
            (Direction.EAST, 2, 1),
            (Direction.SOUTH, 1, 2),
            (Direction.WEST, 0, 1),
        ]

    def test_neighbours_single_cell(self):
        grid = Grid.initialize(1, 1, _tileset(2))
        assert list(grid.neighbours(0, 0)) == []


class TestCell:
    def test_set_candidates_tracks_collapsed(self):
        cell = Cell(0, 0, (0, 1))
        cell.set_candidates((1,))
        assert cell.collapsed
        assert cell.tile == 1
        cell.set_candidates((0, 1))
        assert not cell.collapsed

    def test_snapshot_is_independent(self):
        cell = Cell(1, 2, (0, 1, 2))
        snap = cell.snapshot()
        cell.set_candidates((2,))
        assert snap.candidates == (0, 1, 2)
        assert not snap.collapsed
        assert (snap.x, snap.y) == (1, 2)

    def test_restore(self):
        grid = Grid.initialize(2, 1, _tileset(3))
        snap = grid.cell(1, 0).snapshot()
        grid.cell(1, 0).set_candidates((2,))
        grid.restore(snap)
        assert grid.cell(1, 0).candidates == (0, 1, 2)
        assert not grid.cell(1, 0).collapsed


class TestArrays:
    def test_to_array(self):
        grid = Grid.initialize(3, 2, _tileset(3))
        grid.cell(2, 0).set_candidates((1,))
        grid.cell(0, 1).set_candidates((2,))
        expected = np.array([[-1, -1, 1], [2, -1, -1]])
        np.testing.assert_array_equal(grid.to_array(), expected)
        assert grid.to_array().shape == (2, 3)

    def test_entropy_array(self):
        grid = Grid.initialize(2, 2, _tileset(3))
        grid.cell(1, 1).set_candidates((0, 2))
        np.testing.assert_array_equal(
            grid.entropy_array(), np.array([[3, 3], [3, 2]])
        )
