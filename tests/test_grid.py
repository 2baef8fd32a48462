import pytest

from turnpath.core.errors import ConfigError
from turnpath.core.grid import Grid
from turnpath.core.types import Direction


def _cells(neighbors):
    return {c for c, _ in neighbors}


def test_from_rows_reads_blocked_cells():
    grid = Grid.from_rows(["..#", "..."])
    assert (grid.width, grid.height) == (3, 2)
    assert grid.blocked == frozenset({(2, 0)})
    assert grid.is_blocked((2, 0))
    assert not grid.is_blocked((0, 0))


def test_bounds():
    grid = Grid(4, 3)
    assert grid.in_bounds((0, 0)) and grid.in_bounds((3, 2))
    assert not grid.in_bounds((4, 0))
    assert not grid.is_in_bounds((0, -1))
    assert not grid.is_free((-1, 0))


def test_corner_cell_has_three_neighbours():
    grid = Grid(3, 3)
    assert grid.neighbors((0, 0)) == [((1, 0), Direction.E), ((1, 1), Direction.SE), ((0, 1), Direction.S)]


def test_centre_cell_has_eight_neighbours():
    assert len(Grid(3, 3).neighbors((1, 1))) == 8


def test_blocked_cells_are_not_neighbours():
    grid = Grid.from_rows(["...", ".#.", "..."])
    assert (1, 1) not in _cells(grid.neighbors((0, 0)))


def test_no_squeeze_between_two_blocked_corners():
    grid = Grid.from_rows(["#.", ".#"])
    assert grid.neighbors((0, 1)) == []


def test_allow_rule_permits_squeeze():
    grid = Grid.from_rows(["#.", ".#"], corner_rule="allow")
    assert grid.neighbors((0, 1)) == [((1, 0), Direction.NE)]


def test_strict_rule_needs_both_flanks_open():
    rows = ["..", "#."]
    assert (1, 1) in _cells(Grid.from_rows(rows).neighbors((0, 0)))
    assert (1, 1) not in _cells(Grid.from_rows(rows, corner_rule="strict").neighbors((0, 0)))


def test_free_cells_and_with_blocked():
    grid = Grid.from_rows([".#", ".."])
    assert grid.free_cells() == [(0, 0), (0, 1), (1, 1)]
    moved = grid.with_blocked({(0, 0)})
    assert moved.is_blocked((0, 0)) and not moved.is_blocked((1, 0))
    assert grid.is_blocked((1, 0))


def test_invalid_grids_are_rejected():
    with pytest.raises(ConfigError):
        Grid(0, 3)
    with pytest.raises(ConfigError):
        Grid(3, 3, corner_rule="sometimes")
    with pytest.raises(ConfigError):
        Grid.from_rows(["...", ".."])
