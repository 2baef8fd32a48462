import json
import random

import pytest

from turnpath.core.errors import ConfigError
from turnpath.core.grid import Grid
from turnpath.core.maps import generate, load_map, place_endpoints


def _reachable(grid, origin):
    seen = {origin}
    stack = [origin]
    while stack:
        x, y = stack.pop()
        for n in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if grid.is_free(n) and n not in seen:
                seen.add(n)
                stack.append(n)
    return seen


def test_generated_cave_has_solid_border():
    grid = generate(40, 30, random.Random(7), min_fill=0.2)
    for x in range(40):
        assert grid.is_blocked((x, 0)) and grid.is_blocked((x, 29))
    for y in range(30):
        assert grid.is_blocked((0, y)) and grid.is_blocked((39, y))


def test_generated_cave_is_one_open_region():
    grid = generate(40, 30, random.Random(11), min_fill=0.2)
    free = grid.free_cells()
    assert len(free) / (40 * 30) >= 0.2
    assert _reachable(grid, free[0]) == set(free)


def test_same_seed_same_map():
    assert generate(30, 20, random.Random(3), min_fill=0.2) == generate(30, 20, random.Random(3), min_fill=0.2)


def test_generate_passes_corner_rule():
    assert generate(20, 20, random.Random(5), min_fill=0.2, corner_rule="strict").corner_rule == "strict"


def test_generate_rejects_bad_arguments():
    with pytest.raises(ConfigError):
        generate(4, 10)
    with pytest.raises(ConfigError):
        generate(20, 20, min_fill=1.5)


def test_place_endpoints_picks_two_free_cells():
    grid = Grid.from_rows(["#..#", "....", "#..#"])
    start, goal = place_endpoints(grid, random.Random(1))
    assert start != goal
    assert grid.is_free(start) and grid.is_free(goal)


def test_place_endpoints_needs_two_free_cells():
    with pytest.raises(ConfigError):
        place_endpoints(Grid.from_rows(["#.", "##"]))


def test_load_bundled_map(maps_dir):
    grid, start, goal = load_map(maps_dir / "02_wall_detour.json")
    assert (grid.width, grid.height) == (12, 8)
    assert (start, goal) == ((1, 1), (10, 1))
    assert grid.is_blocked((5, 0)) and not grid.is_blocked((5, 7))


def test_load_map_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_map(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(ConfigError):
        load_map(broken)

    mismatch = tmp_path / "mismatch.json"
    mismatch.write_text(json.dumps({
        "width": 3, "height": 2, "start": [0, 0], "goal": [2, 1],
        "cells": [[0, 0, 0]],
    }))
    with pytest.raises(ConfigError):
        load_map(mismatch)


def _write_map(tmp_path, **overrides):
    data = {
        "width": 3, "height": 2, "start": [0, 0], "goal": [2, 1],
        "cells": [[0, 0, 0], [0, 1, 0]],
    }
    data.update(overrides)
    target = tmp_path / "map.json"
    target.write_text(json.dumps(data))
    return target


def test_load_map_accepts_well_formed_file(tmp_path):
    grid, start, goal = load_map(_write_map(tmp_path))
    assert (start, goal) == ((0, 0), (2, 1))
    assert grid.blocked == frozenset({(1, 1)})


@pytest.mark.parametrize("endpoint", [[1], [1, 2, 3], [0.5, 1], ["0", 1], [True, 0], 7, None])
def test_load_map_rejects_malformed_endpoints(tmp_path, endpoint):
    with pytest.raises(ConfigError):
        load_map(_write_map(tmp_path, start=endpoint))
    with pytest.raises(ConfigError):
        load_map(_write_map(tmp_path, goal=endpoint))


@pytest.mark.parametrize("cells", [[[0, 0, 2], [0, 1, 0]], [[0, 0, "x"], [0, 1, 0]], [[0, 0, 0], 5]])
def test_load_map_rejects_bad_cell_values(tmp_path, cells):
    with pytest.raises(ConfigError):
        load_map(_write_map(tmp_path, cells=cells))
