# turnpath/core/maps.py
#!/usr/bin/env python3
"""
Map sources for the search core.

- generate():        cellular-automaton cave map on a random seed
- place_endpoints(): random distinct free start and goal
- load_map():        JSON map file {width, height, cells[row][col], start, goal}
                     where a cell value of 1 is blocked
"""

from pathlib import Path
from typing import List, Optional, Tuple
import json
import logging
import random

from turnpath.core.errors import ConfigError
from turnpath.core.grid import Grid
from turnpath.core.types import Cell

logger = logging.getLogger(__name__)

Walls = List[List[bool]]  # [row][col], True = wall

FLOOR_CHANCE = 0.52
SMOOTH_PASSES = 5


def _count_walls(walls: Walls, x: int, y: int, radius: int) -> int:
    h, w = len(walls), len(walls[0])
    n = 0
    for yy in range(max(0, y - radius), min(h, y + radius + 1)):
        for xx in range(max(0, x - radius), min(w, x + radius + 1)):
            if walls[yy][xx]:
                n += 1
    return n


def _smooth(walls: Walls, final: bool) -> Walls:
    h, w = len(walls), len(walls[0])
    out = [row[:] for row in walls]
    for y in range(1, h - 1):
        for x in range(1, w - 1):
            near = _count_walls(walls, x, y, 1)
            if final:
                out[y][x] = near >= 4
            else:
                # open areas with no wall within two cells sprout a pillar
                out[y][x] = near >= 5 or _count_walls(walls, x, y, 2) == 0
    return out


def _keep_largest_cave(walls: Walls) -> int:
    """Fill every floor region but the largest with wall; return its size.

    Regions are 4-connected so the kept cave is walkable under any corner rule.
    """
    h, w = len(walls), len(walls[0])
    seen = [[False] * w for _ in range(h)]
    regions: List[List[Cell]] = []
    for y in range(h):
        for x in range(w):
            if walls[y][x] or seen[y][x]:
                continue
            region: List[Cell] = []
            stack = [(x, y)]
            seen[y][x] = True
            while stack:
                cx, cy = stack.pop()
                region.append((cx, cy))
                for nx, ny in ((cx + 1, cy), (cx - 1, cy), (cx, cy + 1), (cx, cy - 1)):
                    if 0 <= nx < w and 0 <= ny < h and not walls[ny][nx] and not seen[ny][nx]:
                        seen[ny][nx] = True
                        stack.append((nx, ny))
            regions.append(region)
    if not regions:
        return 0
    regions.sort(key=len)
    for region in regions[:-1]:
        for x, y in region:
            walls[y][x] = True
    return len(regions[-1])


def generate(
    width: int,
    height: int,
    rng: Optional[random.Random] = None,
    min_fill: float = 0.40,
    max_attempts: int = 100,
    corner_rule: str = "no_squeeze",
) -> Grid:
    """Carve a cave map whose single open region covers at least min_fill of the grid."""
    if width < 5 or height < 5:
        raise ConfigError(f"cave maps need at least 5x5 cells, got {width}x{height}")
    if not 0.0 < min_fill < 1.0:
        raise ConfigError(f"min_fill must be in (0, 1), got {min_fill}")
    rng = rng or random.Random()

    for attempt in range(1, max_attempts + 1):
        walls: Walls = [[True] * width for _ in range(height)]
        for y in range(1, height - 1):
            for x in range(1, width - 1):
                walls[y][x] = rng.random() >= FLOOR_CHANCE

        for _ in range(SMOOTH_PASSES):
            walls = _smooth(walls, final=False)
        walls = _smooth(walls, final=True)

        floor = _keep_largest_cave(walls)
        fill = floor / float(width * height)
        if fill >= min_fill:
            logger.debug("Generated %dx%d cave map, fill %.2f after %d attempt(s)", width, height, fill, attempt)
            blocked = frozenset((x, y) for y in range(height) for x in range(width) if walls[y][x])
            return Grid(width, height, blocked, corner_rule)

    raise ConfigError(f"no {width}x{height} cave reached fill {min_fill} in {max_attempts} attempts")


def place_endpoints(grid: Grid, rng: Optional[random.Random] = None) -> Tuple[Cell, Cell]:
    """Pick distinct free (start, goal) cells."""
    free = grid.free_cells()
    if len(free) < 2:
        raise ConfigError("map has fewer than two free cells")
    rng = rng or random.Random()
    start, goal = rng.sample(free, 2)
    return start, goal


def _read_cell(data: dict, label: str, path: Path) -> Cell:
    raw = data[label]
    if (
        not isinstance(raw, list)
        or len(raw) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in raw)
    ):
        raise ConfigError(f"{label} in {path} must be [x, y] integers, got {raw!r}")
    return (raw[0], raw[1])


def load_map(path: Path) -> Tuple[Grid, Cell, Cell]:
    try:
        with open(path, "r") as f:
            data = json.load(f)
        width = int(data["width"])
        height = int(data["height"])
        start = _read_cell(data, "start", path)
        goal = _read_cell(data, "goal", path)
        cells = data["cells"]
    except (OSError, ValueError, KeyError, TypeError) as ex:
        raise ConfigError(f"cannot read map {path}: {ex}") from ex

    if not isinstance(cells, list) or len(cells) != height \
            or any(not isinstance(r, list) or len(r) != width for r in cells):
        raise ConfigError(f"cells size mismatch in {path}")
    if any(v not in (0, 1) or isinstance(v, bool) for row in cells for v in row):
        raise ConfigError(f"cells in {path} must be 0 (free) or 1 (blocked)")
    blocked = frozenset((x, y) for y, row in enumerate(cells) for x, v in enumerate(row) if v == 1)
    grid = Grid(width, height, blocked, data.get("corner_rule", "no_squeeze"))
    return grid, start, goal
