# turnpath/core/grid.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Tuple

from turnpath.core.errors import ConfigError
from turnpath.core.types import Cell, Direction

CORNER_RULES = ("no_squeeze", "strict", "allow")


@dataclass(frozen=True)
class Grid:
    width: int
    height: int
    blocked: FrozenSet[Cell] = field(default_factory=frozenset)
    corner_rule: str = "no_squeeze"

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"grid size must be positive, got {self.width}x{self.height}")
        if self.corner_rule not in CORNER_RULES:
            raise ConfigError(f"unknown corner rule {self.corner_rule!r}")
        object.__setattr__(self, "blocked", frozenset((int(x), int(y)) for x, y in self.blocked))

    @classmethod
    def from_rows(cls, rows: Iterable[str], corner_rule: str = "no_squeeze") -> "Grid":
        """Build a grid from ASCII rows; '#' is blocked, anything else is open."""
        rows = list(rows)
        if not rows:
            raise ConfigError("no rows given")
        width = len(rows[0])
        if any(len(r) != width for r in rows):
            raise ConfigError("rows differ in length")
        blocked = {(x, y) for y, r in enumerate(rows) for x, ch in enumerate(r) if ch == "#"}
        return cls(width, len(rows), frozenset(blocked), corner_rule)

    def in_bounds(self, c: Cell) -> bool:
        x, y = c
        return 0 <= x < self.width and 0 <= y < self.height

    is_in_bounds = in_bounds

    def is_blocked(self, c: Cell) -> bool:
        return c in self.blocked

    def is_free(self, c: Cell) -> bool:
        return self.in_bounds(c) and c not in self.blocked

    def free_cells(self) -> List[Cell]:
        return [(x, y) for y in range(self.height) for x in range(self.width)
                if (x, y) not in self.blocked]

    def with_blocked(self, blocked: Iterable[Cell]) -> "Grid":
        return Grid(self.width, self.height, frozenset(blocked), self.corner_rule)

    def _diagonal_ok(self, c: Cell, d: Direction) -> bool:
        if self.corner_rule == "allow":
            return True
        x, y = c
        side_a = self.is_free((x + d.dx, y))
        side_b = self.is_free((x, y + d.dy))
        if self.corner_rule == "strict":
            return side_a and side_b
        return side_a or side_b

    def neighbors(self, c: Cell) -> List[Tuple[Cell, Direction]]:
        """In-bounds, unblocked 8-connected neighbours of c with the move used."""
        out: List[Tuple[Cell, Direction]] = []
        for d in Direction:
            n = d.apply(c)
            if not self.is_free(n):
                continue
            if d.is_diagonal and not self._diagonal_ok(c, d):
                continue
            out.append((n, d))
        return out
