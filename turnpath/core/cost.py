# turnpath/core/cost.py
#!/usr/bin/env python3
"""
Cost and heuristic model for turn-optimal grid search.

Movement:
- Orthogonal and diagonal steps both cost 1.0 by default, so the step count of
  a route is its base cost.
- A turn penalty is added whenever the move out of a cell differs from the move
  that entered it. The first move out of the start is never penalized.

Heuristics:
- "octile"    orth * |dx - dy| + min(diag, 2 * orth) * min(dx, dy);
              with unit costs this is max(|dx|, |dy|).
- "manhattan" orth * (dx + dy); overestimates once diagonals are allowed,
              so the search becomes greedy rather than cost-optimal.
- "zero"      plain Dijkstra.

Optimality:
The penalty is never negative, so the base-cost octile estimate stays a lower
bound on the penalized cost and stays consistent along every edge. The engine
keys its records by (cell, heading), so with an admissible heuristic the first
goal pop is minimal in penalized cost: fewest steps first whenever
turn_penalty * (turns on any route) stays below the smallest base step, and
fewest turns among those.
"""

from dataclasses import dataclass
from typing import Optional

from turnpath.core.errors import ConfigError
from turnpath.core.types import Cell, Direction

HEURISTICS = ("octile", "manhattan", "zero")


@dataclass(frozen=True)
class CostModel:
    orthogonal_cost: float = 1.0
    diagonal_cost: float = 1.0
    turn_penalty: float = 0.001
    heuristic: str = "octile"

    def __post_init__(self):
        if self.orthogonal_cost <= 0 or self.diagonal_cost <= 0:
            raise ConfigError("step costs must be positive")
        if self.turn_penalty < 0:
            raise ConfigError("turn penalty must not be negative")
        if self.heuristic not in HEURISTICS:
            raise ConfigError(f"unknown heuristic {self.heuristic!r}")

    @property
    def admissible(self) -> bool:
        """True if h never overestimates the base movement cost."""
        return self.heuristic != "manhattan"

    def step_cost(self, d: Direction) -> float:
        return self.diagonal_cost if d.is_diagonal else self.orthogonal_cost

    def edge_cost(self, incoming: Optional[Direction], outgoing: Direction) -> float:
        cost = self.step_cost(outgoing)
        if incoming is not None and incoming != outgoing:
            cost += self.turn_penalty
        return cost

    def h(self, c: Cell, goal: Cell) -> float:
        if self.heuristic == "zero":
            return 0.0
        dx = abs(goal[0] - c[0])
        dy = abs(goal[1] - c[1])
        if self.heuristic == "manhattan":
            return self.orthogonal_cost * (dx + dy)
        diag = min(self.diagonal_cost, 2 * self.orthogonal_cost)
        return self.orthogonal_cost * abs(dx - dy) + diag * min(dx, dy)
