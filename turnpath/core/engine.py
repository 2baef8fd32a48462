# turnpath/core/engine.py
#!/usr/bin/env python3
"""
Turn-optimal best-first search, one expansion per step() for animation.

API consumed by the viewer:
- configure(...) -> SearchEngine
- step() -> StepResult          one frontier pop per call
- run_to_completion() -> RunResult
- restart()                     back to IDLE on the same grid
- frontier_snapshot(), visited_snapshot(), trajectory(), path(), metrics()

States:
    IDLE -> RUNNING -> FOUND | EXHAUSTED
A stale pop (an arrival already finalized, or an entry superseded by a cheaper
one) still costs one step() and is reported as STALE.

Records:
- arrivals[(cell, heading)]  best arrival per incoming heading; these are
                             what the frontier orders and what gets finalized
- nodes[cell]                cheapest arrival over all headings, for overlays
A cheap arrival on a bad heading therefore never hides a dearer arrival that
turns less later, and the first goal pop is minimal in penalized cost.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set
import logging

from turnpath.core.cost import CostModel
from turnpath.core.errors import ConfigError, InvalidState
from turnpath.core.frontier import Frontier
from turnpath.core.grid import Grid
from turnpath.core.path import count_turns, path_cost, reconstruct
from turnpath.core.types import (
    Cell,
    Path,
    RunResult,
    RunStatus,
    SearchNode,
    SearchState,
    State,
    StepResult,
    StepStatus,
)

logger = logging.getLogger(__name__)

TERMINAL = (SearchState.FOUND, SearchState.EXHAUSTED)

ALGO_NAMES = {"octile": "A*", "zero": "Dijkstra", "manhattan": "Greedy"}


@dataclass
class SearchEngine:
    grid: Grid
    start: Cell
    goal: Cell
    cost_model: CostModel = field(default_factory=CostModel)
    tie_break: str = "lifo"

    # Internal state
    frontier: Frontier = field(init=False)
    arrivals: Dict[State, SearchNode] = field(init=False, default_factory=dict)
    nodes: Dict[Cell, SearchNode] = field(init=False, default_factory=dict)
    finalized: Set[State] = field(init=False, default_factory=set)
    open_set: Set[Cell] = field(init=False, default_factory=set)      # for overlay
    closed_set: Set[Cell] = field(init=False, default_factory=set)
    state: SearchState = field(init=False, default=SearchState.IDLE)
    popped_count: int = field(init=False, default=0)
    stale_count: int = field(init=False, default=0)
    steps: int = field(init=False, default=0)
    _head: Optional[State] = field(init=False, default=None, repr=False)
    _path: Optional[Path] = field(init=False, default=None, repr=False)

    def __post_init__(self):
        for label, c in (("start", self.start), ("goal", self.goal)):
            if not _is_cell(c):
                raise ConfigError(f"{label} {c!r} is not an (x, y) pair of integers")
        self.start = tuple(self.start)
        self.goal = tuple(self.goal)
        for label, c in (("start", self.start), ("goal", self.goal)):
            if not self.grid.in_bounds(c):
                raise ConfigError(f"{label} {c} is outside the {self.grid.width}x{self.grid.height} grid")
            if self.grid.is_blocked(c):
                raise ConfigError(f"{label} {c} is blocked")
        self.frontier = Frontier(self.tie_break)
        self.restart()
        if self.start == self.goal:
            self._finish((self.start, None))
        logger.debug(
            "Configured %s search %s -> %s on %dx%d grid (%d blocked)",
            self.name, self.start, self.goal, self.grid.width, self.grid.height, len(self.grid.blocked),
        )

    @classmethod
    def from_config(cls, grid: Grid, start: Cell, goal: Cell, search: Any) -> "SearchEngine":
        """Build an engine from a config section carrying cost, heuristic and tie-break values."""
        cost_model = CostModel(
            orthogonal_cost=search.orthogonal_cost,
            diagonal_cost=search.diagonal_cost,
            turn_penalty=search.turn_penalty,
            heuristic=search.heuristic,
        )
        return cls(grid, start, goal, cost_model, search.tie_break)

    @property
    def name(self) -> str:
        return ALGO_NAMES[self.cost_model.heuristic]

    # -------------------- lifecycle --------------------

    def restart(self) -> None:
        """Drop every search record and return to IDLE; the grid is kept."""
        self.frontier.clear()
        self.arrivals.clear()
        self.nodes.clear()
        self.finalized.clear()
        self.open_set.clear()
        self.closed_set.clear()
        self.popped_count = 0
        self.stale_count = 0
        self.steps = 0
        self._head = None
        self._path = None
        self.state = SearchState.IDLE
        logger.debug("Search %s -> %s reset to idle", self.start, self.goal)

    def _seed(self) -> None:
        h0 = self.cost_model.h(self.start, self.goal)
        node = SearchNode(g=0.0, h=h0, f=h0)
        self.arrivals[(self.start, None)] = self.nodes[self.start] = node
        self.frontier.push(self.start, h0, 0.0, h0)
        self.open_set.add(self.start)
        self.state = SearchState.RUNNING

    def _finish(self, key: State) -> None:
        if key not in self.arrivals:
            h0 = self.cost_model.h(key[0], self.goal)
            self.arrivals[key] = self.nodes[key[0]] = SearchNode(g=0.0, h=h0, f=h0)
        goal = key[0]
        self.open_set.discard(goal)
        self.closed_set.add(goal)
        self._head = key
        self._path = reconstruct(self.arrivals, self.start, key)
        self.state = SearchState.FOUND
        logger.debug("Goal %s reached after %d steps, cost %.3f", goal, self.steps, self.arrivals[key].g)

    # -------------------- main stepping logic --------------------

    def step(self) -> StepResult:
        """
        Run ONE expansion step:
          - Pop the lowest-priority arrival, skipping it (STALE) if superseded.
          - If goal, reconstruct and finish.
          - Else relax neighbours with edge cost = step cost + turn penalty.
        """
        if self.state in TERMINAL:
            raise InvalidState(f"cannot step a search that is already {self.state.value}")
        if self.state is SearchState.IDLE:
            self._seed()
        self.steps += 1

        if self.frontier.is_empty():
            self.state = SearchState.EXHAUSTED
            logger.debug("Frontier exhausted after %d steps; no path to %s", self.steps, self.goal)
            return StepResult(status=StepStatus.EXHAUSTED, metrics=self.metrics())

        entry = self.frontier.pop_min()
        u = entry.cell
        key_u = (u, entry.heading)
        node_u = self.arrivals[key_u]

        # Ignore stale pops
        if key_u in self.finalized or entry.g > node_u.g:
            self.stale_count += 1
            return StepResult(status=StepStatus.STALE, current=u, metrics=self.metrics())

        self.popped_count += 1
        self.finalized.add(key_u)
        if u == self.goal:
            self._finish(key_u)
            return StepResult(
                status=StepStatus.GOAL_REACHED,
                closed=[u],
                current=u,
                path=self._path,
                metrics=self.metrics(),
            )

        self._head = key_u
        self.open_set.discard(u)
        self.closed_set.add(u)

        opened_now: List[Cell] = []
        for v, d in self.grid.neighbors(u):
            key_v = (v, d)
            if key_v in self.finalized:
                continue
            alt = node_u.g + self.cost_model.edge_cost(node_u.direction, d)
            node_v = self.arrivals.get(key_v)
            if node_v is not None and alt >= node_v.g:
                continue
            h_v = node_v.h if node_v is not None else self.cost_model.h(v, self.goal)
            node_v = self.arrivals[key_v] = SearchNode(
                g=alt, h=h_v, f=alt + h_v, parent=u, direction=d, parent_heading=node_u.direction,
            )
            best = self.nodes.get(v)
            if best is None or alt < best.g:
                self.nodes[v] = node_v
            self.frontier.push(v, node_v.f, node_v.g, node_v.h, heading=d)
            if v not in self.closed_set:
                self.open_set.add(v)
            opened_now.append(v)

        return StepResult(
            status=StepStatus.EXPANDED,
            opened=opened_now,
            closed=[u],
            current=u,
            path=self.trajectory(),
            metrics=self.metrics(),
        )

    def run_to_completion(
        self,
        max_steps: Optional[int] = None,
        cancel: Optional[Callable[[], bool]] = None,
    ) -> RunResult:
        """Step until FOUND or EXHAUSTED; max_steps and cancel() are checked between steps."""
        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must not be negative")
        taken = 0
        while self.state not in TERMINAL:
            if (max_steps is not None and taken >= max_steps) or (cancel is not None and cancel()):
                logger.debug("Run cancelled after %d steps", taken)
                return RunResult(status=RunStatus.CANCELLED, steps=taken, metrics=self.metrics())
            self.step()
            taken += 1
        if self.state is SearchState.FOUND:
            return RunResult(status=RunStatus.FOUND, steps=taken, path=self._path, metrics=self.metrics())
        return RunResult(status=RunStatus.EXHAUSTED, steps=taken, metrics=self.metrics())

    # -------------------- read-only views --------------------

    def current_state(self) -> SearchState:
        return self.state

    def frontier_snapshot(self) -> FrozenSet[Cell]:
        return frozenset(self.open_set)

    def visited_snapshot(self) -> FrozenSet[Cell]:
        return frozenset(self.closed_set)

    def node(self, c: Cell) -> Optional[SearchNode]:
        """Copy of the cheapest arrival recorded for c, over all headings."""
        n = self.nodes.get(c)
        return None if n is None else SearchNode(n.g, n.h, n.f, n.parent, n.direction, n.parent_heading)

    def trajectory(self) -> Optional[Path]:
        """Route from start to the most recently expanded cell, or the final path once FOUND."""
        if self._path is not None:
            return self._path
        if self._head is None:
            return None
        return reconstruct(self.arrivals, self.start, self._head)

    def path(self) -> Path:
        if self.state is not SearchState.FOUND:
            raise InvalidState(f"no path while the search is {self.state.value}")
        return self._path

    # -------------------- metrics --------------------

    def metrics(self) -> Dict[str, Any]:
        path = self._path
        return {
            "algo": self.name,
            "admissible": self.cost_model.admissible,
            "state": self.state.value,
            "steps": self.steps,
            "popped": self.popped_count,
            "stale": self.stale_count,
            "open_size": len(self.open_set),
            "closed_count": len(self.closed_set),
            "path_len": len(path) - 1 if path else 0,
            "total_cost": path_cost(path, self.cost_model) if path else None,
            "turns": count_turns(path) if path else 0,
        }


def _is_cell(c: Any) -> bool:
    return (
        isinstance(c, (tuple, list))
        and len(c) == 2
        and all(isinstance(v, int) and not isinstance(v, bool) for v in c)
    )


def configure(
    width: int,
    height: int,
    blocked: Iterable[Cell],
    start: Cell,
    goal: Cell,
    *,
    cost_model: Optional[CostModel] = None,
    corner_rule: str = "no_squeeze",
    tie_break: str = "lifo",
) -> SearchEngine:
    """Validate a map and endpoints and return a fresh engine. Raises ConfigError."""
    grid = Grid(width, height, frozenset(blocked), corner_rule)
    return SearchEngine(grid, start, goal, cost_model or CostModel(), tie_break)
