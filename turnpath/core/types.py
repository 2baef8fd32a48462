# turnpath/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Optional, Dict, Any

Cell = Tuple[int, int]  # (col, row)
Path = Tuple[Cell, ...]  # start .. goal


class Direction(Enum):
    """The eight compass moves. Rows grow downward, so north is dy = -1."""

    N = (0, -1)
    NE = (1, -1)
    E = (1, 0)
    SE = (1, 1)
    S = (0, 1)
    SW = (-1, 1)
    W = (-1, 0)
    NW = (-1, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_diagonal(self) -> bool:
        return self.dx != 0 and self.dy != 0

    def apply(self, c: Cell) -> Cell:
        x, y = c
        return (x + self.dx, y + self.dy)

    @classmethod
    def between(cls, a: Cell, b: Cell) -> "Direction":
        """Direction of the single step a -> b. Raises ValueError if not adjacent."""
        return cls((b[0] - a[0], b[1] - a[1]))


# (cell, heading it was entered with); the start is entered with no heading
State = Tuple[Cell, Optional[Direction]]


class SearchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"


class StepStatus(str, Enum):
    EXPANDED = "expanded"
    GOAL_REACHED = "goal_reached"
    STALE = "stale"
    EXHAUSTED = "exhausted"


class RunStatus(str, Enum):
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass
class SearchNode:
    g: float
    h: float
    f: float
    parent: Optional[Cell] = None
    direction: Optional[Direction] = None  # move used to enter this cell
    parent_heading: Optional[Direction] = None  # heading the parent was entered with


@dataclass
class StepResult:
    status: StepStatus
    opened: List[Cell] = field(default_factory=list)   # cells whose record changed this step
    closed: List[Cell] = field(default_factory=list)
    current: Optional[Cell] = None
    path: Optional[Path] = None
    metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RunResult:
    status: RunStatus
    steps: int = 0
    path: Optional[Path] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
