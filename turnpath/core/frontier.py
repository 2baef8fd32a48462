# turnpath/core/frontier.py
#!/usr/bin/env python3
"""
Binary-heap frontier for stepped best-first search.

Ordering of entries (lowest first):
- priority (f),
- then h, so among equal f the cell nearer the goal wins,
- then the tie-break policy:
    "lifo" the most recently pushed entry wins (finishes straight runs first)
    "fifo" insertion order

Entries for the same cell may coexist, one per heading and improvement; the
engine drops superseded ones on pop.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Set
import heapq

from turnpath.core.errors import ConfigError
from turnpath.core.types import Cell, Direction

TIE_BREAKS = ("lifo", "fifo")


class FrontierEntry(NamedTuple):
    priority: float
    h: float
    tie: int
    cell: Cell
    g: float
    heading: Optional[Direction] = None


@dataclass
class Frontier:
    tie_break: str = "lifo"
    _heap: List[FrontierEntry] = field(default_factory=list)
    _seq: int = 0  # monotonic counter for PQ stability

    def __post_init__(self):
        if self.tie_break not in TIE_BREAKS:
            raise ConfigError(f"unknown tie-break policy {self.tie_break!r}")

    def _bump(self) -> int:
        self._seq += 1
        return -self._seq if self.tie_break == "lifo" else self._seq

    def push(self, cell: Cell, priority: float, g: float, h: float = 0.0,
             heading: Optional[Direction] = None) -> None:
        heapq.heappush(self._heap, FrontierEntry(priority, h, self._bump(), cell, g, heading))

    def pop_min(self) -> FrontierEntry:
        if not self._heap:
            raise IndexError("pop from an empty frontier")
        return heapq.heappop(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)

    def coordinates(self) -> Set[Cell]:
        """Distinct cells with at least one queued entry, stale ones included."""
        return {e.cell for e in self._heap}

    def clear(self) -> None:
        self._heap.clear()
        self._seq = 0
