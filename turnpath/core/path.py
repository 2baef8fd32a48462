# turnpath/core/path.py
#!/usr/bin/env python3
from typing import Dict, List

from turnpath.core.cost import CostModel
from turnpath.core.types import Cell, Direction, Path, SearchNode, State


def reconstruct(arrivals: Dict[State, SearchNode], start: Cell, head: State) -> Path:
    """Follow parent links from the head state back to start and return start .. head cell."""
    out: List[Cell] = []
    key = head
    while True:
        cell = key[0]
        out.append(cell)
        node = arrivals[key]
        if node.parent is None:
            if cell != start:
                raise KeyError(f"{cell} has no parent and is not the start")
            break
        key = (node.parent, node.parent_heading)
    out.reverse()
    return tuple(out)


def directions(path: Path) -> List[Direction]:
    return [Direction.between(a, b) for a, b in zip(path, path[1:])]


def count_turns(path: Path) -> int:
    moves = directions(path)
    return sum(1 for a, b in zip(moves, moves[1:]) if a != b)


def path_cost(path: Path, cost_model: CostModel) -> float:
    """Price a path move by move, turn penalties included."""
    total = 0.0
    incoming = None
    for d in directions(path):
        total += cost_model.edge_cost(incoming, d)
        incoming = d
    return total
