import math

import pytest

from turnpath.core.cost import CostModel
from turnpath.core.errors import ConfigError
from turnpath.core.types import Direction


def test_octile_with_unit_costs_is_chebyshev():
    model = CostModel()
    assert model.h((0, 0), (4, 4)) == 4
    assert model.h((0, 0), (4, 2)) == 4
    assert model.h((5, 1), (2, 3)) == 3
    assert model.h((2, 2), (2, 2)) == 0


def test_octile_with_euclidean_diagonals():
    model = CostModel(diagonal_cost=math.sqrt(2))
    assert model.h((0, 0), (3, 1)) == pytest.approx(2 + math.sqrt(2))


def test_other_heuristics():
    assert CostModel(heuristic="manhattan").h((0, 0), (4, 2)) == 6
    assert CostModel(heuristic="zero").h((0, 0), (4, 2)) == 0
    assert CostModel().admissible
    assert CostModel(heuristic="zero").admissible
    assert not CostModel(heuristic="manhattan").admissible


def test_diagonal_and_orthogonal_steps_cost_the_same():
    model = CostModel(turn_penalty=0.0)
    assert model.edge_cost(None, Direction.E) == model.edge_cost(None, Direction.SE) == 1.0


def test_turn_penalty_only_on_heading_change():
    model = CostModel(turn_penalty=0.25)
    assert model.edge_cost(None, Direction.NE) == 1.0
    assert model.edge_cost(Direction.E, Direction.E) == 1.0
    assert model.edge_cost(Direction.E, Direction.NE) == 1.25
    assert model.edge_cost(Direction.N, Direction.S) == 1.25


def test_invalid_constants_are_rejected():
    with pytest.raises(ConfigError):
        CostModel(turn_penalty=-0.1)
    with pytest.raises(ConfigError):
        CostModel(diagonal_cost=0)
    with pytest.raises(ConfigError):
        CostModel(heuristic="euclid")
