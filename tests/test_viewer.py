import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

pygame = pytest.importorskip("pygame")

from turnpath.app.viewer import Viewer
from turnpath.config import Config, LoggingConfig, MapConfig, SearchConfig, ViewerConfig
from turnpath.core.types import SearchState


@pytest.fixture
def viewer(maps_dir):
    cfg = Config(
        search=SearchConfig(),
        map=MapConfig(map_file=str(maps_dir / "02_wall_detour.json")),
        viewer=ViewerConfig(cell_size=12),
        logging=LoggingConfig(),
    )
    v = Viewer(cfg)
    yield v
    pygame.quit()


def test_step_and_complete(viewer):
    viewer._do_step()
    assert viewer.engine.current_state() is SearchState.RUNNING
    viewer._complete()
    assert viewer.engine.current_state() is SearchState.FOUND
    assert viewer.status == "Done"
    viewer._draw()


def test_running_search_draws_partial_route(viewer):
    for _ in range(5):
        viewer._do_step()
    trail = viewer.engine.trajectory()
    assert trail[0] == viewer.engine.start
    assert viewer.engine.current_state() is SearchState.RUNNING
    viewer._draw()
    assert any(line.startswith("Algo: A*") for line in viewer._metric_lines())


def test_mouse_edits_reconfigure(viewer):
    viewer._complete()
    viewer._edit_cell((0, 7), 2)
    assert viewer.grid.is_blocked((0, 7))
    assert viewer.engine.current_state() is SearchState.IDLE

    viewer._edit_cell((3, 3), 1)
    assert viewer.engine.goal == (3, 3)


def test_blocked_goal_is_rejected(viewer):
    goal = viewer.engine.goal
    viewer._edit_cell((5, 0), 1)
    assert viewer.engine.goal == goal


def test_switch_algo_and_restart(viewer):
    viewer._switch_algo("manhattan")
    assert "Algo: Greedy (inadmissible h)" in viewer._metric_lines()
    viewer._switch_algo("zero")
    assert viewer.engine.name == "Dijkstra"
    viewer._do_step()
    viewer._reset()
    assert viewer.engine.current_state() is SearchState.IDLE
    assert viewer.status == "Idle"


def test_cell_at_maps_pixels_to_cells(viewer):
    ox, oy = viewer._grid_origin
    cs = viewer.cell_size
    assert viewer.cell_at((ox + 2 * cs + 1, oy + cs + 1)) == (2, 1)
    assert viewer.cell_at((ox - 5, oy)) is None


def test_setup_logging_applies_module_levels():
    import logging
    from turnpath.app.viewer import setup_logging

    cfg = Config(
        search=SearchConfig(),
        map=MapConfig(),
        viewer=ViewerConfig(),
        logging=LoggingConfig(module_levels={"turnpath.core.engine": "WARNING", "turnpath.core.maps": "LOUD"}),
    )
    setup_logging(cfg)
    assert logging.getLogger("turnpath.core.engine").level == logging.WARNING
    assert logging.getLogger("turnpath.core.maps").level == logging.NOTSET
