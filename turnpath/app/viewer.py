# turnpath/app/viewer.py
#!/usr/bin/env python3
"""
Turnpath Viewer: stepped search over a cave map

- Keyboard:
    [N]            -> single step
    [SPACE]        -> run/pause
    [ENTER]        -> run to completion (bounded by search.max_steps)
    [R]            -> restart search on the same map
    [DELETE]       -> generate a new map
    [1]/[2]/[3]    -> load a bundled map
    [D]/[A]/[G]    -> Dijkstra / A* / Greedy
    [+]/[-]        -> steps/sec
    [Q]/[ESC]      -> quit
- Mouse on the grid:
    left = move goal, right = move start, middle = toggle blocker

Config: config.yaml at the repo root, or the file named by TURNPATH_CONFIG.
"""

import sys, time
import dataclasses
import logging
import random
from pathlib import Path
from typing import List, Tuple, Optional, Dict

import pygame

from turnpath.config import CONFIG, Config
from turnpath.core.engine import SearchEngine, TERMINAL
from turnpath.core.errors import PathfindingError
from turnpath.core.grid import Grid
from turnpath.core.maps import generate, load_map, place_endpoints
from turnpath.core.types import Cell, RunStatus, SearchState, StepStatus

logger = logging.getLogger(__name__)

# ---------- Config ----------
MAP_DIR = Path(__file__).resolve().parents[2] / "maps"
MAP_FILES = {
    "01_open_field":    MAP_DIR / "01_open_field.json",
    "02_wall_detour":   MAP_DIR / "02_wall_detour.json",
    "03_enclosed_goal": MAP_DIR / "03_enclosed_goal.json",
}
HEURISTIC_KEYS = {pygame.K_d: "zero", pygame.K_a: "octile", pygame.K_g: "manhattan"}
GRID_MARGIN = 16
FONT_NAME = None  # default pygame font

# Colors
WHITE       = (255,255,255)
BLACK       = (  0,  0,  0)
BLUE        = ( 70,130,180)
RED         = (220, 50, 47)
WALL_BROWN  = (130,118,101)
FLOOR_SAND  = (246,230,206)
NEON_CYAN_A = (0,150,255,110)
NEON_MAG_A  = (255,0,120,90)
NEON_MINT   = (0,255,200)

CARD_BG     = (24,28,36,220)
CARD_HI     = (255,255,255,18)
TEXT_LIGHT  = (230,235,240)
ACCENT_GOLD = (255,210,0)

STATE_LABELS = {
    SearchState.IDLE: "Idle",
    SearchState.RUNNING: "Paused",
    SearchState.FOUND: "Done",
    SearchState.EXHAUSTED: "No path",
}


def setup_logging(cfg: Config) -> None:
    numeric_level = getattr(logging, cfg.logging.global_level, logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    for module_name, level_str in cfg.logging.module_levels.items():
        module_level = getattr(logging, level_str, None)
        if isinstance(module_level, int):
            logging.getLogger(module_name).setLevel(module_level)
        else:
            logger.warning("Ignoring unknown log level %r for %s", level_str, module_name)


# ---------- Simple UI Button ----------
class UIButton:
    def __init__(self, label: str, rect: pygame.Rect, callback, *, togglable: bool = False):
        self.label = label
        self.rect = rect
        self.callback = callback
        self.hover = False
        self.togglable = togglable
        self.active = False  # highlight state

    def set_active(self, value: bool):
        self.active = bool(value)

    def draw(self, screen: pygame.Surface, font: pygame.font.Font):
        base = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        if self.active and self.togglable:
            bg = (58, 86, 160, 235)
        elif self.hover:
            bg = (46, 50, 60, 230)
        else:
            bg = (36, 40, 48, 220)
        pygame.draw.rect(base, bg, base.get_rect(), border_radius=10)
        screen.blit(base, self.rect.topleft)

        if self.active and self.togglable:
            pygame.draw.rect(screen, (120, 170, 255, 255), self.rect, width=2, border_radius=10)

        text = font.render(self.label, True, (235,238,242))
        screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event) -> bool:
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.rect.collidepoint(event.pos):
                self.callback()
                return True
        return False


# ---------- Viewer ----------
class Viewer:
    def __init__(self, cfg: Config = CONFIG):
        pygame.init()

        self.cfg = cfg
        self.rng = random.Random(cfg.map.seed)
        self.search_cfg = cfg.search
        self.panel_w = cfg.viewer.panel_width
        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)
        self.font_small = pygame.font.Font(FONT_NAME, 14)

        if cfg.map.map_file:
            grid, start, goal = load_map(Path(cfg.map.map_file))
            self.selected_map_key = Path(cfg.map.map_file).stem
        else:
            grid, start, goal = self._new_cave()
            self.selected_map_key = "cave"
        self.engine = SearchEngine.from_config(grid, start, goal, self.search_cfg)

        cs = cfg.viewer.cell_size
        win_w = GRID_MARGIN*2 + grid.width * cs + self.panel_w
        win_h = max(GRID_MARGIN*2 + grid.height * cs, 560)
        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption("Turnpath: stepped search")

        self.running = False
        self._buttons: list[UIButton] = []
        self._layout(win_w, win_h)

        self.clock = pygame.time.Clock()
        self.steps_per_sec = cfg.viewer.steps_per_sec
        self._last_step_t = 0.0
        self.status = "Idle"

    @property
    def grid(self) -> Grid:
        return self.engine.grid

    def _new_cave(self) -> Tuple[Grid, Cell, Cell]:
        m = self.cfg.map
        grid = generate(m.width, m.height, self.rng, min_fill=m.min_fill,
                        corner_rule=self.search_cfg.corner_rule)
        start, goal = place_endpoints(grid, self.rng)
        return grid, start, goal

    # ---------- layout ----------
    def _layout(self, win_w: int, win_h: int):
        """Compute integer cell_size that fits window and anchor the grid left of the panel."""
        avail_w = max(1, win_w - self.panel_w - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        self.cell_size = int(max(4, min(avail_w // self.grid.width, avail_h // self.grid.height)))

        plate_w = self.grid.width * self.cell_size + 2 * GRID_MARGIN
        plate_h = self.grid.height * self.cell_size + 2 * GRID_MARGIN
        top_y = max(0, (win_h - plate_h) // 2)
        self.canvas_rect = pygame.Rect(0, top_y, plate_w, plate_h)
        self._grid_origin = (self.canvas_rect.x + GRID_MARGIN, self.canvas_rect.y + GRID_MARGIN)
        self._right_band = pygame.Rect(self.canvas_rect.right, 0,
                                       max(self.panel_w, win_w - self.canvas_rect.right), win_h)
        self._build_buttons()

    def cell_at(self, pos: Tuple[int, int]) -> Optional[Cell]:
        ox, oy = self._grid_origin
        col = (pos[0] - ox) // self.cell_size
        row = (pos[1] - oy) // self.cell_size
        c = (int(col), int(row))
        return c if self.grid.in_bounds(c) else None

    def run(self):
        while True:
            self._handle_events()
            if self.running:
                self._tick_algorithm()
            self._draw()
            self.clock.tick(60)

    def _tick_algorithm(self):
        t0 = time.time()
        step_interval = 1.0 / max(1, self.steps_per_sec)
        if t0 - self._last_step_t >= step_interval:
            self._last_step_t = t0
            self._do_step()

    def _sync_status(self):
        state = self.engine.current_state()
        if state in TERMINAL:
            self.running = False
        self.status = "Running" if self.running else STATE_LABELS[state]
        self._refresh_active_states()

    def _do_step(self):
        if self.engine.current_state() in TERMINAL:
            self.running = False
            return
        res = self.engine.step()
        if res.status is StepStatus.GOAL_REACHED:
            logger.info("Path found: %s", res.metrics)
        elif res.status is StepStatus.EXHAUSTED:
            logger.info("No path from %s to %s", self.engine.start, self.engine.goal)
        self._sync_status()

    def _complete(self):
        res = self.engine.run_to_completion(max_steps=self.search_cfg.max_steps)
        if res.status is RunStatus.CANCELLED:
            logger.warning("Search stopped after %d steps without finishing", res.steps)
        else:
            logger.info("Run finished (%s) in %d steps", res.status.value, res.steps)
        self.running = False
        self._sync_status()

    # ---------- reconfiguration ----------
    def _reconfigure(self, grid: Grid, start: Cell, goal: Cell) -> bool:
        try:
            engine = SearchEngine.from_config(grid, start, goal, self.search_cfg)
        except PathfindingError as ex:
            logger.warning("Rejected map change: %s", ex)
            return False
        self.engine = engine
        self.running = False
        self._layout(*self.screen.get_size())
        self._sync_status()
        return True

    def _switch_map(self, key: str):
        if key not in MAP_FILES:
            return
        try:
            grid, start, goal = load_map(MAP_FILES[key])
        except PathfindingError as ex:
            logger.error("Failed to load map %s: %s", key, ex)
            return
        if self._reconfigure(grid, start, goal):
            self.selected_map_key = key
            pygame.display.set_caption(f"Turnpath: {key}")

    def _new_map(self):
        try:
            grid, start, goal = self._new_cave()
        except PathfindingError as ex:
            logger.error("Map generation failed: %s", ex)
            return
        if self._reconfigure(grid, start, goal):
            self.selected_map_key = "cave"
            pygame.display.set_caption("Turnpath: cave")

    def _switch_algo(self, heuristic: str):
        self.search_cfg = dataclasses.replace(self.search_cfg, heuristic=heuristic)
        self._reconfigure(self.grid, self.engine.start, self.engine.goal)

    def _edit_cell(self, c: Cell, button: int):
        e = self.engine
        if button == 1:
            self._reconfigure(self.grid, e.start, c)
        elif button == 3:
            self._reconfigure(self.grid, c, e.goal)
        elif button == 2 and c not in (e.start, e.goal):
            self._reconfigure(self.grid.with_blocked(self.grid.blocked ^ {c}), e.start, e.goal)

    def _reset(self):
        self.running = False
        self.engine.restart()
        self._sync_status()

    def _toggle_run(self):
        if self.engine.current_state() in TERMINAL:
            return
        self.running = not self.running
        self.status = "Running" if self.running else "Paused"
        self._refresh_active_states()

    def _bump_speed(self, dv: int):
        self.steps_per_sec = int(max(1, min(120, self.steps_per_sec + dv)))

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_n:
                    self._do_step()
                elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    self._complete()
                elif e.key == pygame.K_r:
                    self._reset()
                elif e.key == pygame.K_DELETE:
                    self._new_map()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._bump_speed(+1)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE):
                    self._bump_speed(-1)
                elif e.key == pygame.K_1:
                    self._switch_map("01_open_field")
                elif e.key == pygame.K_2:
                    self._switch_map("02_wall_detour")
                elif e.key == pygame.K_3:
                    self._switch_map("03_enclosed_goal")
                elif e.key in HEURISTIC_KEYS:
                    self._switch_algo(HEURISTIC_KEYS[e.key])
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((e.w, e.h), pygame.RESIZABLE)
                self._layout(e.w, e.h)
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                if any(b.handle_mouse(e) for b in list(self._buttons)):
                    continue
                if e.type == pygame.MOUSEBUTTONDOWN:
                    c = self.cell_at(e.pos)
                    if c is not None:
                        self._edit_cell(c, e.button)

    # ---------- drawing ----------
    def _draw(self):
        self.screen.fill((24, 26, 32))
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_grid(self):
        cs = self.cell_size
        ox, oy = self._grid_origin

        for row in range(self.grid.height):
            for col in range(self.grid.width):
                rect = pygame.Rect(ox + col*cs, oy + row*cs, cs, cs)
                color = WALL_BROWN if self.grid.is_blocked((col, row)) else FLOOR_SAND
                pygame.draw.rect(self.screen, color, rect)
                if cs >= 10:
                    pygame.draw.rect(self.screen, BLACK, rect, 1)

        # overlays
        overlay = pygame.Surface((cs, cs), pygame.SRCALPHA)
        overlay.fill(NEON_MAG_A)
        for (col,row) in self.engine.visited_snapshot():
            self.screen.blit(overlay, (ox + col*cs, oy + row*cs))
        overlay.fill(NEON_CYAN_A)
        for (col,row) in self.engine.frontier_snapshot():
            self.screen.blit(overlay, (ox + col*cs, oy + row*cs))

        # partial route to the head cell while searching, full route once found
        path = self.engine.trajectory()
        if path and len(path) >= 2:
            pts = [(ox + col*cs + cs//2, oy + row*cs + cs//2) for (col,row) in path]
            pygame.draw.lines(self.screen, NEON_MINT, False, pts, max(2, cs//4))

        self._draw_badge(self.engine.start, BLUE, "S")
        self._draw_badge(self.engine.goal, RED, "G")

    def _draw_badge(self, cell: Cell, color: Tuple[int,int,int], label: str):
        cs = self.cell_size
        ox, oy = self._grid_origin
        col,row = cell
        cx = ox + col*cs + cs//2
        cy = oy + row*cs + cs//2
        pygame.draw.circle(self.screen, color, (cx,cy), max(3, cs//2 - 1))
        if cs >= 14:
            txt = self.font_small.render(label, True, WHITE)
            self.screen.blit(txt, txt.get_rect(center=(cx,cy)))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 290  # leaves space for metrics card above
        w = max(160, rb.width - 32)
        h = 32
        gap = 8

        def add(label, cb, *, togglable=False, store_as: Optional[str] = None):
            btn = UIButton(label, pygame.Rect(x, y, w, h), cb, togglable=togglable)
            self._buttons.append(btn)
            if store_as:
                setattr(self, store_as, btn)

        add("Run / Pause", self._toggle_run, togglable=True, store_as="btn_run"); y += h + gap
        add("Step Once", self._do_step); y += h + gap
        add("Run To End", self._complete); y += h + gap
        add("Restart", self._reset); y += h + gap
        add("New Map", self._new_map); y += h + gap
        add("Algo: Dijkstra", lambda: self._switch_algo("zero"), togglable=True, store_as="btn_algo_d"); y += h + gap
        add("Algo: A*", lambda: self._switch_algo("octile"), togglable=True, store_as="btn_algo_a"); y += h + gap
        add("Algo: Greedy", lambda: self._switch_algo("manhattan"), togglable=True, store_as="btn_algo_g")

        self._refresh_active_states()

    def _refresh_active_states(self):
        if hasattr(self, "btn_run"):
            self.btn_run.set_active(self.running)
        heuristic = self.search_cfg.heuristic
        for attr, h in (("btn_algo_d", "zero"), ("btn_algo_a", "octile"), ("btn_algo_g", "manhattan")):
            if hasattr(self, attr):
                getattr(self, attr).set_active(heuristic == h)

    def _metric_lines(self) -> List[str]:
        m: Dict = self.engine.metrics()
        lines = [
            f"State: {self.status}",
            f"Steps: {m['steps']}  (stale {m['stale']})",
            f"Popped: {m['popped']}",
            f"Open: {m['open_size']}",
            f"Closed: {m['closed_count']}",
            f"Path Len: {m['path_len']}",
            f"Turns: {m['turns']}",
        ]
        if m["total_cost"] is not None:
            lines.append(f"Total Cost: {m['total_cost']:.3f}")
        lines.append(f"Map: {self.selected_map_key}")
        lines.append(f"Algo: {m['algo']}" + ("" if m["admissible"] else " (inadmissible h)"))
        lines.append(f"Speed: {self.steps_per_sec} steps/s")
        return lines

    def _draw_metrics_and_buttons(self):
        rb = self._right_band

        card = pygame.Surface((rb.width - 20, 270), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        hi = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(hi, CARD_HI, hi.get_rect(), border_radius=14)
        card.blit(hi, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18
        surf = self.font_big.render("Metrics", True, ACCENT_GOLD)
        self.screen.blit(surf, (x0, y0))
        y0 += surf.get_height() + 6
        for text in self._metric_lines():
            surf = self.font.render(text, True, TEXT_LIGHT)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 4

        for b in self._buttons:
            b.draw(self.screen, self.font)


# ---------- main ----------
def main():
    setup_logging(CONFIG)
    try:
        viewer = Viewer(CONFIG)
    except PathfindingError as ex:
        logger.error("Failed to start viewer: %s", ex)
        sys.exit(1)
    viewer.run()

if __name__ == "__main__":
    main()
