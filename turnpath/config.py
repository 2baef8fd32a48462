"""Configuration loader for turnpath."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import os

import yaml


CONFIG_PATH = Path(
    os.getenv("TURNPATH_CONFIG", Path(__file__).resolve().parents[1] / "config.yaml")
)


@dataclass
class SearchConfig:
    """Cost constants and policies handed to the search engine."""

    orthogonal_cost: float = 1.0
    diagonal_cost: float = 1.0
    turn_penalty: float = 0.001
    heuristic: str = "octile"
    corner_rule: str = "no_squeeze"
    tie_break: str = "lifo"
    max_steps: Optional[int] = 200_000


@dataclass
class MapConfig:
    """Size and seed of generated maps, or a JSON map to load instead."""

    width: int = 60
    height: int = 40
    seed: Optional[int] = None
    min_fill: float = 0.40
    map_file: Optional[str] = None


@dataclass
class ViewerConfig:
    cell_size: int = 16
    steps_per_sec: int = 30
    panel_width: int = 320


@dataclass
class LoggingConfig:
    global_level: str = "INFO"
    module_levels: Dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Top level configuration dataclass."""

    search: SearchConfig
    map: MapConfig
    viewer: ViewerConfig
    logging: LoggingConfig


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _parse_config(data: dict[str, Any]) -> Config:
    """Convert raw ``data`` into :class:`Config`."""

    search_data = data.get("search", {}) or {}
    search = SearchConfig(
        orthogonal_cost=float(search_data.get("orthogonal_cost", 1.0)),
        diagonal_cost=float(search_data.get("diagonal_cost", 1.0)),
        turn_penalty=float(search_data.get("turn_penalty", 0.001)),
        heuristic=str(search_data.get("heuristic", "octile")),
        corner_rule=str(search_data.get("corner_rule", "no_squeeze")),
        tie_break=str(search_data.get("tie_break", "lifo")),
        max_steps=_optional_int(search_data.get("max_steps", 200_000)),
    )

    map_data = data.get("map", {}) or {}
    map_cfg = MapConfig(
        width=int(map_data.get("width", 60)),
        height=int(map_data.get("height", 40)),
        seed=_optional_int(map_data.get("seed")),
        min_fill=float(map_data.get("min_fill", 0.40)),
        map_file=map_data.get("map_file"),
    )

    viewer_data = data.get("viewer", {}) or {}
    viewer = ViewerConfig(
        cell_size=int(viewer_data.get("cell_size", 16)),
        steps_per_sec=int(viewer_data.get("steps_per_sec", 30)),
        panel_width=int(viewer_data.get("panel_width", 320)),
    )

    logging_data = data.get("logging", {}) or {}
    logging_cfg = LoggingConfig(
        global_level=str(logging_data.get("global_level", "INFO")).upper(),
        module_levels={
            str(k): str(v).upper() for k, v in (logging_data.get("module_levels") or {}).items()
        },
    )

    return Config(search=search, map=map_cfg, viewer=viewer, logging=logging_cfg)


def load_config(path: Path = CONFIG_PATH) -> Config:
    """Load configuration from ``path`` and return a :class:`Config`."""

    path = Path(path)
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
    else:
        raw = {}
    return _parse_config(raw)


# Load configuration at module import time.
CONFIG = load_config()


__all__ = [
    "CONFIG",
    "Config",
    "SearchConfig",
    "MapConfig",
    "ViewerConfig",
    "LoggingConfig",
    "load_config",
]
