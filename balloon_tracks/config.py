"""Configuration helpers for the balloon tracks pipeline.

Provides YAML loading, small utilities for accessing nested configuration
values with defaults, and a typed view of the tunables used by each stage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_URL_TEMPLATE = "https://a.windbornesystems.com/treasure/{hour:02d}.json"


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load a YAML configuration file."""

    with Path(path).open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def get_nested(config: Dict[str, Any], keys: list[str], default: Any) -> Any:
    """Retrieve a nested value from a config dict with a default."""

    current: Any = config
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


@dataclass
class TrackerConfig:
    """Strongly-typed configuration for fetching, linking, and analysis."""

    url_template: str = DEFAULT_URL_TEMPLATE
    hours: int = 24
    timeout_sec: float = 8.0
    max_workers: int = 24
    min_link_dt_sec: float = 1800.0
    max_link_dt_sec: float = 5400.0
    max_speed_kmh: float = 200.0
    proximity_threshold_km: float = 100.0
    max_hop_km: float = 800.0
    render_window_hours: int = 24
    output_dir: Path = Path("output")
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "TrackerConfig":
        """Build a config from a loaded YAML mapping, falling back to defaults."""

        defaults = cls()
        return cls(
            url_template=str(get_nested(cfg, ["feed", "url_template"], defaults.url_template)),
            hours=int(get_nested(cfg, ["feed", "hours"], defaults.hours)),
            timeout_sec=float(get_nested(cfg, ["feed", "timeout_sec"], defaults.timeout_sec)),
            max_workers=int(get_nested(cfg, ["feed", "max_workers"], defaults.max_workers)),
            min_link_dt_sec=float(get_nested(cfg, ["linking", "min_dt_sec"], defaults.min_link_dt_sec)),
            max_link_dt_sec=float(get_nested(cfg, ["linking", "max_dt_sec"], defaults.max_link_dt_sec)),
            max_speed_kmh=float(get_nested(cfg, ["linking", "max_speed_kmh"], defaults.max_speed_kmh)),
            proximity_threshold_km=float(
                get_nested(cfg, ["proximity", "threshold_km"], defaults.proximity_threshold_km)
            ),
            max_hop_km=float(get_nested(cfg, ["render", "max_hop_km"], defaults.max_hop_km)),
            render_window_hours=int(get_nested(cfg, ["render", "window_hours"], defaults.render_window_hours)),
            output_dir=Path(get_nested(cfg, ["output", "dir"], defaults.output_dir)),
            logging=dict(cfg.get("logging", {}) or {}),
        )
