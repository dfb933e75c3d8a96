"""Synthetic hourly snapshot builders shared by the tests."""

from typing import Dict, List, Sequence, Tuple

from balloon_tracks.models import Observation

NOW = 1_700_000_000.0
KM_PER_DEG_EQUATOR = 111.19492664455873


def build_hourly(
    positions: Dict[int, Sequence[Tuple[float, float]]],
    hours: int = 24,
    now: float = NOW,
) -> List[List[Observation]]:
    """Map ``{hour_index: [(lat, lon), ...]}`` to 24 observation lists, hour 0 newest."""

    hourly: List[List[Observation]] = [[] for _ in range(hours)]
    for hour, coords in positions.items():
        hourly[hour] = [Observation(ts=now - hour * 3600, lat=lat, lon=lon) for lat, lon in coords]
    return hourly


def eastward_path(start_hour: int, n_hours: int, speed_kmh: float, lat: float = 0.0, lon0: float = 10.0):
    """Positions of one object drifting east at ``speed_kmh``, oldest hour first."""

    step_deg = speed_kmh / KM_PER_DEG_EQUATOR
    return {start_hour - i: [(lat, lon0 + i * step_deg)] for i in range(n_hours)}
