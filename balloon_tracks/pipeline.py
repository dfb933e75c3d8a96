"""High-level orchestration: fetch, normalise, link, and analyse."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from .config import TrackerConfig
from .linking import link_tracks
from .models import EventPoint, Observation, ProximityStat, Track
from .payload import normalize_payload
from .proximity import PROXIMITY_THRESHOLD_KM, proximity_stats
from .segmentation import MAX_HOP_KM, Segment, split_track

FetchHour = Callable[[int], Optional[str]]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _observations_for_hour(fetch_hour: FetchHour, hour_index: int, now: Optional[float]) -> List[Observation]:
    """Fetch and normalise one hour; any failure yields an empty hour."""

    try:
        text = fetch_hour(hour_index)
        return normalize_payload(text, hour_index, now)
    except Exception as exc:
        logging.warning("Hour %02d skipped: %s", hour_index, exc)
        return []


def reconstruct_tracks(
    fetch_hour: FetchHour,
    hours: int = 24,
    now: Optional[float] = None,
    config: Optional[TrackerConfig] = None,
) -> Dict[str, object]:
    """
    Build tracks from ``hours`` snapshots, where ``fetch_hour(0)`` is the most recent.
    Returns ``{"updated_at": iso8601, "tracks": [Track, ...]}``; never fails because of feed content.
    """

    config = config or TrackerConfig()
    hourly: List[List[Observation]] = [[] for _ in range(hours)]
    with ThreadPoolExecutor(max_workers=max(1, min(config.max_workers, hours or 1))) as executor:
        futures = {
            executor.submit(_observations_for_hour, fetch_hour, hour, now): hour for hour in range(hours)
        }
        for future in as_completed(futures):
            hourly[futures[future]] = future.result()

    logging.info(
        "Observations per hour (newest first): %s",
        [len(observations) for observations in hourly],
    )
    tracks = link_tracks(
        hourly,
        min_dt_sec=config.min_link_dt_sec,
        max_dt_sec=config.max_link_dt_sec,
        max_speed_kmh=config.max_speed_kmh,
    )
    return {"updated_at": _utc_now_iso(), "tracks": tracks}


def analyze_proximity(
    tracks: Sequence[Track],
    events: Sequence[EventPoint],
    threshold_km: float = PROXIMITY_THRESHOLD_KM,
) -> List[ProximityStat]:
    return proximity_stats(tracks, events, threshold_km)


def segment_for_render(track: Track, cutoff_ts: float, max_hop_km: float = MAX_HOP_KM) -> List[Segment]:
    return split_track(track.points, cutoff_ts, max_hop_km)


def build_tracks_payload(result: Dict[str, object]) -> Dict[str, object]:
    """JSON document for the map layer: ``{"updatedAt", "tracks"}``."""

    tracks: Sequence[Track] = result.get("tracks", [])  # type: ignore[assignment]
    return {
        "updatedAt": result.get("updated_at") or _utc_now_iso(),
        "tracks": [track.to_dict() for track in tracks],
    }


def build_insights_payload(stats: Sequence[ProximityStat], threshold_km: float) -> Dict[str, object]:
    """JSON document for the insights panel: ``{"updatedAt", "stats", "threshold_km"}``."""

    return {
        "updatedAt": _utc_now_iso(),
        "stats": [stat.to_dict() for stat in stats],
        "threshold_km": threshold_km,
    }
