"""Greedy nearest-neighbour linking of hourly snapshots into tracks.

Hours are processed oldest to newest. Each observation claims the closest open
track whose last point is roughly one hour older and reachable under the speed
cap; a track claimed in an hour is unavailable to later observations of that
hour. Unmatched observations seed new tracks. The assignment is greedy and
order-dependent, not a global minimum-cost matching.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Set

from .geo import distance_km
from .models import Observation, Track
from .postprocess import dedupe_and_sort

MIN_LINK_DT_SEC = 1800.0
MAX_LINK_DT_SEC = 5400.0
MAX_SPEED_KMH = 200.0
MIN_POINTS_PER_TRACK = 2


def _best_candidate(
    observation: Observation,
    tracks: Sequence[Track],
    claimed: Set[str],
    min_dt_sec: float,
    max_dt_sec: float,
    max_speed_kmh: float,
) -> Optional[int]:
    """Index of the nearest unclaimed track passing the time and speed gates."""

    best_idx: Optional[int] = None
    best_km = math.inf
    for idx, track in enumerate(tracks):
        if track.id in claimed:
            continue
        last = track.last
        dt = observation.ts - last.ts
        if dt < min_dt_sec or dt > max_dt_sec:
            continue
        km = distance_km(last, observation)
        if km > max_speed_kmh * (dt / 3600.0):
            continue
        if km < best_km:
            best_km = km
            best_idx = idx
    return best_idx


def link_tracks(
    hourly: Sequence[Sequence[Observation]],
    min_dt_sec: float = MIN_LINK_DT_SEC,
    max_dt_sec: float = MAX_LINK_DT_SEC,
    max_speed_kmh: float = MAX_SPEED_KMH,
    min_points_per_track: int = MIN_POINTS_PER_TRACK,
) -> List[Track]:
    """
    Link per-hour observation lists into tracks.
    ``hourly[0]`` is the most recent hour, so processing runs from the last index down to 0.
    Returned tracks are deduplicated, time-sorted, and hold at least ``min_points_per_track`` points.
    """

    if min_dt_sec > max_dt_sec:
        raise ValueError(f"Invalid gating window: [{min_dt_sec}, {max_dt_sec}]")

    tracks: List[Track] = []
    next_id = 1

    for hour_idx in range(len(hourly) - 1, -1, -1):
        observations = hourly[hour_idx]
        if not observations:
            continue

        claimed: Set[str] = set()
        matched = 0
        unmatched: List[Observation] = []
        for observation in observations:
            best_idx = _best_candidate(observation, tracks, claimed, min_dt_sec, max_dt_sec, max_speed_kmh)
            if best_idx is None:
                unmatched.append(observation)
                continue
            track = tracks[best_idx]
            track.append(observation)
            claimed.add(track.id)
            matched += 1

        # Leftover observations seed new tracks after matching so they cannot be claimed this hour.
        for observation in unmatched:
            track = Track(id=str(next_id))
            next_id += 1
            track.append(observation)
            tracks.append(track)

        logging.debug(
            "Hour %d: %d observations, %d linked, %d new tracks",
            hour_idx,
            len(observations),
            matched,
            len(unmatched),
        )

    for track in tracks:
        track.points = dedupe_and_sort(track.points)
    linked = [track for track in tracks if len(track.points) >= min_points_per_track]
    dropped = len(tracks) - len(linked)
    if dropped:
        logging.info("Dropped %d tracks shorter than %d points", dropped, min_points_per_track)
    logging.info("Linked %d tracks from %d hourly snapshots", len(linked), len(hourly))
    return linked
