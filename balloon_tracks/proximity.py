"""Closest-approach statistics of tracks against reference event points.

Every track point is compared with every event point. The cost is
``O(tracks x points x events)``; a grid or k-d tree over the events would be
the place to cut it if the reference set grows large.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

import numpy as np

from .geo import distance_matrix_km
from .models import EventPoint, ProximityStat, Track

PROXIMITY_THRESHOLD_KM = 100.0


def track_proximity(track: Track, events: Sequence[EventPoint], threshold_km: float) -> ProximityStat:
    """
    Score one track against ``events``.
    ``near_count`` counts (point, event) pairs within ``threshold_km``, not distinct events.
    """

    if not track.points or not events:
        return ProximityStat(track_id=track.id)

    distances = distance_matrix_km(
        [point.lat for point in track.points],
        [point.lon for point in track.points],
        [event.lat for event in events],
        [event.lon for event in events],
    )
    # argmin returns the first minimum in row-major order: earliest point, then earliest event.
    point_idx, _ = np.unravel_index(int(np.argmin(distances)), distances.shape)
    return ProximityStat(
        track_id=track.id,
        closest_km=float(distances[point_idx].min()),
        near_count=int(np.count_nonzero(distances <= threshold_km)),
        closest_ts=track.points[point_idx].ts,
    )


def proximity_stats(
    tracks: Sequence[Track],
    events: Sequence[EventPoint],
    threshold_km: float = PROXIMITY_THRESHOLD_KM,
) -> List[ProximityStat]:
    """Return one :class:`ProximityStat` per track, closest first at 0.1 km resolution."""

    if threshold_km < 0 or math.isnan(threshold_km):
        raise ValueError(f"threshold_km must be non-negative, got {threshold_km}")

    stats = [track_proximity(track, events, threshold_km) for track in tracks]
    # Ties at 0.1 km keep input order.
    stats.sort(key=lambda stat: round(stat.closest_km, 1))
    logging.info(
        "Scored %d tracks against %d event points (threshold=%.1f km)",
        len(stats),
        len(events),
        threshold_km,
    )
    return stats
