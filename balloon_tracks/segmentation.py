"""Render-safe splitting of tracks into polylines.

Breaks a track wherever consecutive points cross the antimeridian
(``|dlon| > 180``) or hop farther than a distance cap, so a flat-map renderer
never draws a line across the whole map.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .geo import distance_km
from .models import TrackPoint

MAX_HOP_KM = 800.0
MIN_POINTS_PER_SEGMENT = 2

Segment = List[Tuple[float, float]]


def split_track(
    points: Sequence[TrackPoint],
    cutoff_ts: float,
    max_hop_km: float = MAX_HOP_KM,
) -> List[Segment]:
    """
    Return ``[(lat, lon), ...]`` segments built from points at or after ``cutoff_ts``.
    Segments shorter than two points are dropped.
    """

    if max_hop_km <= 0:
        raise ValueError(f"max_hop_km must be positive, got {max_hop_km}")

    recent = [point for point in points if point.ts >= cutoff_ts]
    if len(recent) < MIN_POINTS_PER_SEGMENT:
        return []

    segments: List[Segment] = []
    current: Segment = [(recent[0].lat, recent[0].lon)]
    for prev, curr in zip(recent, recent[1:]):
        crosses_antimeridian = abs(curr.lon - prev.lon) > 180
        big_hop = distance_km(prev, curr) > max_hop_km
        if crosses_antimeridian or big_hop:
            if len(current) >= MIN_POINTS_PER_SEGMENT:
                segments.append(current)
            current = [(curr.lat, curr.lon)]
        else:
            current.append((curr.lat, curr.lon))

    if len(current) >= MIN_POINTS_PER_SEGMENT:
        segments.append(current)
    return segments
