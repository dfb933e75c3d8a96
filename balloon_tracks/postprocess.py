"""Deduplication and chronological ordering of track points."""

from __future__ import annotations

import math
from typing import Iterable, List, Set, Tuple

from .models import TrackPoint

COORD_DECIMALS = 5


def _dedupe_key(point: TrackPoint) -> Tuple[str, float, str, str]:
    return (
        point.id,
        point.ts,
        f"{point.lat:.{COORD_DECIMALS}f}",
        f"{point.lon:.{COORD_DECIMALS}f}",
    )


def dedupe_and_sort(points: Iterable[TrackPoint]) -> List[TrackPoint]:
    """
    Drop non-finite and duplicate points, then sort ascending by timestamp.
    Duplicates share id, timestamp, and coordinates rounded to five decimals.
    """

    seen: Set[Tuple[str, float, str, str]] = set()
    kept: List[TrackPoint] = []
    for point in points:
        if not (math.isfinite(point.lat) and math.isfinite(point.lon) and math.isfinite(point.ts)):
            continue
        key = _dedupe_key(point)
        if key in seen:
            continue
        seen.add(key)
        kept.append(point)
    kept.sort(key=lambda point: point.ts)
    return kept
