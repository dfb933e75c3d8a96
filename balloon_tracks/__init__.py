"""Track reconstruction and proximity analysis for hourly balloon snapshots.

This package provides building blocks to recover loosely-structured snapshot
payloads, link per-hour positions into multi-hour tracks, score those tracks
against reference event points, and split them into map-safe polylines.
"""

from .models import EventPoint, Observation, ProximityStat, Track, TrackPoint
from .pipeline import analyze_proximity, reconstruct_tracks, segment_for_render

__all__ = [
    "EventPoint",
    "Observation",
    "ProximityStat",
    "Track",
    "TrackPoint",
    "analyze_proximity",
    "reconstruct_tracks",
    "segment_for_render",
]
