"""Plain data containers shared by the track reconstruction pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Observation:
    """A single decoded position before it is attached to a track."""

    ts: float
    lat: float
    lon: float
    alt: Optional[float] = None

    def with_track(self, track_id: str) -> "TrackPoint":
        """Return a :class:`TrackPoint` owned by ``track_id``."""

        return TrackPoint(id=track_id, ts=self.ts, lat=self.lat, lon=self.lon, alt=self.alt)


@dataclass
class TrackPoint:
    """An observation carrying a back-reference to its owning track."""

    id: str
    ts: float
    lat: float
    lon: float
    alt: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        record: Dict[str, object] = {"id": self.id, "ts": self.ts, "lat": self.lat, "lon": self.lon}
        if self.alt is not None:
            record["alt"] = self.alt
        return record


@dataclass
class Track:
    """A chronologically ordered run of points believed to be one object."""

    id: str
    points: List[TrackPoint] = field(default_factory=list)

    @property
    def last(self) -> TrackPoint:
        return self.points[-1]

    def append(self, observation: Observation) -> None:
        self.points.append(observation.with_track(self.id))

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "points": [point.to_dict() for point in self.points]}


@dataclass(frozen=True)
class EventPoint:
    """A geotagged reference point (e.g. a fire detection) used for proximity scoring."""

    lat: float
    lon: float
    conf: Optional[float] = None
    frp: Optional[float] = None
    acq: Optional[float] = None
    src: Optional[str] = None


@dataclass(frozen=True)
class ProximityStat:
    """Closest approach and near-encounter count of one track against the event set.

    ``closest_km`` stays ``inf`` and ``closest_ts`` stays ``None`` when no
    comparison was possible, so "no data" is never confused with zero distance.
    """

    track_id: str
    closest_km: float = math.inf
    near_count: int = 0
    closest_ts: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        closest = round(self.closest_km, 1) if math.isfinite(self.closest_km) else None
        return {
            "id": self.track_id,
            "closest_km": closest,
            "near_count": self.near_count,
            "closest_ts": self.closest_ts,
        }
