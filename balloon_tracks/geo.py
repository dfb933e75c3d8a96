"""Great-circle distance helpers.

The scalar :func:`distance_km` is used by the linker and the render segmenter;
:func:`distance_matrix_km` evaluates the same haversine formula over a full
cartesian product with numpy for proximity scoring.
"""

from __future__ import annotations

import math
from typing import Protocol, Sequence

import numpy as np

EARTH_RADIUS_KM = 6371.0


class LatLon(Protocol):
    lat: float
    lon: float


def distance_km(a: LatLon, b: LatLon) -> float:
    """Haversine distance in kilometres between two objects exposing ``lat``/``lon``."""

    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lam = math.radians(b.lon - a.lon)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    # Rounding can push h a hair past 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(h, 1.0)))


def distance_matrix_km(
    lats_a: Sequence[float],
    lons_a: Sequence[float],
    lats_b: Sequence[float],
    lons_b: Sequence[float],
) -> np.ndarray:
    """
    Return an ``(len(a), len(b))`` matrix of haversine distances in kilometres.
    Row ``i`` holds the distances from point ``a[i]`` to every point in ``b``.
    """

    lat1 = np.radians(np.asarray(lats_a, dtype=float))[:, np.newaxis]
    lon1 = np.asarray(lons_a, dtype=float)[:, np.newaxis]
    lat2 = np.radians(np.asarray(lats_b, dtype=float))[np.newaxis, :]
    lon2 = np.asarray(lons_b, dtype=float)[np.newaxis, :]

    d_phi = lat2 - lat1
    d_lam = np.radians(lon2 - lon1)
    h = np.sin(d_phi / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(d_lam / 2) ** 2
    return 2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(np.minimum(h, 1.0)))
