"""
nearest_toilet.py
-----------------
Rank loaded facilities by great-circle distance from a reference point.

Usage
-----
from nearest_toilet import rank, requires_baby_change

nearest = rank(toilets, requires_baby_change, (53.7248, -1.8658), k=10)
for toilet in nearest:
    print(toilet.name)

Use rank_with_distances() to also get the distance in meters for each result.
"""

from typing import Callable, List, Sequence, Tuple

import numpy as np

from toilet_data import Facility

DEFAULT_COUNT = 10
EARTH_RADIUS_M = 6371008.8  # mean Earth radius

Predicate = Callable[[Facility], bool]


def requires_baby_change(facility: Facility) -> bool:
    """Keep only facilities whose baby change column says yes (any case)."""
    return facility.baby_change.lower() == "yes"


def any_facility(facility: Facility) -> bool:
    return True


def _haversine_m(lat1: float, lon1: float, lat2: np.ndarray, lon2: np.ndarray) -> np.ndarray:
    """Vectorized haversine distance in meters between one point and many others."""
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    dphi = np.radians(lat2 - lat1)
    dlambda = np.radians(lon2 - lon1)
    a = np.sin(dphi/2.0)**2 + np.cos(phi1)*np.cos(phi2)*np.sin(dlambda/2.0)**2
    # rounding can push a just outside [0, 1] near the poles and antipodes
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_M * (2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a)))


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points."""
    return float(_haversine_m(lat1, lon1, np.array([lat2]), np.array([lon2]))[0])


def rank_with_distances(
    facilities: Sequence[Facility],
    predicate: Predicate,
    reference: Tuple[float, float],
    k: int = DEFAULT_COUNT,
) -> List[Tuple[Facility, float]]:
    """Return up to k (facility, distance_m) pairs, nearest first.

    Facilities at equal distance keep their input order.
    """
    if k < 0:
        raise ValueError(f"k must not be negative, got {k}")

    kept = [f for f in facilities if predicate(f)]
    if not kept or k == 0:
        return []

    ref_lat, ref_lon = reference
    lats = np.array([f.latitude for f in kept], dtype=float)
    lons = np.array([f.longitude for f in kept], dtype=float)
    distances = _haversine_m(ref_lat, ref_lon, lats, lons)

    order = np.argsort(distances, kind="stable")[:k]
    return [(kept[i], float(distances[i])) for i in order]


def rank(
    facilities: Sequence[Facility],
    predicate: Predicate,
    reference: Tuple[float, float],
    k: int = DEFAULT_COUNT,
) -> List[Facility]:
    """Filter by predicate, then return the k facilities nearest to reference."""
    return [f for f, _ in rank_with_distances(facilities, predicate, reference, k)]
