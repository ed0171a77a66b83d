"""
Delivery distance estimates between two pincodes.

Straight-line (haversine) distance between the resolved points, with a few
corrections: a floor for codes in the same city, and multipliers for Mumbai
routes where travel distance is well above the crow-flies figure. Pure and
stateless; safe to call from any thread.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from . import pincodes
from .exceptions import ResolutionUnavailable
from .pincodes import Coordinates

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
SAME_AREA_KM = 1.0
NEARBY_THRESHOLD_KM = 5.0
METRO_MINIMUM_KM = 2.0
REGION_MINIMUM_KM = 3.0
METRO_MARKERS = ("Mumbai", "Delhi", "Bengaluru", "Chennai", "Kolkata", "Hyderabad")

NOTE_SAME_AREA = "(same area)"
NOTE_SAME_CITY = "(same city)"
NOTE_SAME_REGION = "(same region)"


@dataclass(frozen=True)
class DistanceEstimate:
    from_pincode: str
    to_pincode: str
    origin: Optional[Coordinates]
    destination: Optional[Coordinates]
    distance_km: Optional[float]
    exact_km: Optional[float]
    note: str = ""
    error: str = ""

    def as_dict(self) -> dict:
        if self.distance_km is None:
            return {
                "distance": None,
                "error": self.error,
                "from": {"pincode": self.from_pincode, "region": "Unknown"},
                "to": {"pincode": self.to_pincode, "region": "Unknown"},
            }
        return {
            "distance": self.distance_km,
            "exactDistance": self.exact_km,
            "note": self.note,
            "from": _endpoint(self.from_pincode, self.origin),
            "to": _endpoint(self.to_pincode, self.destination),
        }


def _endpoint(pincode, point):
    return {"pincode": pincode, "region": point.region, "coordinates": point.as_dict()}


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in kilometres."""
    if (a.lat, a.lon) == (b.lat, b.lon):
        return 0.0
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _is_navi(region):
    return "Navi Mumbai" in region


def _is_mumbai(region):
    return "Mumbai" in region


def mumbai_adjustment(a: str, b: str):
    """Return ``(factor, note)`` for a Mumbai-area route, or None.

    Rules are checked in order and the first match wins.
    """
    in_metro = (_is_mumbai(a) and (_is_mumbai(b) or "Thane" in b)) or (_is_mumbai(b) and "Thane" in a)
    if not in_metro:
        return None
    if ("Mumbai South" in a) != ("Mumbai South" in b):
        return 1.4, "(Mumbai traffic adjustment)"
    west = ("Mumbai West", "Mumbai Northwest")
    if (a in west and b == "Mumbai Northeast") or (b in west and a == "Mumbai Northeast"):
        return 1.5, "(Mumbai cross-city adjustment)"
    if _is_mumbai(a) and _is_mumbai(b) and _is_navi(a) != _is_navi(b):
        return 1.3, "(Mumbai-Navi Mumbai route)"
    if ("Thane" in a and _is_mumbai(b)) or ("Thane" in b and _is_mumbai(a)):
        return 1.25, "(Mumbai-Thane route)"
    return None


def round_distance(km: float) -> float:
    """Round to the nearest 5 km beyond 100 km, else to one decimal (half up)."""
    if km > 100:
        return float(5 * math.floor(km / 5 + 0.5))
    return math.floor(km * 10 + 0.5) / 10


def estimate(from_pincode: str, to_pincode: str) -> DistanceEstimate:
    """Estimate the travel distance between two pincodes."""
    try:
        origin = pincodes.resolve(from_pincode)
        destination = pincodes.resolve(to_pincode)
    except ResolutionUnavailable as exc:
        logger.warning("distance: could not resolve %r -> %r: %s", from_pincode, to_pincode, exc)
        return DistanceEstimate(from_pincode, to_pincode, None, None, None, None, error=exc.message)

    exact = haversine_km(origin, destination)
    if from_pincode.strip() == to_pincode.strip():
        return DistanceEstimate(from_pincode, to_pincode, origin, destination, SAME_AREA_KM, exact, NOTE_SAME_AREA)

    adjusted = exact
    note = ""
    if origin.region == destination.region and exact < NEARBY_THRESHOLD_KM:
        if any(marker in origin.region for marker in METRO_MARKERS):
            adjusted, note = max(METRO_MINIMUM_KM, exact), NOTE_SAME_CITY
        else:
            adjusted, note = max(REGION_MINIMUM_KM, exact), NOTE_SAME_REGION

    rule = mumbai_adjustment(origin.region, destination.region)
    if rule is not None:
        factor, note = rule
        adjusted *= factor

    result = DistanceEstimate(
        from_pincode, to_pincode, origin, destination, round_distance(adjusted), exact, note
    )
    logger.debug("distance %s -> %s: %.2f km (exact %.2f) %s", from_pincode, to_pincode, result.distance_km, exact, note)
    return result
