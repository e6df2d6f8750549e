# crowdscene/utils/geo.py
"""
Great-circle distance and coordinate checks
"""

import math
from numbers import Real
from typing import Any, Tuple

from ..exceptions import ValidationError

EARTH_RADIUS_MILES = 3958.8
METERS_PER_MILE = 1609.34


def distance_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two points, in miles"""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push h a hair past 1 for antipodal points
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(min(1.0, h)))


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def is_finite_number(value: Any) -> bool:
    """True for a finite real number (bools excluded)"""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def validate_coordinates(lat: Any, lng: Any) -> Tuple[float, float]:
    """Return (lat, lng) as floats or raise ValidationError"""
    if not is_finite_number(lat) or not is_finite_number(lng):
        raise ValidationError("Bad coords")
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValidationError("Bad coords")
    return float(lat), float(lng)


def validate_radius(radius_miles: Any) -> float:
    if not is_finite_number(radius_miles) or radius_miles <= 0:
        raise ValidationError("Bad radius")
    return float(radius_miles)
