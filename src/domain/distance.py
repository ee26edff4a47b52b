"""
Distance calculation using the Haversine formula.

Assumption
----------
We use great-circle (Haversine) distance instead of a real routing engine
to keep the service self-contained and runnable locally without external
API keys.  Road distance is always somewhat longer, which the delivery
estimates absorb through their coarse time buckets.

Callers validate coordinate ranges before calling; the function itself
trusts its inputs.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from typing import Optional

EARTH_RADIUS_KM = 6_371.0

# Rounding used by the different consumers
SEARCH_PRECISION = 2  # estimate, nearby search, stock check
TRACKING_PRECISION = 1  # live delivery tracking


def haversine_km(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    precision: Optional[int] = None,
) -> float:
    """Return the great-circle distance in **km** between two points.

    When *precision* is given the result is rounded to that many decimal
    places; otherwise the raw value is returned.
    """
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    # Float noise can push ``a`` a hair past 1.0 for antipodal points
    distance = 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))
    if precision is None:
        return distance
    return round(distance, precision)
