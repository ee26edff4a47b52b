"""
Delivery progress estimation
============================

Presentation-layer estimate shown to customers while an order is on its
way.  Phases, checked in this order:

1. ``delivered``                          -> 100 %, nothing remaining.
2. live courier position known            -> distance covered along the
   pharmacy -> destination line.
3. ``assigned`` / ``accepted``            -> 0 %, ETA from the pharmacy.
4. ``picked_up`` / ``on_the_way``         -> elapsed time since pickup
   over the ETA, capped at 50 % because we cannot see the courier.
5. anything else (``failed``)             -> 0 %, no estimate.

Without a destination on the order nothing can be estimated.  Progress is
always clamped to [0, 100]; it is not guaranteed to be monotonic across
status changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .distance import TRACKING_PRECISION, haversine_km
from .entities import Location
from .enums import AWAITING_PICKUP, IN_TRANSIT, DeliveryStatus
from .eta import LinearTravelTime, TravelTimeModel
from .timeutils import as_utc, utcnow

BLIND_PROGRESS_CAP = 50


@dataclass(frozen=True)
class TrackingEstimate:
    current_distance: Optional[float] = None
    estimated_time_remaining: Optional[int] = None
    progress_percentage: int = 0
    estimated_delivery: Optional[datetime] = None


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _distance(a: Location, b: Location) -> float:
    return haversine_km(
        a.latitude, a.longitude, b.latitude, b.longitude,
        precision=TRACKING_PRECISION,
    )


def progress_percentage(total_km: float, remaining_km: float) -> int:
    """Share of the route already covered, as a whole percentage."""
    if total_km == 0:
        return 100
    progress = (total_km - remaining_km) / total_km * 100
    return int(_clamp(round(progress), 0, 100))


def elapsed_progress(elapsed_minutes: float, eta_minutes: float) -> int:
    """Time-based guess used when no live position is available."""
    if eta_minutes <= 0:
        return BLIND_PROGRESS_CAP
    progress = round(elapsed_minutes / eta_minutes * 100)
    return int(_clamp(progress, 0, BLIND_PROGRESS_CAP))


def estimate_tracking(
    status: DeliveryStatus,
    pharmacy: Location,
    destination: Optional[Location],
    courier: Optional[Location] = None,
    picked_up_at: Optional[datetime] = None,
    delivered_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
    travel_model: Optional[TravelTimeModel] = None,
) -> TrackingEstimate:
    now = now or utcnow()
    travel_model = travel_model or LinearTravelTime()

    if destination is None:
        return TrackingEstimate()

    if status == DeliveryStatus.DELIVERED:
        return TrackingEstimate(
            current_distance=0.0,
            estimated_time_remaining=0,
            progress_percentage=100,
            estimated_delivery=as_utc(delivered_at),
        )

    if courier is not None:
        remaining = _distance(courier, destination)
        eta = travel_model.minutes(remaining)
        progress = progress_percentage(_distance(pharmacy, destination), remaining)
    elif status in AWAITING_PICKUP:
        remaining = _distance(pharmacy, destination)
        eta = travel_model.minutes(remaining)
        progress = 0
    elif status in IN_TRANSIT:
        remaining = _distance(pharmacy, destination)
        eta = travel_model.minutes(remaining)
        picked_up_at = as_utc(picked_up_at)
        elapsed = (
            (now - picked_up_at).total_seconds() / 60 if picked_up_at else 0.0
        )
        progress = elapsed_progress(elapsed, eta)
    else:
        return TrackingEstimate()

    return TrackingEstimate(
        current_distance=remaining,
        estimated_time_remaining=eta,
        progress_percentage=progress,
        estimated_delivery=now + timedelta(minutes=eta),
    )
