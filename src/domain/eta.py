"""
Delivery time estimation  (Strategy Pattern)
============================================

Two travel-time models are in use:

* ``SteppedTravelTime`` -- coarse buckets, used when quoting a delivery
  before the order is placed.
* ``LinearTravelTime``  -- flat minutes-per-km, used by live tracking.

The two disagree for the same distance (1 km quotes 10 min but tracks as
5, 8 km quotes 35 but tracks as 40).  Both are kept as-is until product
decides on one.

Quote formula
-------------
  total = preparation + travel(distance) + buffer
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .distance import SEARCH_PRECISION, haversine_km
from .entities import Location
from .pricing import delivery_fee, step_lookup
from .timeutils import utcnow

TRAVEL_TIME_TIERS: tuple[tuple[float, int], ...] = (
    (2.0, 10),
    (5.0, 20),
    (10.0, 35),
    (20.0, 60),
)
MAX_TRAVEL_MINUTES = 90


# ── Strategy hierarchy ────────────────────────────────────────────────


class TravelTimeModel(ABC):
    @abstractmethod
    def minutes(self, distance_km: float) -> int: ...


class SteppedTravelTime(TravelTimeModel):
    def minutes(self, distance_km: float) -> int:
        return step_lookup(distance_km, TRAVEL_TIME_TIERS, MAX_TRAVEL_MINUTES)


class LinearTravelTime(TravelTimeModel):
    def __init__(self, minutes_per_km: float = 5.0):
        self.minutes_per_km = minutes_per_km

    def minutes(self, distance_km: float) -> int:
        # round() first so 2.2 km * 5 does not ceil to 12 on float noise
        return math.ceil(round(distance_km * self.minutes_per_km, 6))


# ── Quote ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DeliveryQuote:
    distance_km: float
    preparation_minutes: int
    travel_minutes: int
    buffer_minutes: int
    delivery_fee: float
    estimated_delivery_at: datetime

    @property
    def total_minutes(self) -> int:
        return self.preparation_minutes + self.travel_minutes + self.buffer_minutes


class DeliveryEstimator:
    """High-level API used by the order-estimate route."""

    def __init__(
        self,
        preparation_minutes: int = 15,
        buffer_minutes: int = 5,
        travel_model: Optional[TravelTimeModel] = None,
    ):
        self.preparation_minutes = preparation_minutes
        self.buffer_minutes = buffer_minutes
        self.travel_model = travel_model or SteppedTravelTime()

    def quote(
        self,
        pharmacy: Location,
        destination: Location,
        now: Optional[datetime] = None,
    ) -> DeliveryQuote:
        now = now or utcnow()
        distance = haversine_km(
            pharmacy.latitude,
            pharmacy.longitude,
            destination.latitude,
            destination.longitude,
            precision=SEARCH_PRECISION,
        )
        travel = self.travel_model.minutes(distance)
        total = self.preparation_minutes + travel + self.buffer_minutes
        return DeliveryQuote(
            distance_km=distance,
            preparation_minutes=self.preparation_minutes,
            travel_minutes=travel,
            buffer_minutes=self.buffer_minutes,
            delivery_fee=delivery_fee(distance),
            estimated_delivery_at=now + timedelta(minutes=total),
        )
