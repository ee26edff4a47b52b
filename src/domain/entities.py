"""
Domain value objects.

``Location`` guards coordinate ranges so the distance helpers never see an
out-of-range point.  ``Delivery`` carries the status-driven timestamp
stamping shared by the delivery routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import DeliveryStatus


class InvalidLocation(ValueError):
    """Raised when a latitude / longitude pair is outside valid ranges."""


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise InvalidLocation(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise InvalidLocation(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )

    @classmethod
    def maybe(
        cls, latitude: Optional[float], longitude: Optional[float]
    ) -> Optional["Location"]:
        """Build a location only when both coordinates are known."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude, longitude)


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Delivery:
    status: DeliveryStatus
    picked_up_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    def stamp_for(self, new_status: DeliveryStatus, now: datetime) -> dict:
        """Timestamps to set when moving to *new_status*.

        Only fills a milestone that has not been recorded yet; existing
        values are never overwritten.
        """
        stamps: dict = {}
        if new_status == DeliveryStatus.PICKED_UP and self.picked_up_at is None:
            stamps["picked_up_at"] = now
        if new_status == DeliveryStatus.DELIVERED and self.delivered_at is None:
            stamps["delivered_at"] = now
        return stamps
