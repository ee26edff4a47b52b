"""Unit tests for domain value objects."""

from datetime import datetime, timezone

import pytest

from src.domain.entities import Delivery, InvalidLocation, Location
from src.domain.enums import DeliveryStatus

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestLocation:
    def test_valid_bounds(self):
        Location(90, 180)
        Location(-90, -180)

    @pytest.mark.parametrize("lat, lng", [(90.1, 0), (-91, 0), (0, 180.5), (0, -181)])
    def test_out_of_range(self, lat, lng):
        with pytest.raises(InvalidLocation):
            Location(lat, lng)

    def test_maybe_requires_both_coordinates(self):
        assert Location.maybe(None, 72.8) is None
        assert Location.maybe(19.0, None) is None
        assert Location.maybe(0.0, 0.0) == Location(0.0, 0.0)


class TestDeliveryStamps:
    def test_pickup_stamped(self):
        delivery = Delivery(status=DeliveryStatus.ACCEPTED)
        assert delivery.stamp_for(DeliveryStatus.PICKED_UP, NOW) == {
            "picked_up_at": NOW
        }

    def test_delivered_stamped(self):
        delivery = Delivery(status=DeliveryStatus.ON_THE_WAY, picked_up_at=NOW)
        assert delivery.stamp_for(DeliveryStatus.DELIVERED, NOW) == {
            "delivered_at": NOW
        }

    def test_existing_stamp_kept(self):
        earlier = datetime(2023, 12, 31, tzinfo=timezone.utc)
        delivery = Delivery(status=DeliveryStatus.PICKED_UP, picked_up_at=earlier)
        assert delivery.stamp_for(DeliveryStatus.PICKED_UP, NOW) == {}

    def test_other_statuses_stamp_nothing(self):
        delivery = Delivery(status=DeliveryStatus.ASSIGNED)
        assert delivery.stamp_for(DeliveryStatus.ON_THE_WAY, NOW) == {}
        assert delivery.stamp_for(DeliveryStatus.FAILED, NOW) == {}
