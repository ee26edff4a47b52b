"""Unit tests for the delivery progress estimate."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities import Location
from src.domain.enums import DeliveryStatus
from src.domain.tracking import (
    BLIND_PROGRESS_CAP,
    TrackingEstimate,
    elapsed_progress,
    estimate_tracking,
    progress_percentage,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

# On the equator 0.09 degrees of longitude is ~10.0 km
PHARMACY = Location(0.0, 0.0)
DESTINATION = Location(0.0, 0.09)
HALFWAY = Location(0.0, 0.045)


class TestProgressPercentage:
    def test_halfway(self):
        assert progress_percentage(10.0, 5.0) == 50

    def test_zero_total_is_complete(self):
        assert progress_percentage(0.0, 3.0) == 100

    def test_clamped_below(self):
        assert progress_percentage(10.0, 20.0) == 0

    def test_clamped_above(self):
        assert progress_percentage(10.0, -1.0) == 100


class TestElapsedProgress:
    def test_proportional(self):
        assert elapsed_progress(10, 50) == 20

    def test_capped(self):
        assert elapsed_progress(100, 50) == BLIND_PROGRESS_CAP

    def test_zero_eta(self):
        assert elapsed_progress(5, 0) == BLIND_PROGRESS_CAP

    def test_negative_elapsed_clamped(self):
        assert elapsed_progress(-5, 50) == 0


class TestEstimateTracking:
    def test_no_destination(self):
        estimate = estimate_tracking(
            DeliveryStatus.ON_THE_WAY, PHARMACY, None, courier=HALFWAY, now=NOW
        )
        assert estimate == TrackingEstimate()

    def test_delivered(self):
        delivered_at = NOW - timedelta(minutes=5)
        estimate = estimate_tracking(
            DeliveryStatus.DELIVERED,
            PHARMACY,
            DESTINATION,
            delivered_at=delivered_at,
            now=NOW,
        )
        assert estimate.progress_percentage == 100
        assert estimate.current_distance == 0.0
        assert estimate.estimated_time_remaining == 0
        assert estimate.estimated_delivery == delivered_at

    def test_delivered_wins_over_live_position(self):
        estimate = estimate_tracking(
            DeliveryStatus.DELIVERED, PHARMACY, DESTINATION, courier=HALFWAY, now=NOW
        )
        assert estimate.progress_percentage == 100

    def test_live_position(self):
        estimate = estimate_tracking(
            DeliveryStatus.ON_THE_WAY, PHARMACY, DESTINATION, courier=HALFWAY, now=NOW
        )
        assert estimate.current_distance == 5.0
        assert estimate.estimated_time_remaining == 25
        assert estimate.progress_percentage == 50
        assert estimate.estimated_delivery == NOW + timedelta(minutes=25)

    def test_live_position_behind_pharmacy(self):
        estimate = estimate_tracking(
            DeliveryStatus.ACCEPTED,
            PHARMACY,
            DESTINATION,
            courier=Location(0.0, -0.09),
            now=NOW,
        )
        assert estimate.current_distance == 20.0
        assert estimate.progress_percentage == 0

    @pytest.mark.parametrize(
        "status", [DeliveryStatus.ASSIGNED, DeliveryStatus.ACCEPTED]
    )
    def test_awaiting_pickup(self, status):
        estimate = estimate_tracking(status, PHARMACY, DESTINATION, now=NOW)
        assert estimate.current_distance == 10.0
        assert estimate.estimated_time_remaining == 50
        assert estimate.progress_percentage == 0

    def test_in_transit_uses_elapsed_time(self):
        estimate = estimate_tracking(
            DeliveryStatus.PICKED_UP,
            PHARMACY,
            DESTINATION,
            picked_up_at=NOW - timedelta(minutes=10),
            now=NOW,
        )
        assert estimate.progress_percentage == 20

    def test_in_transit_capped_without_position(self):
        estimate = estimate_tracking(
            DeliveryStatus.ON_THE_WAY,
            PHARMACY,
            DESTINATION,
            picked_up_at=NOW - timedelta(hours=3),
            now=NOW,
        )
        assert estimate.progress_percentage == BLIND_PROGRESS_CAP

    def test_in_transit_accepts_naive_pickup_time(self):
        naive = (NOW - timedelta(minutes=25)).replace(tzinfo=None)
        estimate = estimate_tracking(
            DeliveryStatus.ON_THE_WAY,
            PHARMACY,
            DESTINATION,
            picked_up_at=naive,
            now=NOW,
        )
        assert estimate.progress_percentage == BLIND_PROGRESS_CAP

    def test_in_transit_without_pickup_time(self):
        estimate = estimate_tracking(
            DeliveryStatus.ON_THE_WAY, PHARMACY, DESTINATION, now=NOW
        )
        assert estimate.progress_percentage == 0

    def test_failed_has_no_estimate(self):
        estimate = estimate_tracking(
            DeliveryStatus.FAILED, PHARMACY, DESTINATION, now=NOW
        )
        assert estimate == TrackingEstimate()

    @pytest.mark.parametrize("status", list(DeliveryStatus))
    def test_progress_always_in_range(self, status):
        for courier in (None, HALFWAY, Location(10.0, 10.0), DESTINATION):
            estimate = estimate_tracking(
                status,
                PHARMACY,
                DESTINATION,
                courier=courier,
                picked_up_at=NOW - timedelta(minutes=30),
                now=NOW,
            )
            assert 0 <= estimate.progress_percentage <= 100
