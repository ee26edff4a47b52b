"""Unit tests for the delivery fee tiers and shelf-price discounting."""

import pytest

from src.domain.pricing import (
    MAX_DELIVERY_FEE,
    delivery_fee,
    discounted_price,
    step_lookup,
)


class TestDeliveryFee:
    @pytest.mark.parametrize(
        "distance, fee",
        [
            (0.0, 2.00),
            (2.0, 2.00),
            (2.01, 3.50),
            (5.0, 3.50),
            (10.0, 5.00),
            (15.5, 7.50),
            (20.0, 7.50),
            (20.01, 10.00),
            (300.0, 10.00),
        ],
    )
    def test_tiers(self, distance, fee):
        assert delivery_fee(distance) == fee

    def test_non_decreasing(self):
        fees = [delivery_fee(d / 10) for d in range(0, 300)]
        assert fees == sorted(fees)
        assert fees[-1] == MAX_DELIVERY_FEE


class TestStepLookup:
    def test_first_matching_tier_wins(self):
        tiers = ((1.0, "a"), (2.0, "b"))
        assert step_lookup(1.0, tiers, "z") == "a"
        assert step_lookup(1.5, tiers, "z") == "b"

    def test_default_beyond_last_tier(self):
        assert step_lookup(3.0, ((1.0, "a"),), "z") == "z"


class TestDiscountedPrice:
    def test_percentage_off(self):
        assert discounted_price(30.0, 10) == 27.0

    def test_rounds_to_cents(self):
        assert discounted_price(33.33, 15) == 28.33

    def test_missing_discount_is_full_price(self):
        assert discounted_price(30.0, None) == 30.0

    def test_full_discount(self):
        assert discounted_price(30.0, 100) == 0.0
