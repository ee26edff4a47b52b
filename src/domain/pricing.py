"""
Delivery fee and shelf-price calculations.

Fee tiers (distance in km, upper bound inclusive)
-------------------------------------------------
  <= 2   ->  2.00
  <= 5   ->  3.50
  <= 10  ->  5.00
  <= 20  ->  7.50
  beyond -> 10.00

Complexity: O(number of tiers) per lookup.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

DELIVERY_FEE_TIERS: tuple[tuple[float, float], ...] = (
    (2.0, 2.00),
    (5.0, 3.50),
    (10.0, 5.00),
    (20.0, 7.50),
)
MAX_DELIVERY_FEE = 10.00


def step_lookup(value: float, tiers: Sequence[tuple[float, T]], default: T) -> T:
    """Return the payload of the first tier whose bound is >= *value*."""
    for upper_bound, payload in tiers:
        if value <= upper_bound:
            return payload
    return default


def delivery_fee(distance_km: float) -> float:
    return step_lookup(distance_km, DELIVERY_FEE_TIERS, MAX_DELIVERY_FEE)


def discounted_price(price: float, discount_percentage: float | None) -> float:
    """Shelf price after an inventory discount, rounded to cents."""
    discount = discount_percentage or 0.0
    return round(price - price * discount / 100, 2)
