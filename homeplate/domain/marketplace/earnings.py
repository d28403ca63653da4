"""Platform commission and earnings summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

# Share of an order's gross revenue paid to the chef; the rest is the
# platform fee.
CHEF_SHARE = 0.85
PLATFORM_SHARE = 1 - CHEF_SHARE


def chef_earnings(revenue: float) -> float:
    """Chef's cut of ``revenue``."""
    return revenue * CHEF_SHARE


@dataclass(frozen=True)
class EarningsGroup:
    """
    Earnings for one calendar day.

    Attributes:
        date: Local calendar date of the orders
        orders: Number of delivered orders that day
        revenue: Gross order value
        earnings: Chef's share of the revenue
    """

    date: date
    orders: int
    revenue: float
    earnings: float


@dataclass(frozen=True)
class EarningsReport:
    """
    Chef earnings summary.

    Attributes:
        groups: Per-day groups, newest date first
        total_orders: Delivered orders counted
        total_revenue: Gross value of those orders
        total_earnings: Chef's share of total_revenue
    """

    groups: Tuple[EarningsGroup, ...]
    total_orders: int
    total_revenue: float
    total_earnings: float

    @property
    def average_per_order(self) -> float:
        if self.total_orders == 0:
            return 0.0
        return self.total_earnings / self.total_orders

    @classmethod
    def empty(cls) -> "EarningsReport":
        return cls(groups=(), total_orders=0, total_revenue=0.0, total_earnings=0.0)
