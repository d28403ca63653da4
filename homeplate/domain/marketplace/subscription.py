"""Subscription row."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from homeplate.domain.marketplace.base import RemoteRow, ensure_utc


class Subscription(RemoteRow):
    """
    ``subscriptions`` row (tiffin plan).

    ``chef_id`` is the chef's user id. ``meals_remaining`` is decremented by
    the backend as meals are delivered.
    """

    id: str
    customer_id: str
    chef_id: str
    plan_type: str
    meals_count: int = Field(..., ge=0)
    meals_remaining: int = Field(..., ge=0)
    price_per_meal: float = Field(..., ge=0)
    total_price: float = Field(0.0, ge=0)
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def meals_used(self) -> int:
        return max(self.meals_count - self.meals_remaining, 0)
