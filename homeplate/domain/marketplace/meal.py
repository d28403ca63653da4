"""Meal row."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from homeplate.domain.marketplace.base import RemoteRow, ensure_utc


class Meal(RemoteRow):
    """
    ``meals`` row.

    ``chef_id`` is the owning chef's **user id**, the same value used by
    orders, reviews and subscriptions.

    Example:
        >>> meal = Meal.from_row({
        ...     "id": "m1", "chef_id": "u1", "title": "Dal Tadka",
        ...     "price": 120, "category": "curry",
        ... })
        >>> meal.available
        True
    """

    id: str
    chef_id: str
    title: str
    description: str = ""
    price: float = Field(..., ge=0)
    category: str = ""
    available: bool = True
    image_url: Optional[str] = None
    spice_levels: List[str] = Field(default_factory=list)
    oil_options: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("spice_levels", "oil_options", mode="before")
    @classmethod
    def null_list(cls, v: Optional[List[str]]) -> List[str]:
        return list(v or [])

    @field_validator("created_at")
    @classmethod
    def utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def matches(self, search: str) -> bool:
        """Case-insensitive match on title, description or category."""
        needle = search.strip().lower()
        if not needle:
            return True
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or needle in self.category.lower()
        )
