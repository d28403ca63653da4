"""Review row."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from homeplate.domain.marketplace.base import RemoteRow, ensure_utc


class Review(RemoteRow):
    """``reviews`` row; one per delivered order, written by its customer."""

    id: Optional[str] = None
    order_id: str
    customer_id: str
    chef_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)
