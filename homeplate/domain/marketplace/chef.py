"""Chef profile and specialty rows."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationInfo, field_validator

from homeplate.domain.marketplace.base import RemoteRow, ensure_utc


class VerificationStatus(str, Enum):
    """Admin review state of a chef profile."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Chef(RemoteRow):
    """
    ``chefs`` row.

    One chef profile per user (enforced by the backend). ``id`` is the
    profile id; ``user_id`` is the owning user and the value every other
    table uses to reference the chef.

    Example:
        >>> chef = Chef.from_row({"id": "c1", "user_id": "u1"})
        >>> chef.verification_status
        <VerificationStatus.PENDING: 'pending'>
    """

    id: str
    user_id: str
    bio: Optional[str] = None
    verification_status: VerificationStatus = VerificationStatus.PENDING
    is_featured: bool = False
    avg_rating: float = 0.0
    total_reviews: int = 0
    total_orders: int = 0
    kitchen_photo_url: Optional[str] = None
    hygiene_certificate: bool = False
    fssai_license: bool = False
    created_at: Optional[datetime] = None

    @field_validator(
        "verification_status", "is_featured", "avg_rating", "total_reviews",
        "total_orders", "hygiene_certificate", "fssai_license",
        mode="before",
    )
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Nullable backend columns fall back to the field default."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("created_at")
    @classmethod
    def utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def is_approved(self) -> bool:
        return self.verification_status == VerificationStatus.APPROVED


class ChefSpecialty(RemoteRow):
    """``chef_specialties`` row, keyed by chef profile id."""

    chef_id: str
    specialty: str
