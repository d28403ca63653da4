"""Roles, role assignments and screen access decisions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class Role(str, Enum):
    """Authoritative roles stored in ``user_roles``."""

    ADMIN = "admin"
    CHEF = "chef"
    CUSTOMER = "customer"


class EffectiveRole(str, Enum):
    """Role used to shape navigation for the current session."""

    ANONYMOUS = "anonymous"
    CUSTOMER = "customer"
    CHEF = "chef"
    ADMIN = "admin"


class ScreenAccess(str, Enum):
    """Access level a screen requires."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    CHEF = "chef"
    ADMIN = "admin"


@dataclass(frozen=True)
class RoleAssignment:
    """A ``user_roles`` row granting ``role`` to ``user_id``."""

    user_id: str
    role: Role

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RoleAssignment":
        return cls(user_id=str(row["user_id"]), role=Role(row["role"]))


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of gating a screen.

    Attributes:
        granted: Whether the screen may render
        effective_role: Role the session was resolved to
        redirect_to: Where to send the user when not granted
        notice: Message to surface when not granted
    """

    granted: bool
    effective_role: EffectiveRole
    redirect_to: Optional[str] = None
    notice: Optional[str] = None

    @classmethod
    def allow(cls, role: EffectiveRole) -> "AccessDecision":
        return cls(granted=True, effective_role=role)

    @classmethod
    def deny(
        cls, role: EffectiveRole, redirect_to: str, notice: Optional[str] = None
    ) -> "AccessDecision":
        return cls(granted=False, effective_role=role, redirect_to=redirect_to, notice=notice)
