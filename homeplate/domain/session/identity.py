"""Identity and session value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import jwt


class AuthEvent(str, Enum):
    """Auth-state change events emitted by the provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class Identity:
    """Authenticated principal behind the current session.

    ``role_claim`` is the denormalized role stored in the user's metadata.
    It is good enough for navigation, never for security decisions.

    Examples:
        >>> identity = Identity.from_user_payload({
        ...     "id": "u1",
        ...     "email": "asha@example.com",
        ...     "user_metadata": {"name": "Asha", "role": "chef"},
        ... })
        >>> identity.role_claim
        'chef'
    """

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role_claim: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Identity id cannot be empty")

    @classmethod
    def from_user_payload(cls, payload: Mapping[str, Any]) -> "Identity":
        """Build an Identity from an auth provider user object."""
        metadata: Mapping[str, Any] = payload.get("user_metadata") or {}
        role = metadata.get("role")
        return cls(
            id=str(payload["id"]),
            email=payload.get("email"),
            display_name=metadata.get("name"),
            role_claim=str(role).lower() if role else None,
        )

    @property
    def initials(self) -> str:
        """Up to two upper-case initials from the name (or email)."""
        source = self.display_name or self.email or ""
        return "".join(part[0] for part in source.split() if part).upper()[:2]


@dataclass(frozen=True)
class AuthSession:
    """Tokens plus the identity they belong to."""

    access_token: str
    identity: Identity
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_token_payload(cls, payload: Mapping[str, Any]) -> "AuthSession":
        """Build a session from a token endpoint response.

        ``expires_at`` falls back to the access token's ``exp`` claim when
        the response does not carry it.
        """
        access_token = payload["access_token"]
        expires_at: Optional[datetime] = None
        if payload.get("expires_at") is not None:
            expires_at = datetime.fromtimestamp(int(payload["expires_at"]), tz=timezone.utc)
        else:
            expires_at = token_expiry(access_token)

        return cls(
            access_token=access_token,
            identity=Identity.from_user_payload(payload["user"]),
            refresh_token=payload.get("refresh_token"),
            expires_at=expires_at,
            raw=dict(payload),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when the access token is past its expiry."""
        if self.expires_at is None:
            return False
        current = now or datetime.now(timezone.utc)
        return current >= self.expires_at


def token_expiry(access_token: str) -> Optional[datetime]:
    """Read the ``exp`` claim of a JWT without verifying its signature.

    The signature is the backend's business; the client only needs to know
    when to refresh. Returns None for tokens that cannot be decoded.
    """
    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)
