"""
Domain exceptions.

Typed exceptions for explicit error handling.
Screens catch HomePlateError at the interaction boundary and turn it into
a redirect (authorization) or a transient notice (everything else).
"""

from __future__ import annotations

from typing import Dict, Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class HomePlateError(Exception):
    """
    Base exception for all HomePlate errors.

    Allows catching every failure of the view-model layer with a single
    except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# AUTHORIZATION
# ═══════════════════════════════════════════════════════════


class AuthorizationError(HomePlateError):
    """
    No session, or the session lacks the role a screen requires.

    Example:
        >>> raise AuthorizationError("You don't have admin access")
    """

    def __init__(self, message: str, redirect_to: str = "/"):
        self.redirect_to = redirect_to
        super().__init__(message)


# ═══════════════════════════════════════════════════════════
# NOT FOUND
# ═══════════════════════════════════════════════════════════


class EntityNotFoundError(HomePlateError):
    """
    Requested entity id is absent.

    Example:
        >>> raise EntityNotFoundError("meals", "abc123")
    """

    def __init__(self, entity: str, identifier: Optional[str] = None):
        self.entity = entity
        self.identifier = identifier
        if identifier is None:
            super().__init__(f"No {entity} row matched the query")
        else:
            super().__init__(f"{entity} not found: {identifier}")


# ═══════════════════════════════════════════════════════════
# REMOTE SERVICE
# ═══════════════════════════════════════════════════════════


class RemoteServiceError(HomePlateError):
    """
    Remote call could not complete.

    Base class for failures reported by (or on the way to) the managed
    backend. Never retried automatically.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NetworkError(RemoteServiceError):
    """
    Transport failure: connection refused, DNS, timeout.

    Example:
        >>> raise NetworkError("connection reset while reading meals")
    """

    pass


class PermissionDeniedError(RemoteServiceError):
    """
    Backend refused the call for the current credentials (HTTP 401/403).

    Typically a row-level security policy rejecting a read or a write.
    """

    pass


class RejectedWriteError(RemoteServiceError):
    """
    Backend refused a write (HTTP 400/409/422).

    Example:
        >>> raise RejectedWriteError("duplicate key value", status_code=409)
    """

    pass


# ═══════════════════════════════════════════════════════════
# CLIENT-SIDE VALIDATION
# ═══════════════════════════════════════════════════════════


class ValidationError(HomePlateError):
    """
    Malformed input caught client-side before a write is attempted.

    Attributes:
        errors: Field name -> human readable message

    Example:
        >>> raise ValidationError("Please fill in all fields", {"email": "required"})
    """

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        self.errors: Dict[str, str] = dict(errors or {})
        super().__init__(message)


class InvalidTransitionError(ValidationError):
    """Order status change not allowed from the current status or for the actor."""

    def __init__(self, current: str, target: str, actor: str):
        self.current = current
        self.target = target
        self.actor = actor
        super().__init__(
            f"Cannot move order from {current} to {target} as {actor}",
            {"status": f"{current} -> {target} not allowed for {actor}"},
        )
