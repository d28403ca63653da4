"""Mapping of Supabase client failures onto the domain error taxonomy."""

import httpx
import structlog
from supabase import AuthApiError, AuthError, PostgrestAPIError

from homeplate.domain.shared.errors import (
    NetworkError,
    PermissionDeniedError,
    RejectedWriteError,
    RemoteServiceError,
)

logger = structlog.get_logger(__name__)

# insufficient_privilege (row-level security), JWT invalid/expired, anonymous access disabled
PERMISSION_CODES = frozenset({"42501", "PGRST301", "PGRST302"})
# Integrity and data exceptions, malformed body, unknown column
WRITE_REJECTED_PREFIXES = ("23", "22")
WRITE_REJECTED_CODES = frozenset({"PGRST102", "PGRST204"})


def query_error(exc: PostgrestAPIError, table: str, *, write: bool = False) -> RemoteServiceError:
    """
    Domain error for a PostgREST error response.

    Returns:
        PermissionDeniedError for privilege and token codes,
        RejectedWriteError for constraint and data errors on a write,
        RemoteServiceError otherwise
    """
    code = str(exc.code or "")
    message = exc.message or f"Request to {table} failed"
    logger.warning("Remote query failed", table=table, code=code, error=message)

    if code in PERMISSION_CODES:
        return PermissionDeniedError(message, status_code=403)
    if write and (code.startswith(WRITE_REJECTED_PREFIXES) or code in WRITE_REJECTED_CODES):
        return RejectedWriteError(message)
    return RemoteServiceError(message)


def auth_error(exc: AuthError) -> RemoteServiceError:
    """Domain error for an auth client failure other than bad credentials."""
    if isinstance(exc, AuthApiError):
        status = exc.status
        logger.warning("Auth call rejected", status=status, error=exc.message)
        if status in (401, 403):
            return PermissionDeniedError(exc.message, status_code=status)
        return RemoteServiceError(exc.message, status_code=status)

    # Retryable and unknown auth errors come from the transport
    logger.warning("Auth provider unreachable", error=str(exc))
    return NetworkError(f"Auth provider unreachable: {exc}")


def network_error(exc: httpx.TransportError, what: str) -> NetworkError:
    """Wrap a transport failure (connection, DNS, timeout)."""
    kind = "timed out" if isinstance(exc, httpx.TimeoutException) else "failed"
    logger.warning("Remote call unreachable", target=what, error=str(exc))
    return NetworkError(f"Request to {what} {kind}: {exc}")
