"""Adapter factory for environment-based selection.

This factory creates the data service and auth provider based on the
HOMEPLATE_BACKEND environment variable:
- "inmemory": seeded demo adapters (for testing and demos)
- "supabase": supabase client adapters (for production)

Default: inmemory
"""

from typing import Optional

from homeplate.application.fetchers.joins import JoinStrategy
from homeplate.domain.shared.ports.auth_provider import IAuthProvider
from homeplate.domain.shared.ports.data_service import IDataService
from homeplate.infrastructure import config
from homeplate.infrastructure.in_memory.demo import build_demo
from homeplate.infrastructure.supabase.auth import SupabaseAuthProvider
from homeplate.infrastructure.supabase.client import SupabaseDataService


def _supabase_settings() -> tuple:
    url = config.get_supabase_url()
    key = config.get_supabase_anon_key()
    if not url or not key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_ANON_KEY environment variables are required "
            "when HOMEPLATE_BACKEND=supabase"
        )
    return url, key


def _check_backend(backend: str) -> None:
    if backend not in ("inmemory", "supabase"):
        raise ValueError(
            f"Invalid HOMEPLATE_BACKEND value: {backend}. "
            "Expected 'inmemory' or 'supabase'"
        )


def create_data_service() -> IDataService:
    """Create data service based on environment configuration.

    Returns:
        IDataService: The configured implementation

    Environment Variables:
        HOMEPLATE_BACKEND: "inmemory" | "supabase" (default: inmemory)
        SUPABASE_URL, SUPABASE_ANON_KEY: required for supabase
        HOMEPLATE_HTTP_TIMEOUT_S: request timeout (default: 10)
    """
    backend = config.get_backend()
    _check_backend(backend)

    if backend == "supabase":
        url, key = _supabase_settings()
        return SupabaseDataService(url, key, timeout=config.get_http_timeout())

    data, _ = build_demo()
    return data


def create_auth_provider() -> IAuthProvider:
    """Create auth provider based on environment configuration.

    Returns:
        IAuthProvider: The configured implementation
    """
    backend = config.get_backend()
    _check_backend(backend)

    if backend == "supabase":
        url, key = _supabase_settings()
        return SupabaseAuthProvider(url, key, timeout=config.get_http_timeout())

    _, auth = build_demo()
    return auth


def create_join_strategy() -> JoinStrategy:
    """Join strategy from HOMEPLATE_JOIN_STRATEGY (default: batch)."""
    value = config.get_join_strategy()
    try:
        return JoinStrategy(value)
    except ValueError:
        raise ValueError(
            f"Invalid HOMEPLATE_JOIN_STRATEGY value: {value}. "
            "Expected 'batch' or 'per_row'"
        ) from None


def connect_access_token(auth_provider: IAuthProvider, data_service: IDataService) -> None:
    """Forward the signed-in user's access token to a data service that accepts one."""
    set_token = getattr(data_service, "set_access_token", None)
    if set_token is None:
        return
    auth_provider.on_auth_state_change(
        lambda event, session: set_token(session.access_token if session else None)
    )


# Singleton instances
_data_service: Optional[IDataService] = None
_auth_provider: Optional[IAuthProvider] = None


def get_data_service() -> IDataService:
    """Get singleton data service instance."""
    global _data_service

    if _data_service is None:
        _data_service = create_data_service()
        if _auth_provider is not None:
            connect_access_token(_auth_provider, _data_service)

    return _data_service


def get_auth_provider() -> IAuthProvider:
    """Get singleton auth provider instance."""
    global _auth_provider

    if _auth_provider is None:
        _auth_provider = create_auth_provider()
        if _data_service is not None:
            connect_access_token(_auth_provider, _data_service)

    return _auth_provider


def reset_data_service() -> None:
    """Reset the singleton (for testing purposes)."""
    global _data_service
    _data_service = None


def reset_auth_provider() -> None:
    """Reset the singleton (for testing purposes)."""
    global _auth_provider
    _auth_provider = None
