"""Configuration utilities for infrastructure layer.

Values come from the environment. Entry points call ``load_environment()``
first so that a local ``.env`` file is honoured.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_environment(env_file: Optional[Path] = None) -> bool:
    """
    Load a ``.env`` file into the environment (existing variables win).

    Returns:
        True if a file was found and loaded
    """
    if env_file is not None:
        return load_dotenv(env_file)
    return load_dotenv()


def get_backend() -> str:
    """
    Get adapter backend name.

    Returns:
        HOMEPLATE_BACKEND lower-cased, defaults to "inmemory"
    """
    return os.getenv("HOMEPLATE_BACKEND", "inmemory").strip().lower()


def get_supabase_url() -> Optional[str]:
    """Project URL, e.g. https://abcd.supabase.co (trailing slash removed)."""
    url = os.getenv("SUPABASE_URL")
    if not url:
        return None
    return url.rstrip("/")


def get_supabase_anon_key() -> Optional[str]:
    """Public (anon) API key sent as ``apikey`` header."""
    return os.getenv("SUPABASE_ANON_KEY") or None


def _get_seconds(name: str, default: str) -> float:
    value = os.getenv(name, default)
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid {name} value: {value}. Expected a number of seconds") from None


def get_http_timeout() -> float:
    """HTTP timeout in seconds for remote calls (default 10).

    Raises:
        ValueError: HOMEPLATE_HTTP_TIMEOUT_S is not a number
    """
    return _get_seconds("HOMEPLATE_HTTP_TIMEOUT_S", "10")


def get_session_check_timeout() -> float:
    """Upper bound in seconds for the startup session check (default 5).

    Raises:
        ValueError: HOMEPLATE_SESSION_CHECK_TIMEOUT_S is not a number
    """
    return _get_seconds("HOMEPLATE_SESSION_CHECK_TIMEOUT_S", "5")


def get_join_strategy() -> str:
    """Client-side join strategy: "batch" (default) or "per_row"."""
    return os.getenv("HOMEPLATE_JOIN_STRATEGY", "batch").strip().lower()


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
