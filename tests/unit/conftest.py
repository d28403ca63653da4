"""Unit test configuration.

Shared fixtures build the seeded demo marketplace and screen contexts on
top of the in-memory adapters. No test touches the network.
"""

from typing import Callable, Optional

import pytest

from homeplate.application.fetchers.joins import JoinStrategy
from homeplate.application.session.session_store import SessionStore
from homeplate.domain.session.identity import Identity
from homeplate.infrastructure.in_memory import demo
from homeplate.infrastructure.in_memory.auth_provider import (
    InMemoryAuthProvider,
    issue_session,
)
from homeplate.infrastructure.in_memory.data_service import InMemoryDataService
from homeplate.screens.base import RouteRecorder, ScreenContext, ToastQueue


def _provider(identity: Optional[Identity] = None) -> InMemoryAuthProvider:
    provider = InMemoryAuthProvider(session=issue_session(identity) if identity else None)
    for account in (demo.ADMIN, demo.CHEF, demo.CUSTOMER):
        provider.register(account.email or "", demo.DEMO_PASSWORD, account)
    return provider


@pytest.fixture
def make_provider() -> Callable[..., InMemoryAuthProvider]:
    """Fixture building a provider that knows the demo accounts, optionally signed in."""
    return _provider


@pytest.fixture
def data() -> InMemoryDataService:
    """Fixture providing the seeded demo marketplace."""
    service, _ = demo.build_demo()
    return service


@pytest.fixture
def make_context(data: InMemoryDataService) -> Callable[..., ScreenContext]:
    """Fixture building a ScreenContext signed in as ``identity`` (anonymous when None)."""

    def build(
        identity: Optional[Identity] = None,
        strategy: JoinStrategy = JoinStrategy.BATCH,
    ) -> ScreenContext:
        return ScreenContext(
            data,
            SessionStore(_provider(identity)),
            notifier=ToastQueue(),
            navigator=RouteRecorder(),
            strategy=strategy,
        )

    return build
