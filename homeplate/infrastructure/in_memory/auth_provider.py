"""In-memory authentication provider for tests and demo mode."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4

import jwt

from homeplate.domain.session.identity import AuthEvent, AuthSession, Identity, token_expiry
from homeplate.domain.shared.errors import AuthorizationError, NetworkError
from homeplate.domain.shared.ports.auth_provider import AuthStateCallback

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(hours=1)
_SIGNING_KEY = "in-memory-provider"


@dataclass(frozen=True)
class Account:
    """Registered credentials."""

    email: str
    password: str
    identity: Identity


def issue_session(identity: Identity, ttl: timedelta = TOKEN_TTL) -> AuthSession:
    """Mint a session with an HS256 access token expiring after ``ttl``."""
    expires = datetime.now(timezone.utc) + ttl
    token = jwt.encode(
        {"sub": identity.id, "email": identity.email, "exp": int(expires.timestamp())},
        _SIGNING_KEY,
        algorithm="HS256",
    )
    return AuthSession(
        access_token=token,
        identity=identity,
        refresh_token=str(uuid4()),
        expires_at=token_expiry(token),
    )


class InMemoryAuthProvider:
    """
    In-memory implementation of IAuthProvider.

    Test hooks:
    - ``unreachable = True`` makes every remote-style call raise NetworkError
    - ``emit(event, session)`` simulates provider events (e.g. token refresh)

    Example:
        >>> provider = InMemoryAuthProvider()
        >>> provider.register("asha@example.com", "secret", Identity(id="u1", role_claim="chef"))
        >>> session = await provider.sign_in_with_password("asha@example.com", "secret")
    """

    def __init__(self, session: Optional[AuthSession] = None) -> None:
        self._accounts: Dict[str, Account] = {}
        self._session = session
        self._callbacks: List[AuthStateCallback] = []
        self.unreachable = False

    @property
    def listener_count(self) -> int:
        return len(self._callbacks)

    def register(self, email: str, password: str, identity: Identity) -> None:
        self._accounts[email.lower()] = Account(email=email, password=password, identity=identity)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def get_session(self) -> Optional[AuthSession]:
        self._check_reachable()
        return self._session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        self._check_reachable()
        account = self._accounts.get(email.lower())
        if account is None or account.password != password:
            logger.info("Sign-in rejected", extra={"email": email})
            raise AuthorizationError("Invalid email or password", redirect_to="/login")

        self._session = issue_session(account.identity)
        self.emit(AuthEvent.SIGNED_IN, self._session)
        return self._session

    async def sign_out(self) -> None:
        self._session = None
        self.emit(AuthEvent.SIGNED_OUT, None)

    def emit(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        """Deliver ``event`` to every registered callback."""
        if event != AuthEvent.SIGNED_OUT:
            self._session = session
        for callback in list(self._callbacks):
            try:
                callback(event, session)
            except Exception as e:
                logger.error(
                    "Auth state callback failed",
                    extra={"event": event.value, "error": str(e)},
                    exc_info=True,
                )

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise NetworkError("Auth provider unreachable")
