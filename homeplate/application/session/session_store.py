"""Session store.

Holds the current Identity and keeps it in sync with the auth provider's
state-change events. It is the only process-wide mutable state of the
view-model layer: fetchers and aggregators only read it, and only auth
events mutate it.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from homeplate.domain.session.identity import AuthEvent, AuthSession, Identity
from homeplate.domain.shared.errors import RemoteServiceError
from homeplate.domain.shared.ports.auth_provider import IAuthProvider

logger = logging.getLogger(__name__)

IdentityCallback = Callable[[AuthEvent, Optional[Identity]], None]

DEFAULT_SESSION_CHECK_TIMEOUT_S = 5.0


class Subscription:
    """
    Handle returned by SessionStore.subscribe.

    Consumers must call ``unsubscribe()`` on teardown. Calling it more than
    once is harmless.
    """

    def __init__(self, store: "SessionStore", callback: IdentityCallback) -> None:
        self._store = store
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._remove(self._callback)


class SessionStore:
    """
    Cached identity snapshot plus change notifications.

    Example:
        >>> store = SessionStore(provider)
        >>> identity = await store.get_current_identity()
        >>> subscription = store.subscribe(lambda event, identity: ...)
        >>> subscription.unsubscribe()
    """

    def __init__(
        self,
        provider: IAuthProvider,
        session_check_timeout_s: float = DEFAULT_SESSION_CHECK_TIMEOUT_S,
    ) -> None:
        self._provider = provider
        self._timeout = session_check_timeout_s
        self._session: Optional[AuthSession] = None
        self._subscribers: List[IdentityCallback] = []
        self._unregister: Optional[Callable[[], None]] = None
        self._started = False
        self._event_seen = False
        self._lock = asyncio.Lock()

    @property
    def identity(self) -> Optional[Identity]:
        """Current snapshot, without contacting the provider."""
        if self._session is None:
            return None
        return self._session.identity

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def started(self) -> bool:
        return self._started

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def start(self) -> None:
        """
        Read the provider session and listen for auth-state changes.

        An unreachable provider (or one slower than the session-check
        timeout) resolves to anonymous; no error is raised.
        """
        async with self._lock:
            if self._started:
                return

            # Register first so events fired during the check are not lost
            self._event_seen = False
            self._unregister = self._provider.on_auth_state_change(self._on_auth_event)

            session: Optional[AuthSession] = None
            try:
                session = await asyncio.wait_for(
                    self._provider.get_session(), timeout=self._timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Session check timed out, continuing as anonymous",
                    extra={"timeout_s": self._timeout},
                )
            except RemoteServiceError as e:
                logger.warning(
                    "Auth provider unreachable, continuing as anonymous",
                    extra={"error": str(e)},
                )

            if session is not None and session.is_expired():
                logger.info(
                    "Stored session expired",
                    extra={"user_id": session.identity.id},
                )
                session = None

            # An auth event that landed while the check was in flight wins
            if not self._event_seen:
                self._session = session
            self._started = True

            logger.debug(
                "Session store started",
                extra={"authenticated": self._session is not None},
            )

    async def get_current_identity(self) -> Optional[Identity]:
        """Return the cached identity, starting the store on first use."""
        if not self._started:
            await self.start()
        return self.identity

    def subscribe(self, on_change: IdentityCallback) -> Subscription:
        """
        Register ``on_change(event, identity)`` for sign-in, sign-out, token
        refresh and user updates.
        """
        self._subscribers.append(on_change)
        logger.debug(
            "Session subscriber added",
            extra={"subscribers": len(self._subscribers)},
        )
        return Subscription(self, on_change)

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Raises:
            AuthorizationError: Invalid credentials
            RemoteServiceError: Provider failure
        """
        session = await self._provider.sign_in_with_password(email, password)
        self._session = session
        return session.identity

    async def sign_out(self) -> None:
        await self._provider.sign_out()
        self._session = None

    def close(self) -> None:
        """Stop listening to the provider and drop every subscriber."""
        if self._unregister is not None:
            self._unregister()
            self._unregister = None
        self._subscribers.clear()
        self._started = False

    def _remove(self, callback: IdentityCallback) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            # Already dropped by close()
            pass

    def _on_auth_event(self, event: AuthEvent, session: Optional[AuthSession]) -> None:
        self._event_seen = True
        if event == AuthEvent.SIGNED_OUT:
            self._session = None
        else:
            self._session = session

        identity = self.identity
        logger.info(
            "Auth state changed",
            extra={
                "event": event.value,
                "user_id": identity.id if identity else None,
            },
        )

        for callback in list(self._subscribers):
            try:
                callback(event, identity)
            except Exception as e:
                # One failing subscriber doesn't prevent the others
                logger.error(
                    "Session subscriber failed",
                    extra={"event": event.value, "error": str(e)},
                    exc_info=True,
                )
