"""Supabase authentication provider implementation."""

from typing import Any, List, Optional

import httpx
import structlog
from supabase import AsyncClient, AsyncClientOptions, AuthApiError, AuthError

from homeplate.domain.session.identity import AuthEvent, AuthSession
from homeplate.domain.shared.errors import AuthorizationError
from homeplate.domain.shared.ports.auth_provider import AuthStateCallback
from homeplate.infrastructure.supabase.errors import auth_error, network_error

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
KNOWN_EVENTS = {event.value: event for event in AuthEvent}


def to_auth_session(session: Any) -> Optional[AuthSession]:
    """Domain session from the auth client's session model."""
    if session is None:
        return None
    return AuthSession.from_token_payload(session.model_dump())


class SupabaseAuthProvider:
    """Authentication provider over the supabase auth client.

    The auth client keeps the session and refreshes an expired access
    token inside ``get_session``. Its auth-state notifications are relayed
    to registered callbacks as domain events.

    Examples:
        >>> provider = SupabaseAuthProvider(url, anon_key)
        >>> session = await provider.sign_in_with_password("asha@example.com", "secret")
        >>> session.identity.role_claim
        'chef'
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 10.0,
        auth_client: Optional[Any] = None,
    ):
        """Initialize provider.

        Args:
            url: Project URL
            anon_key: Public API key
            timeout: Request timeout in seconds
            auth_client: Prebuilt auth client (tests)
        """
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout
        self._callbacks: List[AuthStateCallback] = []
        self._auth_client: Optional[Any] = None
        if auth_client is not None:
            self._attach(auth_client)

    def on_auth_state_change(self, callback: AuthStateCallback):
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def get_session(self) -> Optional[AuthSession]:
        """Return the current session, refreshing an expired one.

        Raises:
            NetworkError: Provider unreachable
        """
        try:
            session = await self._auth().get_session()
        except AuthError as e:
            raise auth_error(e) from e
        except httpx.TransportError as e:
            raise network_error(e, "auth") from e
        return to_auth_session(session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Sign in; the auth client emits SIGNED_IN.

        Raises:
            AuthorizationError: Invalid credentials
            NetworkError: Provider unreachable
        """
        try:
            response = await self._auth().sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as e:
            if e.status == 400:
                logger.info("Sign-in rejected", email=email)
                raise AuthorizationError(INVALID_CREDENTIALS, redirect_to="/login") from e
            raise auth_error(e) from e
        except AuthError as e:
            raise auth_error(e) from e
        except httpx.TransportError as e:
            raise network_error(e, "auth") from e

        session = to_auth_session(response.session)
        if session is None:
            raise AuthorizationError(INVALID_CREDENTIALS, redirect_to="/login")
        logger.info("Signed in", user_id=session.identity.id)
        return session

    async def sign_out(self) -> None:
        """Revoke the session; the auth client emits SIGNED_OUT.

        A rejected remote revocation is ignored by the auth client; only
        transport failures surface.

        Raises:
            NetworkError: Provider unreachable
        """
        try:
            await self._auth().sign_out()
        except AuthError as e:
            raise auth_error(e) from e
        except httpx.TransportError as e:
            raise network_error(e, "auth") from e

    def _auth(self) -> Any:
        if self._auth_client is None:
            client = AsyncClient(
                self._url,
                self._anon_key,
                options=AsyncClientOptions(
                    auto_refresh_token=False,
                    postgrest_client_timeout=self._timeout,
                ),
            )
            self._attach(client.auth)
        return self._auth_client

    def _attach(self, auth_client: Any) -> None:
        self._auth_client = auth_client
        auth_client.on_auth_state_change(self._relay)

    def _relay(self, event: str, session: Any) -> None:
        domain_event = KNOWN_EVENTS.get(str(event))
        if domain_event is None:
            logger.debug("Auth event ignored", auth_event=str(event))
            return

        auth_session = None if domain_event == AuthEvent.SIGNED_OUT else to_auth_session(session)
        for callback in list(self._callbacks):
            try:
                callback(domain_event, auth_session)
            except Exception as e:
                logger.error(
                    "Auth state callback failed",
                    auth_event=domain_event.value,
                    error=str(e),
                    exc_info=True,
                )
