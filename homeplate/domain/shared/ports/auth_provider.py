"""Authentication provider port (interface)."""

from typing import Callable, Optional, Protocol

from homeplate.domain.session.identity import AuthEvent, AuthSession

AuthStateCallback = Callable[[AuthEvent, Optional[AuthSession]], None]


class IAuthProvider(Protocol):
    """Authentication provider interface.

    Abstracts the managed backend's auth service. Allows in-memory
    implementations in tests.

    Examples:
        >>> session = await provider.get_session()
        >>> unsubscribe = provider.on_auth_state_change(callback)
        >>> unsubscribe()
    """

    async def get_session(self) -> Optional[AuthSession]:
        """Return the current session, or None when signed out.

        Raises:
            NetworkError: Provider unreachable
        """
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Register ``callback`` for sign-in/sign-out/refresh events.

        Returns:
            Callable that removes the registration
        """
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Sign in and emit SIGNED_IN.

        Raises:
            AuthorizationError: Invalid credentials
            NetworkError: Provider unreachable
        """
        ...

    async def sign_out(self) -> None:
        """Terminate the session and emit SIGNED_OUT."""
        ...
