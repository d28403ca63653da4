"""Navigation bar: links by role, user initials, sign-out."""

from typing import List, Optional, Tuple

from homeplate.application.auth.role_resolver import navigation_role
from homeplate.application.session.session_store import Subscription
from homeplate.domain.session.identity import AuthEvent, Identity
from homeplate.domain.session.roles import EffectiveRole
from homeplate.domain.shared.errors import HomePlateError
from homeplate.screens.base import Screen

Link = Tuple[str, str]


def links_for(role: EffectiveRole) -> List[Link]:
    links: List[Link] = [("Browse Meals", "/meals"), ("Chefs", "/chefs")]
    if role == EffectiveRole.CHEF:
        links.append(("My Kitchen", "/partner"))
    elif role == EffectiveRole.CUSTOMER:
        links.append(("My Orders", "/orders"))
        links.append(("Subscriptions", "/subscriptions"))
    else:
        links.append(("Sign In", "/login"))
    return links


class NavbarScreen(Screen):
    """
    Follows the session store for as long as it is mounted.

    Navigation uses the role claim only; admin links are never derived
    from it.
    """

    def __init__(self, context) -> None:
        super().__init__(context)
        self.nav_role = EffectiveRole.ANONYMOUS
        self.links: List[Link] = links_for(EffectiveRole.ANONYMOUS)
        self.initials = ""
        self._subscription: Optional[Subscription] = None

    def on_mount(self) -> None:
        self._subscription = self.ctx.session.subscribe(self._on_session_change)

    def on_unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def load(self) -> None:
        self._apply(self.ctx.session.identity)

    async def sign_out(self) -> None:
        try:
            await self.ctx.session.sign_out()
        except HomePlateError:
            self.error("Failed to log out")
            return
        self.success("Logged out successfully")
        self.navigate("/")

    def _on_session_change(self, event: AuthEvent, identity: Optional[Identity]) -> None:
        self._apply(identity)

    def _apply(self, identity: Optional[Identity]) -> None:
        role = navigation_role(identity)
        self.set_state(
            identity=identity,
            nav_role=role,
            links=links_for(role),
            initials=identity.initials if identity else "",
        )
