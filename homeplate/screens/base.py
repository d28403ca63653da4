"""Screen base class, notices, navigation and the shared screen context.

A screen is a view model: ``mount()`` resolves access and either
redirects or loads its data; user actions call mutations that notify and
re-fetch. State written after ``unmount()`` is dropped, so late fetches
never touch a torn-down screen.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, ClassVar, List, Optional, Protocol

from homeplate.application.auth.role_resolver import (
    LOGIN_PATH,
    SIGN_IN_NOTICE,
    RoleResolver,
)
from homeplate.application.fetchers.chefs import ChefFetcher
from homeplate.application.fetchers.joins import JoinStrategy
from homeplate.application.fetchers.meals import MealFetcher
from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.application.fetchers.reviews import ReviewFetcher
from homeplate.application.fetchers.subscriptions import SubscriptionFetcher
from homeplate.application.session.redirect import RedirectMemory
from homeplate.application.session.session_store import SessionStore
from homeplate.domain.session.identity import Identity
from homeplate.domain.session.roles import AccessDecision, EffectiveRole, ScreenAccess
from homeplate.domain.shared.errors import (
    AuthorizationError,
    HomePlateError,
    ValidationError,
)
from homeplate.domain.shared.ports.data_service import IDataService

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════
# NOTICES AND NAVIGATION
# ═══════════════════════════════════════════════════════════


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notice:
    """Transient user-visible message (toast)."""

    level: NoticeLevel
    message: str


class INotifier(Protocol):
    def notify(self, notice: Notice) -> None:
        ...


class INavigator(Protocol):
    def navigate(self, path: str) -> None:
        ...


class ToastQueue:
    """INotifier collecting notices in order."""

    def __init__(self) -> None:
        self.notices: List[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    def messages(self, level: Optional[NoticeLevel] = None) -> List[str]:
        return [n.message for n in self.notices if level is None or n.level == level]

    @property
    def last(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None


class RouteRecorder:
    """INavigator recording redirect targets."""

    def __init__(self, initial: str = "/") -> None:
        self.history: List[str] = [initial]

    def navigate(self, path: str) -> None:
        self.history.append(path)

    @property
    def current(self) -> str:
        return self.history[-1]


# ═══════════════════════════════════════════════════════════
# CONTEXT
# ═══════════════════════════════════════════════════════════


class ScreenContext:
    """Dependencies shared by every screen.

    Attributes:
        data_service: Remote data service
        session: Session store (process-wide identity)
        notifier: Where notices go
        navigator: Where redirects go
        redirects: Post-login redirect memory
        roles: Role resolver
        meals, chefs, orders, reviews, subscriptions: Entity fetchers
    """

    def __init__(
        self,
        data_service: IDataService,
        session: SessionStore,
        notifier: Optional[INotifier] = None,
        navigator: Optional[INavigator] = None,
        redirects: Optional[RedirectMemory] = None,
        strategy: JoinStrategy = JoinStrategy.BATCH,
    ) -> None:
        self.data_service = data_service
        self.session = session
        self.notifier: INotifier = notifier or ToastQueue()
        self.navigator: INavigator = navigator or RouteRecorder()
        self.redirects = redirects or RedirectMemory()
        self.strategy = strategy
        self.roles = RoleResolver(data_service)
        self.reviews = ReviewFetcher(data_service, strategy)
        self.meals = MealFetcher(data_service, strategy)
        self.chefs = ChefFetcher(data_service, strategy, reviews=self.reviews)
        self.orders = OrderFetcher(data_service, strategy)
        self.subscriptions = SubscriptionFetcher(data_service, strategy)


# ═══════════════════════════════════════════════════════════
# SCREEN
# ═══════════════════════════════════════════════════════════


class Screen:
    """
    Base view model.

    Subclasses set ACCESS and PATH, implement ``load()`` and write state
    through ``set_state`` so that writes after unmount are dropped.
    """

    ACCESS: ClassVar[ScreenAccess] = ScreenAccess.PUBLIC
    PATH: ClassVar[str] = "/"
    LOAD_ERROR: ClassVar[str] = "Failed to load data"

    def __init__(self, context: ScreenContext) -> None:
        self.ctx = context
        self._mounted = False
        self.identity: Optional[Identity] = None
        self.decision: Optional[AccessDecision] = None
        self.loading = False

    @property
    def path(self) -> str:
        return self.PATH

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def role(self) -> EffectiveRole:
        if self.decision is None:
            return EffectiveRole.ANONYMOUS
        return self.decision.effective_role

    # ── Lifecycle ────────────────────────────────────────────

    async def mount(self) -> bool:
        """
        Resolve access, then load.

        Returns:
            True when the screen rendered, False when it redirected away
            (or was unmounted while resolving)
        """
        self._mounted = True
        self.loading = True

        identity = await self.ctx.session.get_current_identity()
        decision = await self.ctx.roles.resolve_role(identity, self.ACCESS)
        if not self._mounted:
            return False

        self.identity = identity
        self.decision = decision
        if not decision.granted:
            self.loading = False
            self._deny(decision)
            return False

        self.on_mount()
        await self.refresh()
        return self._mounted

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._mounted = False
        self.on_unmount()
        logger.debug("Screen unmounted", extra={"screen": type(self).__name__})

    async def refresh(self) -> None:
        """Re-fetch everything the screen shows. Failures leave the last-good state."""
        if not self._mounted:
            return
        self.loading = True
        try:
            await self.load()
        except AuthorizationError as e:
            self._redirect(str(e), e.redirect_to)
        except HomePlateError as e:
            logger.warning(
                "Screen load failed",
                extra={"screen": type(self).__name__, "error": str(e)},
            )
            self.on_load_error(e)
        finally:
            if self._mounted:
                self.loading = False

    # ── Hooks ────────────────────────────────────────────────

    async def load(self) -> None:
        """Fetch and apply screen state."""

    def on_mount(self) -> None:
        """Called once access is granted, before the first load."""

    def on_unmount(self) -> None:
        """Release subscriptions."""

    def on_load_error(self, error: HomePlateError) -> None:
        self.error(self.LOAD_ERROR)

    # ── State and feedback ───────────────────────────────────

    def set_state(self, **values: Any) -> bool:
        """Apply state unless the screen was unmounted meanwhile."""
        if not self._mounted:
            logger.debug(
                "Dropped state update after unmount",
                extra={"screen": type(self).__name__, "fields": sorted(values)},
            )
            return False
        for name, value in values.items():
            setattr(self, name, value)
        return True

    def success(self, message: str) -> None:
        self._notify(NoticeLevel.SUCCESS, message)

    def error(self, message: str) -> None:
        self._notify(NoticeLevel.ERROR, message)

    def info(self, message: str) -> None:
        self._notify(NoticeLevel.INFO, message)

    def navigate(self, path: str) -> None:
        if self._mounted:
            self.ctx.navigator.navigate(path)

    def current_identity(self) -> Identity:
        """Signed-in identity of a gated screen."""
        if self.identity is None:
            raise AuthorizationError(SIGN_IN_NOTICE, redirect_to=LOGIN_PATH)
        return self.identity

    def require_sign_in(self, return_to: Optional[str] = None) -> None:
        """Remember where to come back to and go to the login page."""
        self.ctx.redirects.remember(return_to or self.path)
        self.navigate(LOGIN_PATH)

    async def mutate(self, action: Awaitable[Any], success: str, failure: str) -> bool:
        """
        Run a write, notify, and re-fetch on success.

        Validation messages are shown as-is; remote failures show
        ``failure``. Nothing is retried.
        """
        try:
            await action
        except ValidationError as e:
            self.error(str(e))
            return False
        except AuthorizationError as e:
            self._redirect(str(e), e.redirect_to)
            return False
        except HomePlateError as e:
            logger.warning(
                "Screen action failed",
                extra={"screen": type(self).__name__, "error": str(e)},
            )
            self.error(failure)
            return False

        self.success(success)
        await self.refresh()
        return True

    def _notify(self, level: NoticeLevel, message: str) -> None:
        if self._mounted:
            self.ctx.notifier.notify(Notice(level, message))

    def _deny(self, decision: AccessDecision) -> None:
        if decision.redirect_to == LOGIN_PATH:
            self.ctx.redirects.remember(self.path)
        if decision.notice:
            self.error(decision.notice)
        self.navigate(decision.redirect_to or "/")
        self._mounted = False

    def _redirect(self, message: str, path: str) -> None:
        self.error(message)
        self.navigate(path)
