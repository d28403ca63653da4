"""Login screen."""

import logging

from homeplate.domain.marketplace.forms import LoginForm
from homeplate.domain.shared.errors import (
    AuthorizationError,
    HomePlateError,
    ValidationError,
)
from homeplate.screens.base import Screen

logger = logging.getLogger(__name__)


class LoginScreen(Screen):
    """Email/password sign-in; returns to the remembered path afterwards."""

    PATH = "/login"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.email = ""
        self.password = ""
        self.submitting = False

    @property
    def can_submit(self) -> bool:
        return not self.submitting and LoginForm.is_submittable(
            {"email": self.email, "password": self.password}
        )

    async def submit(self) -> bool:
        try:
            form = LoginForm.parse({"email": self.email, "password": self.password})
        except ValidationError as e:
            self.error(str(e))
            return False

        self.submitting = True
        try:
            await self.ctx.session.sign_in(form.email, form.password)
        except AuthorizationError:
            self.error("Invalid email or password")
            return False
        except HomePlateError as e:
            logger.warning("Sign-in failed", extra={"error": str(e)})
            self.error("An unexpected error occurred")
            return False
        finally:
            self.submitting = False

        self.success("Welcome back!")
        self.navigate(self.ctx.redirects.consume() or "/")
        return True
