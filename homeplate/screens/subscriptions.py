"""Customer subscriptions (tiffin plans)."""

from typing import List

from homeplate.domain.marketplace.listings import SubscriptionView
from homeplate.domain.session.roles import ScreenAccess
from homeplate.screens.base import Screen


class SubscriptionsScreen(Screen):
    ACCESS = ScreenAccess.AUTHENTICATED
    PATH = "/subscriptions"
    LOAD_ERROR = "Failed to load subscriptions"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.subscriptions: List[SubscriptionView] = []

    async def load(self) -> None:
        customer = self.current_identity()
        self.set_state(
            subscriptions=await self.ctx.subscriptions.list_for_customer(customer.id)
        )
