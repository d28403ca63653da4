"""Admin dashboard: platform counters, chef moderation, delivery assignment."""

from typing import List, Optional

from homeplate.application.dashboards.admin_stats import (
    AdminStats,
    GetAdminStatsQuery,
    GetAdminStatsQueryHandler,
)
from homeplate.domain.marketplace.chef import VerificationStatus
from homeplate.domain.marketplace.forms import DeliveryAssignmentForm
from homeplate.domain.marketplace.listings import ChefCard, OrderView
from homeplate.domain.session.roles import ScreenAccess
from homeplate.domain.shared.errors import EntityNotFoundError
from homeplate.screens.base import Screen


class AdminScreen(Screen):
    """
    Admin dashboard.

    Access always goes through the authoritative ``user_roles`` lookup;
    a failed lookup denies access.
    """

    ACCESS = ScreenAccess.ADMIN
    PATH = "/admin"
    LOAD_ERROR = "Failed to load admin dashboard"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.stats: Optional[AdminStats] = None
        self.chefs: List[ChefCard] = []
        self.orders: List[OrderView] = []
        self._stats = GetAdminStatsQueryHandler(context.data_service)

    async def load(self) -> None:
        stats = await self._stats.handle(GetAdminStatsQuery())
        if not self.set_state(stats=stats):
            return
        chefs = await self.ctx.chefs.list_all()
        orders = await self.ctx.orders.list_all()
        self.set_state(chefs=chefs, orders=orders)

    async def set_chef_status(self, chef_id: str, status: VerificationStatus) -> bool:
        return await self.mutate(
            self.ctx.chefs.set_verification_status(chef_id, status),
            success=f"Chef {status.value}",
            failure="Failed to update status",
        )

    async def toggle_featured(self, chef_id: str) -> bool:
        card = next((c for c in self.chefs if c.chef.id == chef_id), None)
        if card is None:
            self.error("Failed to update")
            return False
        featured = card.chef.is_featured
        return await self.mutate(
            self.ctx.chefs.set_featured(chef_id, not featured),
            success="Removed from featured" if featured else "Added to featured",
            failure="Failed to update",
        )

    async def assign_delivery(self, order_id: str, delivery_partner_id: str) -> bool:
        values = {"delivery_partner_id": delivery_partner_id}
        if not DeliveryAssignmentForm.is_submittable(values):
            self.error("Please enter a delivery partner ID")
            return False

        async def assign() -> None:
            view = next((v for v in self.orders if v.order.id == order_id), None)
            if view is None:
                raise EntityNotFoundError("orders", order_id)
            await self.ctx.orders.assign_delivery(view.order, DeliveryAssignmentForm.parse(values))

        return await self.mutate(
            assign(),
            success="Delivery partner assigned",
            failure="Failed to assign delivery",
        )
