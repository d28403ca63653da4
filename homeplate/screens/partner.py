"""Chef (partner) dashboard: stats, dishes, orders, earnings and profile."""

import logging
from typing import Any, List, Mapping, Optional

from homeplate.application.dashboards.earnings import (
    GetChefEarningsQuery,
    GetChefEarningsQueryHandler,
)
from homeplate.application.dashboards.partner_stats import (
    GetPartnerStatsQuery,
    GetPartnerStatsQueryHandler,
    PartnerStats,
)
from homeplate.domain.marketplace.chef import Chef
from homeplate.domain.marketplace.earnings import EarningsReport
from homeplate.domain.marketplace.forms import ChefProfileForm, MealForm, SpecialtyForm
from homeplate.domain.marketplace.listings import OrderView
from homeplate.domain.marketplace.meal import Meal
from homeplate.domain.marketplace.order import Actor, OrderStatus
from homeplate.domain.session.roles import ScreenAccess
from homeplate.domain.shared.errors import EntityNotFoundError, HomePlateError
from homeplate.screens.base import Screen

logger = logging.getLogger(__name__)


class PartnerScreen(Screen):
    """
    Chef dashboard.

    Access needs a ``chef`` row in ``user_roles``; the role claim is not
    enough. A pending chef profile is created on first visit.
    """

    ACCESS = ScreenAccess.CHEF
    PATH = "/partner"
    LOAD_ERROR = "Failed to load partner dashboard"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.chef: Optional[Chef] = None
        self.stats: Optional[PartnerStats] = None
        self.dishes: List[Meal] = []
        self.orders: List[OrderView] = []
        self.earnings: EarningsReport = EarningsReport.empty()
        self.specialties: List[str] = []
        self._stats = GetPartnerStatsQueryHandler(context.data_service, context.orders)
        self._earnings = GetChefEarningsQueryHandler(context.orders)

    async def load(self) -> None:
        user_id = self.current_identity().id
        chef = await self.ctx.chefs.ensure_profile(user_id)
        if not self.set_state(chef=chef):
            return

        stats = await self._stats.handle(GetPartnerStatsQuery(chef_user_id=user_id))
        dishes = await self.ctx.meals.list_for_chef(user_id)
        orders = await self.ctx.orders.list_for_chef(user_id)
        earnings = await self._earnings.handle(GetChefEarningsQuery(chef_user_id=user_id))
        specialties = await self.ctx.chefs.specialties(chef.id)
        self.set_state(
            stats=stats,
            dishes=dishes,
            orders=orders,
            earnings=earnings,
            specialties=specialties,
        )

    def on_load_error(self, error: HomePlateError) -> None:
        self.error(self.LOAD_ERROR)
        if self.chef is None:
            # Without a chef profile there is nothing to show
            self.navigate("/")

    # ── Dishes ───────────────────────────────────────────────

    async def save_dish(self, values: Mapping[str, Any], dish_id: Optional[str] = None) -> bool:
        user_id = self.current_identity().id

        async def save() -> None:
            form = MealForm.parse(values)
            if dish_id is None:
                await self.ctx.meals.create_meal(user_id, form)
            else:
                await self.ctx.meals.update_meal(dish_id, user_id, form)

        return await self.mutate(
            save(),
            success="Dish added successfully!" if dish_id is None else "Dish updated successfully!",
            failure="Failed to save dish",
        )

    async def delete_dish(self, dish_id: str) -> bool:
        return await self.mutate(
            self.ctx.meals.delete_meal(dish_id),
            success="Dish deleted successfully!",
            failure="Failed to delete dish",
        )

    async def toggle_availability(self, dish_id: str) -> bool:
        dish = next((d for d in self.dishes if d.id == dish_id), None)
        if dish is None:
            self.error("Failed to update availability")
            return False
        return await self.mutate(
            self.ctx.meals.set_availability(dish.id, not dish.available),
            success=f"Dish {'disabled' if dish.available else 'enabled'}",
            failure="Failed to update availability",
        )

    # ── Orders ───────────────────────────────────────────────

    async def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        async def update() -> None:
            view = next((v for v in self.orders if v.order.id == order_id), None)
            if view is None:
                raise EntityNotFoundError("orders", order_id)
            await self.ctx.orders.transition(view.order, status, Actor.CHEF)

        return await self.mutate(
            update(),
            success=f"Order {status.label}",
            failure="Failed to update order",
        )

    # ── Profile ──────────────────────────────────────────────

    async def update_profile(self, values: Mapping[str, Any]) -> bool:
        if self.chef is None:
            return False
        chef_id = self.chef.id

        async def update() -> None:
            await self.ctx.chefs.update_profile(chef_id, ChefProfileForm.parse(values))

        return await self.mutate(
            update(),
            success="Profile updated successfully!",
            failure="Failed to update profile",
        )

    async def add_specialty(self, specialty: str) -> bool:
        if self.chef is None:
            return False
        chef_id = self.chef.id

        async def add() -> None:
            form = SpecialtyForm.parse({"specialty": specialty})
            await self.ctx.chefs.add_specialty(chef_id, form)

        return await self.mutate(
            add(), success="Specialty added!", failure="Failed to add specialty"
        )

    async def remove_specialty(self, specialty: str) -> bool:
        if self.chef is None:
            return False
        return await self.mutate(
            self.ctx.chefs.remove_specialty(self.chef.id, specialty),
            success="Specialty removed!",
            failure="Failed to remove specialty",
        )
