"""Home page, meal browsing and meal detail with order placement."""

import logging
from typing import List, Optional

from homeplate.domain.marketplace.forms import MAX_ORDER_QUANTITY, OrderRequest
from homeplate.domain.marketplace.listings import ChefCard, MealListing
from homeplate.domain.shared.errors import EntityNotFoundError, HomePlateError
from homeplate.screens.base import Screen

logger = logging.getLogger(__name__)


class HomeScreen(Screen):
    """Popular meals and featured chefs."""

    PATH = "/"
    LOAD_ERROR = "Failed to load meals"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.popular: List[MealListing] = []
        self.featured_chefs: List[ChefCard] = []

    async def load(self) -> None:
        popular = await self.ctx.meals.list_popular()
        featured = await self.ctx.chefs.list_featured()
        self.set_state(popular=popular, featured_chefs=featured)


class MealsScreen(Screen):
    """Available meals with a client-side search box."""

    PATH = "/meals"
    LOAD_ERROR = "Failed to load meals"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.meals: List[MealListing] = []
        self.search = ""

    @property
    def visible(self) -> List[MealListing]:
        return [listing for listing in self.meals if listing.meal.matches(self.search)]

    async def load(self) -> None:
        self.set_state(meals=await self.ctx.meals.list_available())

    def open_meal(self, meal_id: str) -> None:
        """Anonymous visitors are sent to sign in first."""
        target = f"/meals/{meal_id}"
        if self.ctx.session.identity is None:
            self.info("Please sign in to place an order")
            self.require_sign_in(target)
            return
        self.navigate(target)


class MealDetailScreen(Screen):
    """Meal detail and ordering (quantity 1..10, optional spice/oil choices)."""

    LOAD_ERROR = "Failed to load meal details"

    def __init__(self, context, meal_id: str) -> None:
        super().__init__(context)
        self.meal_id = meal_id
        self.listing: Optional[MealListing] = None
        self.quantity = 1
        self.spice_level: Optional[str] = None
        self.oil_preference: Optional[str] = None
        self.ordering = False
        self.auth_prompt = False

    @property
    def path(self) -> str:
        return f"/meals/{self.meal_id}"

    @property
    def total_price(self) -> float:
        if self.listing is None:
            return 0.0
        return self.listing.meal.price * self.quantity

    async def load(self) -> None:
        self.set_state(listing=await self.ctx.meals.get_meal(self.meal_id))

    def on_load_error(self, error: HomePlateError) -> None:
        self.error(self.LOAD_ERROR)
        if isinstance(error, EntityNotFoundError):
            self.navigate("/meals")

    def set_quantity(self, quantity: int) -> None:
        self.quantity = max(1, min(MAX_ORDER_QUANTITY, quantity))

    async def place_order(self) -> bool:
        identity = self.ctx.session.identity
        if identity is None:
            self.auth_prompt = True
            self.require_sign_in()
            return False
        if self.listing is None:
            return False

        meal = self.listing.meal
        values = {
            "quantity": self.quantity,
            "spice_level": self.spice_level,
            "oil_preference": self.oil_preference,
        }

        async def place() -> None:
            request = OrderRequest.parse(values)
            await self.ctx.orders.place_order(identity.id, meal, request)

        self.ordering = True
        try:
            placed = await self.mutate(
                place(),
                success="Order placed! Redirecting to payment...",
                failure="Failed to place order. Please try again.",
            )
        finally:
            self.set_state(ordering=False)

        if placed:
            self.navigate("/orders")
        return placed
