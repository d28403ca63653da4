"""Meal fetcher: dish listings for customers and dish management for chefs."""

import logging
from typing import List, Optional

from homeplate.application.fetchers.joins import JoinStrategy, RelatedLookup, label
from homeplate.domain.marketplace.forms import MealForm
from homeplate.domain.marketplace.listings import MealListing
from homeplate.domain.marketplace.meal import Meal
from homeplate.domain.shared.errors import EntityNotFoundError
from homeplate.domain.shared.ports.data_service import IDataService

logger = logging.getLogger(__name__)

UNKNOWN_CHEF = "Unknown Chef"
HOME_CHEF = "Home Chef"
POPULAR_LIMIT = 8


class MealFetcher:
    """
    Reads and writes ``meals``.

    Chef names are joined from ``profiles`` through ``Meal.chef_id`` (the
    chef's user id).
    """

    def __init__(
        self,
        data_service: IDataService,
        strategy: JoinStrategy = JoinStrategy.BATCH,
    ):
        self._data = data_service
        self._lookup = RelatedLookup(data_service, strategy)

    async def list_available(self, search: Optional[str] = None) -> List[MealListing]:
        """Available meals, newest first, optionally filtered by ``search``."""
        result = await (
            self._data.table("meals")
            .select("*")
            .eq("available", True)
            .order("created_at", ascending=False)
            .execute()
        )
        meals = [Meal.from_row(row) for row in result.data]
        if search:
            meals = [meal for meal in meals if meal.matches(search)]
        return await self._with_chef_names(meals, UNKNOWN_CHEF)

    async def list_popular(self, limit: int = POPULAR_LIMIT) -> List[MealListing]:
        """Home page selection of available meals."""
        result = await (
            self._data.table("meals")
            .select("*")
            .eq("available", True)
            .limit(limit)
            .execute()
        )
        meals = [Meal.from_row(row) for row in result.data]
        return await self._with_chef_names(meals, HOME_CHEF)

    async def get_meal(self, meal_id: str) -> MealListing:
        """
        Meal detail.

        Raises:
            EntityNotFoundError: No meal with this id
        """
        result = await self._data.table("meals").select("*").eq("id", meal_id).single().execute()
        listings = await self._with_chef_names([Meal.from_row(result.data)], UNKNOWN_CHEF)
        return listings[0]

    async def list_for_chef(self, chef_user_id: str) -> List[Meal]:
        """Every dish of one chef (available or not), newest first."""
        result = await (
            self._data.table("meals")
            .select("*")
            .eq("chef_id", chef_user_id)
            .order("created_at", ascending=False)
            .execute()
        )
        return [Meal.from_row(row) for row in result.data]

    async def create_meal(self, chef_user_id: str, form: MealForm) -> Meal:
        row = {**form.to_row(), "chef_id": chef_user_id}
        result = await self._data.table("meals").insert(row).execute()
        meal = Meal.from_row(result.data[0])
        logger.info(
            "Meal created",
            extra={"meal_id": meal.id, "chef_id": chef_user_id},
        )
        return meal

    async def update_meal(self, meal_id: str, chef_user_id: str, form: MealForm) -> Meal:
        """
        Edit one of the chef's own dishes.

        Raises:
            EntityNotFoundError: Meal absent or owned by another chef
        """
        result = await (
            self._data.table("meals")
            .update(form.to_row())
            .eq("id", meal_id)
            .eq("chef_id", chef_user_id)
            .execute()
        )
        if not result.data:
            raise EntityNotFoundError("meals", meal_id)
        logger.info("Meal updated", extra={"meal_id": meal_id})
        return Meal.from_row(result.data[0])

    async def delete_meal(self, meal_id: str) -> None:
        await self._data.table("meals").delete().eq("id", meal_id).execute()
        logger.info("Meal deleted", extra={"meal_id": meal_id})

    async def set_availability(self, meal_id: str, available: bool) -> None:
        result = await (
            self._data.table("meals")
            .update({"available": available})
            .eq("id", meal_id)
            .execute()
        )
        if not result.data:
            raise EntityNotFoundError("meals", meal_id)
        logger.info(
            "Meal availability changed",
            extra={"meal_id": meal_id, "available": available},
        )

    async def _with_chef_names(self, meals: List[Meal], fallback: str) -> List[MealListing]:
        names = await self._lookup.names(meal.chef_id for meal in meals)
        return [
            MealListing(meal=meal, chef_name=label(names, meal.chef_id, fallback))
            for meal in meals
        ]
