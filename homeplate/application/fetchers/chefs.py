"""Chef fetcher: public chef listings, chef self-service and admin moderation."""

import logging
from typing import Dict, List, Optional

from homeplate.application.fetchers.joins import JoinStrategy, RelatedLookup, label
from homeplate.application.fetchers.reviews import ReviewFetcher
from homeplate.domain.marketplace.chef import Chef, ChefSpecialty, VerificationStatus
from homeplate.domain.marketplace.forms import ChefProfileForm, SpecialtyForm
from homeplate.domain.marketplace.listings import ChefCard, ChefProfileView
from homeplate.domain.marketplace.meal import Meal
from homeplate.domain.shared.errors import EntityNotFoundError
from homeplate.domain.shared.ports.data_service import IDataService, Row

logger = logging.getLogger(__name__)

CHEF = "Chef"
HOME_CHEF = "Home Chef"
FEATURED_LIMIT = 10


class ChefFetcher:
    """
    Reads and writes ``chefs`` and ``chef_specialties``.

    ``Chef.id`` keys the chef tables only. Names, meals and reviews are
    reached through ``Chef.user_id``.
    """

    def __init__(
        self,
        data_service: IDataService,
        strategy: JoinStrategy = JoinStrategy.BATCH,
        reviews: Optional[ReviewFetcher] = None,
    ):
        self._data = data_service
        self._lookup = RelatedLookup(data_service, strategy)
        self._reviews = reviews or ReviewFetcher(data_service, strategy)

    # ── Public listings ──────────────────────────────────────

    async def list_approved(self, search: Optional[str] = None) -> List[ChefCard]:
        """Approved chefs, featured first then by rating; ``search`` matches name or specialty."""
        result = await (
            self._data.table("chefs")
            .select("*")
            .eq("verification_status", VerificationStatus.APPROVED.value)
            .order("is_featured", ascending=False)
            .order("avg_rating", ascending=False)
            .execute()
        )
        chefs = [Chef.from_row(row) for row in result.data]
        cards = await self._cards(chefs, CHEF)

        needle = (search or "").strip().lower()
        if not needle:
            return cards
        return [
            card
            for card in cards
            if needle in card.name.lower()
            or any(needle in specialty.lower() for specialty in card.specialties)
        ]

    async def list_featured(self, limit: int = FEATURED_LIMIT) -> List[ChefCard]:
        """Home page chefs, each with a signature dish when one is available."""
        result = await (
            self._data.table("chefs")
            .select("*")
            .eq("verification_status", VerificationStatus.APPROVED.value)
            .order("is_featured", ascending=False)
            .order("avg_rating", ascending=False)
            .limit(limit)
            .execute()
        )
        chefs = [Chef.from_row(row) for row in result.data]
        names = await self._lookup.names(chef.user_id for chef in chefs)
        dishes = await self._lookup.rows_by(
            "meals", "chef_id", (chef.user_id for chef in chefs), where={"available": True}
        )
        return [
            ChefCard(
                chef=chef,
                name=label(names, chef.user_id, HOME_CHEF),
                signature_dish=_first_meal(dishes.get(chef.user_id)),
            )
            for chef in chefs
        ]

    async def get_profile(self, chef_id: str) -> ChefProfileView:
        """
        Public chef page: profile, specialties, available meals, latest reviews.

        Raises:
            EntityNotFoundError: No chef with this id
        """
        result = await self._data.table("chefs").select("*").eq("id", chef_id).single().execute()
        chef = Chef.from_row(result.data)
        cards = await self._cards([chef], CHEF)

        meals = await (
            self._data.table("meals")
            .select("*")
            .eq("chef_id", chef.user_id)
            .eq("available", True)
            .execute()
        )
        reviews = await self._reviews.list_for_chef(chef.user_id)
        return ChefProfileView(
            card=cards[0],
            meals=tuple(Meal.from_row(row) for row in meals.data),
            reviews=tuple(reviews),
        )

    # ── Chef self-service ────────────────────────────────────

    async def get_by_user(self, user_id: str) -> Optional[Chef]:
        result = await (
            self._data.table("chefs").select("*").eq("user_id", user_id).maybe_single().execute()
        )
        if result.data is None:
            return None
        return Chef.from_row(result.data)

    async def ensure_profile(self, user_id: str) -> Chef:
        """Return the user's chef profile, creating a pending one if missing."""
        chef = await self.get_by_user(user_id)
        if chef is not None:
            return chef

        result = await (
            self._data.table("chefs")
            .insert(
                {
                    "user_id": user_id,
                    "verification_status": VerificationStatus.PENDING.value,
                }
            )
            .execute()
        )
        chef = Chef.from_row(result.data[0])
        logger.info("Chef profile created", extra={"chef_id": chef.id, "user_id": user_id})
        return chef

    async def update_profile(self, chef_id: str, form: ChefProfileForm) -> Chef:
        return await self._update(chef_id, form.to_row())

    async def specialties(self, chef_id: str) -> List[str]:
        result = await (
            self._data.table("chef_specialties")
            .select("chef_id,specialty")
            .eq("chef_id", chef_id)
            .execute()
        )
        return [ChefSpecialty.from_row(row).specialty for row in result.data]

    async def add_specialty(self, chef_id: str, form: SpecialtyForm) -> None:
        specialty = ChefSpecialty(chef_id=chef_id, specialty=form.specialty)
        await self._data.table("chef_specialties").insert(specialty.model_dump()).execute()
        logger.info(
            "Specialty added",
            extra={"chef_id": chef_id, "specialty": form.specialty},
        )

    async def remove_specialty(self, chef_id: str, specialty: str) -> None:
        await (
            self._data.table("chef_specialties")
            .delete()
            .eq("chef_id", chef_id)
            .eq("specialty", specialty)
            .execute()
        )
        logger.info(
            "Specialty removed",
            extra={"chef_id": chef_id, "specialty": specialty},
        )

    # ── Admin moderation ─────────────────────────────────────

    async def list_all(self, status: Optional[VerificationStatus] = None) -> List[ChefCard]:
        """Every chef profile, newest first, optionally by verification status."""
        query = self._data.table("chefs").select("*")
        if status is not None:
            query = query.eq("verification_status", status.value)
        result = await query.order("created_at", ascending=False).execute()
        chefs = [Chef.from_row(row) for row in result.data]
        names = await self._lookup.names(chef.user_id for chef in chefs)
        return [ChefCard(chef=chef, name=label(names, chef.user_id, CHEF)) for chef in chefs]

    async def set_verification_status(self, chef_id: str, status: VerificationStatus) -> Chef:
        chef = await self._update(chef_id, {"verification_status": status.value})
        logger.info(
            "Chef verification changed",
            extra={"chef_id": chef_id, "status": status.value},
        )
        return chef

    async def set_featured(self, chef_id: str, featured: bool) -> Chef:
        return await self._update(chef_id, {"is_featured": featured})

    # ── Helpers ──────────────────────────────────────────────

    async def _update(self, chef_id: str, values: Row) -> Chef:
        result = await self._data.table("chefs").update(values).eq("id", chef_id).execute()
        if not result.data:
            raise EntityNotFoundError("chefs", chef_id)
        return Chef.from_row(result.data[0])

    async def _cards(self, chefs: List[Chef], fallback: str) -> List[ChefCard]:
        names = await self._lookup.names(chef.user_id for chef in chefs)
        specialties: Dict[str, List[Row]] = await self._lookup.rows_by(
            "chef_specialties", "chef_id", (chef.id for chef in chefs), columns="chef_id,specialty"
        )
        return [
            ChefCard(
                chef=chef,
                name=label(names, chef.user_id, fallback),
                specialties=tuple(
                    ChefSpecialty.from_row(row).specialty for row in specialties.get(chef.id, [])
                ),
            )
            for chef in chefs
        ]


def _first_meal(rows: Optional[List[Row]]) -> Optional[Meal]:
    if not rows:
        return None
    return Meal.from_row(rows[0])
