"""Chef directory and public chef profile."""

from typing import List, Optional

from homeplate.domain.marketplace.listings import ChefCard, ChefProfileView
from homeplate.screens.base import Screen


class ChefsScreen(Screen):
    """Approved chefs, searchable by name or specialty."""

    PATH = "/chefs"
    LOAD_ERROR = "Failed to load chefs"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.chefs: List[ChefCard] = []
        self.search = ""

    @property
    def visible(self) -> List[ChefCard]:
        needle = self.search.strip().lower()
        if not needle:
            return list(self.chefs)
        return [
            card
            for card in self.chefs
            if needle in card.name.lower()
            or any(needle in s.lower() for s in card.specialties)
        ]

    async def load(self) -> None:
        self.set_state(chefs=await self.ctx.chefs.list_approved())


class ChefProfileScreen(Screen):
    LOAD_ERROR = "Failed to load chef profile"

    def __init__(self, context, chef_id: str) -> None:
        super().__init__(context)
        self.chef_id = chef_id
        self.profile: Optional[ChefProfileView] = None

    @property
    def path(self) -> str:
        return f"/chefs/{self.chef_id}"

    async def load(self) -> None:
        self.set_state(profile=await self.ctx.chefs.get_profile(self.chef_id))
