"""Subscription fetcher."""

from typing import List

from homeplate.application.fetchers.joins import JoinStrategy, RelatedLookup, label
from homeplate.domain.marketplace.listings import SubscriptionView
from homeplate.domain.marketplace.subscription import Subscription
from homeplate.domain.shared.ports.data_service import IDataService

CHEF = "Chef"


class SubscriptionFetcher:
    """Customer's tiffin plans with chef names (``chef_id`` is the chef's user id)."""

    def __init__(
        self,
        data_service: IDataService,
        strategy: JoinStrategy = JoinStrategy.BATCH,
    ):
        self._data = data_service
        self._lookup = RelatedLookup(data_service, strategy)

    async def list_for_customer(self, customer_id: str) -> List[SubscriptionView]:
        result = await (
            self._data.table("subscriptions")
            .select("*")
            .eq("customer_id", customer_id)
            .order("created_at", ascending=False)
            .execute()
        )
        subscriptions = [Subscription.from_row(row) for row in result.data]
        names = await self._lookup.names(sub.chef_id for sub in subscriptions)
        return [
            SubscriptionView(subscription=sub, chef_name=label(names, sub.chef_id, CHEF))
            for sub in subscriptions
        ]
