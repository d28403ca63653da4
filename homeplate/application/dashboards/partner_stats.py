"""Chef (partner) dashboard counters."""

from dataclasses import dataclass
import logging

from homeplate.application.dashboards.counts import count_rows
from homeplate.application.dashboards.earnings import aggregate_earnings
from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.domain.marketplace.order import OrderStatus
from homeplate.domain.shared.ports.data_service import IDataService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartnerStats:
    """
    Chef dashboard summary.

    Attributes:
        total_orders: Orders received
        pending_orders: Orders awaiting accept/reject
        active_dishes: Dishes currently available
        total_earnings: Chef share of delivered orders
    """

    total_orders: int
    pending_orders: int
    active_dishes: int
    total_earnings: float


@dataclass(frozen=True)
class GetPartnerStatsQuery:
    """
    Query: Get a chef's dashboard summary.

    Attributes:
        chef_user_id: Chef's user id
    """

    chef_user_id: str


class GetPartnerStatsQueryHandler:
    """Handler for GetPartnerStatsQuery."""

    def __init__(self, data_service: IDataService, orders: OrderFetcher):
        self._data = data_service
        self._orders = orders

    async def handle(self, query: GetPartnerStatsQuery) -> PartnerStats:
        chef_id = query.chef_user_id
        total_orders = await count_rows(self._data, "orders", chef_id=chef_id)
        pending_orders = await count_rows(
            self._data, "orders", chef_id=chef_id, status=OrderStatus.PENDING.value
        )
        active_dishes = await count_rows(self._data, "meals", chef_id=chef_id, available=True)
        delivered = await self._orders.list_delivered_for_chef(chef_id)

        stats = PartnerStats(
            total_orders=total_orders,
            pending_orders=pending_orders,
            active_dishes=active_dishes,
            total_earnings=aggregate_earnings(delivered).total_earnings,
        )
        logger.debug(
            "Partner stats computed",
            extra={"chef_user_id": chef_id, "total_orders": total_orders},
        )
        return stats
