"""Chef earnings query - group delivered orders by day and apply the chef share."""

from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Dict, Iterable, List, Optional
import logging

from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.domain.marketplace.earnings import (
    EarningsGroup,
    EarningsReport,
    chef_earnings,
)
from homeplate.domain.marketplace.order import Order

logger = logging.getLogger(__name__)


def aggregate_earnings(orders: Iterable[Order], tz: Optional[tzinfo] = None) -> EarningsReport:
    """
    Aggregate earnings over ``orders``.

    Only ``delivered`` orders count. Orders are grouped by the local
    calendar date of ``created_at`` (``tz``, or the system timezone when
    None); groups come back newest date first.

    Args:
        orders: Orders in any status and any order
        tz: Timezone defining the calendar day

    Returns:
        EarningsReport (empty report for no delivered orders)

    Example:
        >>> report = aggregate_earnings(orders)
        >>> report.total_earnings == sum(g.earnings for g in report.groups)
        True
    """
    counts: Dict[date, int] = {}
    revenue: Dict[date, float] = {}

    for order in orders:
        if not order.is_delivered:
            continue
        if order.created_at is None:
            logger.warning(
                "Delivered order without timestamp skipped",
                extra={"order_id": order.id},
            )
            continue

        day = order.created_at.astimezone(tz).date()
        counts[day] = counts.get(day, 0) + 1
        revenue[day] = revenue.get(day, 0.0) + order.total_price

    if not counts:
        return EarningsReport.empty()

    groups: List[EarningsGroup] = [
        EarningsGroup(
            date=day,
            orders=counts[day],
            revenue=revenue[day],
            earnings=chef_earnings(revenue[day]),
        )
        for day in sorted(counts, reverse=True)
    ]

    return EarningsReport(
        groups=tuple(groups),
        total_orders=sum(g.orders for g in groups),
        total_revenue=sum(g.revenue for g in groups),
        total_earnings=sum(g.earnings for g in groups),
    )


@dataclass(frozen=True)
class GetChefEarningsQuery:
    """
    Query: Get a chef's earnings report.

    Attributes:
        chef_user_id: Chef's user id
        tz: Timezone for day grouping (system timezone when None)
    """

    chef_user_id: str
    tz: Optional[tzinfo] = None


class GetChefEarningsQueryHandler:
    """Handler for GetChefEarningsQuery."""

    def __init__(self, orders: OrderFetcher):
        """
        Initialize handler.

        Args:
            orders: Order fetcher
        """
        self._orders = orders

    async def handle(self, query: GetChefEarningsQuery) -> EarningsReport:
        """
        Fetch the chef's delivered orders and aggregate them.

        Raises:
            RemoteServiceError: Orders could not be fetched
        """
        orders = await self._orders.list_delivered_for_chef(query.chef_user_id)
        report = aggregate_earnings(orders, query.tz)

        logger.debug(
            "Earnings aggregated",
            extra={
                "chef_user_id": query.chef_user_id,
                "orders": report.total_orders,
                "groups": len(report.groups),
            },
        )
        return report
