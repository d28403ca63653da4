"""Customer order history with review eligibility."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.application.fetchers.reviews import ReviewFetcher
from homeplate.domain.marketplace.listings import OrderView


@dataclass(frozen=True)
class CustomerOrdersOverview:
    """
    Attributes:
        orders: Customer's orders, newest first
        status_counts: Number of orders per status value
        reviewable_order_ids: Delivered orders not reviewed yet
    """

    orders: Tuple[OrderView, ...]
    status_counts: Dict[str, int] = field(default_factory=dict)
    reviewable_order_ids: FrozenSet[str] = frozenset()

    def can_review(self, order_id: str) -> bool:
        return order_id in self.reviewable_order_ids


@dataclass(frozen=True)
class GetCustomerOrdersQuery:
    customer_id: str


class GetCustomerOrdersQueryHandler:
    """Handler for GetCustomerOrdersQuery."""

    def __init__(self, orders: OrderFetcher, reviews: ReviewFetcher):
        self._orders = orders
        self._reviews = reviews

    async def handle(self, query: GetCustomerOrdersQuery) -> CustomerOrdersOverview:
        views = await self._orders.list_for_customer(query.customer_id)
        reviewed = await self._reviews.reviewed_order_ids(query.customer_id)

        counts: Dict[str, int] = {}
        for view in views:
            counts[view.order.status] = counts.get(view.order.status, 0) + 1

        reviewable = frozenset(
            view.order.id
            for view in views
            if view.order.is_delivered and view.order.id not in reviewed
        )
        return CustomerOrdersOverview(
            orders=tuple(views),
            status_counts=counts,
            reviewable_order_ids=reviewable,
        )
