"""Customer order history: reviews and cancellation."""

from typing import Any, Mapping, Optional

from homeplate.application.dashboards.customer_orders import (
    CustomerOrdersOverview,
    GetCustomerOrdersQuery,
    GetCustomerOrdersQueryHandler,
)
from homeplate.domain.marketplace.forms import ReviewForm
from homeplate.domain.marketplace.order import Actor, Order, OrderStatus
from homeplate.domain.session.roles import ScreenAccess
from homeplate.domain.shared.errors import EntityNotFoundError
from homeplate.screens.base import Screen


class OrdersScreen(Screen):
    ACCESS = ScreenAccess.AUTHENTICATED
    PATH = "/orders"
    LOAD_ERROR = "Failed to load orders"

    def __init__(self, context) -> None:
        super().__init__(context)
        self.overview: Optional[CustomerOrdersOverview] = None
        self._handler = GetCustomerOrdersQueryHandler(context.orders, context.reviews)

    async def load(self) -> None:
        customer = self.current_identity()
        overview = await self._handler.handle(GetCustomerOrdersQuery(customer_id=customer.id))
        self.set_state(overview=overview)

    async def submit_review(self, order_id: str, values: Mapping[str, Any]) -> bool:
        if not ReviewForm.is_submittable(values):
            self.error(ReviewForm.MESSAGE)
            return False

        async def submit() -> None:
            form = ReviewForm.parse(values)
            await self.ctx.reviews.submit_review(
                self._order(order_id), self.current_identity().id, form
            )

        return await self.mutate(
            submit(),
            success="Review submitted successfully!",
            failure="Failed to submit review",
        )

    async def cancel_order(self, order_id: str) -> bool:
        async def cancel() -> None:
            await self.ctx.orders.transition(
                self._order(order_id), OrderStatus.CANCELLED, Actor.CUSTOMER
            )

        return await self.mutate(
            cancel(), success="Order cancelled", failure="Failed to cancel order"
        )

    def _order(self, order_id: str) -> Order:
        if self.overview is not None:
            for view in self.overview.orders:
                if view.order.id == order_id:
                    return view.order
        raise EntityNotFoundError("orders", order_id)
