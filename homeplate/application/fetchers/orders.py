"""Order fetcher: placement, per-role listings and status changes."""

import logging
from typing import List, Optional

from homeplate.application.fetchers.joins import JoinStrategy, RelatedLookup, label
from homeplate.domain.marketplace.forms import DeliveryAssignmentForm, OrderRequest
from homeplate.domain.marketplace.listings import OrderView
from homeplate.domain.marketplace.meal import Meal
from homeplate.domain.marketplace.order import (
    Actor,
    Order,
    OrderItem,
    OrderStatus,
    ensure_transition,
)
from homeplate.domain.shared.errors import (
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from homeplate.domain.shared.ports.data_service import IDataService, TableQuery

logger = logging.getLogger(__name__)

UNKNOWN_CHEF = "Unknown Chef"
UNKNOWN_MEAL = "Unknown Meal"
UNKNOWN = "Unknown"
CUSTOMER = "Customer"
CHEF = "Chef"


class OrderFetcher:
    """
    Reads and writes ``orders`` and ``order_items``.

    Status changes go through the order state machine before any write.
    """

    def __init__(
        self,
        data_service: IDataService,
        strategy: JoinStrategy = JoinStrategy.BATCH,
    ):
        self._data = data_service
        self._lookup = RelatedLookup(data_service, strategy)

    # ── Listings ─────────────────────────────────────────────

    async def list_for_customer(self, customer_id: str) -> List[OrderView]:
        """Customer's orders, newest first, with meal titles and chef names."""
        orders = await self._fetch(
            self._orders().eq("customer_id", customer_id)
        )
        titles = await self._lookup.values("meals", (o.meal_id for o in orders), "title")
        names = await self._lookup.names(o.chef_id for o in orders)
        return [
            OrderView(
                order=order,
                meal_title=label(titles, order.meal_id, UNKNOWN_MEAL),
                chef_name=label(names, order.chef_id, UNKNOWN_CHEF),
            )
            for order in orders
        ]

    async def list_for_chef(
        self, chef_user_id: str, status: Optional[OrderStatus] = None
    ) -> List[OrderView]:
        """Orders received by a chef, newest first, with meal titles and customer names."""
        query = self._orders().eq("chef_id", chef_user_id)
        if status is not None:
            query = query.eq("status", status.value)
        orders = await self._fetch(query)

        titles = await self._lookup.values("meals", (o.meal_id for o in orders), "title")
        names = await self._lookup.names(o.customer_id for o in orders)
        return [
            OrderView(
                order=order,
                meal_title=label(titles, order.meal_id, UNKNOWN_MEAL),
                customer_name=label(names, order.customer_id, CUSTOMER),
            )
            for order in orders
        ]

    async def list_all(self, status: Optional[OrderStatus] = None) -> List[OrderView]:
        """Admin view of every order, newest first."""
        query = self._orders()
        if status is not None:
            query = query.eq("status", status.value)
        orders = await self._fetch(query)

        titles = await self._lookup.values("meals", (o.meal_id for o in orders), "title")
        names = await self._lookup.names(
            [o.customer_id for o in orders] + [o.chef_id for o in orders]
        )
        return [
            OrderView(
                order=order,
                meal_title=label(titles, order.meal_id, UNKNOWN),
                customer_name=label(names, order.customer_id, CUSTOMER),
                chef_name=label(names, order.chef_id, CHEF),
            )
            for order in orders
        ]

    async def list_delivered_for_chef(self, chef_user_id: str) -> List[Order]:
        """Raw delivered orders of a chef, the input of earnings aggregation."""
        result = await (
            self._data.table("orders")
            .select("*")
            .eq("chef_id", chef_user_id)
            .in_("status", [OrderStatus.DELIVERED.value])
            .execute()
        )
        return [Order.from_row(row) for row in result.data]

    # ── Writes ───────────────────────────────────────────────

    async def place_order(self, customer_id: str, meal: Meal, request: OrderRequest) -> Order:
        """
        Place a pending order for ``request.quantity`` portions of ``meal``.

        Payment is not handled here; the order stays ``pending`` until the
        chef accepts it.

        Raises:
            ValidationError: Meal unavailable or choice not offered
        """
        if not meal.available:
            raise ValidationError(
                "This dish is currently unavailable", {"meal_id": "unavailable"}
            )
        request.check_against(meal)

        total_price = meal.price * request.quantity
        result = await (
            self._data.table("orders")
            .insert(
                {
                    "meal_id": meal.id,
                    "customer_id": customer_id,
                    "chef_id": meal.chef_id,
                    "quantity": request.quantity,
                    "total_price": total_price,
                    "status": OrderStatus.PENDING.value,
                }
            )
            .execute()
        )
        order = Order.from_row(result.data[0])

        item = OrderItem(
            order_id=order.id,
            meal_id=meal.id,
            quantity=request.quantity,
            price_per_unit=meal.price,
            subtotal=total_price,
            spice_level=request.spice_level,
            oil_preference=request.oil_preference,
        )
        await self._data.table("order_items").insert(item.model_dump()).execute()

        logger.info(
            "Order placed",
            extra={
                "order_id": order.id,
                "meal_id": meal.id,
                "customer_id": customer_id,
                "quantity": request.quantity,
                "total_price": total_price,
            },
        )
        return order

    async def transition(self, order: Order, target: OrderStatus, actor: Actor) -> Order:
        """
        Move ``order`` to ``target`` in one write.

        Raises:
            InvalidTransitionError: Not allowed from the current status or for ``actor``
            RemoteServiceError: Write failed; the order keeps its prior status
        """
        current = order.order_status
        if current is None:
            raise InvalidTransitionError(order.status, target.value, actor.value)
        ensure_transition(current, target, actor)
        return await self._write_status(order, {"status": target.value})

    async def assign_delivery(self, order: Order, form: DeliveryAssignmentForm) -> Order:
        """
        Admin hands a preparing order to a delivery partner.

        Raises:
            ValidationError: Partner already assigned
            InvalidTransitionError: Order not in ``preparing``
        """
        if order.delivery_partner_id:
            raise ValidationError(
                "Delivery partner already assigned",
                {"delivery_partner_id": "already assigned"},
            )
        current = order.order_status
        if current is None:
            raise InvalidTransitionError(
                order.status, OrderStatus.OUT_FOR_DELIVERY.value, Actor.ADMIN.value
            )
        ensure_transition(current, OrderStatus.OUT_FOR_DELIVERY, Actor.ADMIN)
        return await self._write_status(
            order,
            {
                "delivery_partner_id": form.delivery_partner_id,
                "status": OrderStatus.OUT_FOR_DELIVERY.value,
            },
        )

    # ── Helpers ──────────────────────────────────────────────

    def _orders(self) -> TableQuery:
        return self._data.table("orders").select("*")

    async def _fetch(self, query: TableQuery) -> List[Order]:
        result = await query.order("created_at", ascending=False).execute()
        return [Order.from_row(row) for row in result.data]

    async def _write_status(self, order: Order, values: dict) -> Order:
        result = await self._data.table("orders").update(values).eq("id", order.id).execute()
        if not result.data:
            raise EntityNotFoundError("orders", order.id)
        updated = Order.from_row(result.data[0])
        logger.info(
            "Order status changed",
            extra={"order_id": order.id, "from": order.status, "to": updated.status},
        )
        return updated
