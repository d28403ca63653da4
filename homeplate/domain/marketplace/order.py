"""Order rows and the order-status state machine."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import Field, field_validator

from homeplate.domain.marketplace.base import RemoteRow, ensure_utc
from homeplate.domain.shared.errors import InvalidTransitionError


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def label(self) -> str:
        """Human readable form, e.g. 'out for delivery'."""
        return self.value.replace("_", " ")


class Actor(str, Enum):
    """Who triggers a status change."""

    CUSTOMER = "customer"
    CHEF = "chef"
    ADMIN = "admin"
    SYSTEM = "system"


TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.REJECTED, OrderStatus.CANCELLED}
)

PRE_DELIVERY_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.ACCEPTED,
        OrderStatus.PREPARING,
        OrderStatus.OUT_FOR_DELIVERY,
    }
)

_CANCELLERS = frozenset({Actor.CUSTOMER, Actor.CHEF, Actor.ADMIN})

# (from, to) -> actors allowed to trigger it
TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], FrozenSet[Actor]] = {
    (OrderStatus.PENDING, OrderStatus.ACCEPTED): frozenset({Actor.CHEF}),
    (OrderStatus.PENDING, OrderStatus.REJECTED): frozenset({Actor.CHEF}),
    (OrderStatus.ACCEPTED, OrderStatus.PREPARING): frozenset({Actor.CHEF}),
    (OrderStatus.PREPARING, OrderStatus.OUT_FOR_DELIVERY): frozenset({Actor.CHEF, Actor.ADMIN}),
    (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED): frozenset({Actor.SYSTEM}),
    **{(status, OrderStatus.CANCELLED): _CANCELLERS for status in PRE_DELIVERY_STATUSES},
}


def can_transition(current: OrderStatus, target: OrderStatus, actor: Actor) -> bool:
    """True when ``actor`` may move an order from ``current`` to ``target``."""
    return actor in TRANSITIONS.get((current, target), frozenset())


def ensure_transition(current: OrderStatus, target: OrderStatus, actor: Actor) -> None:
    """
    Raise InvalidTransitionError unless the move is allowed.

    Example:
        >>> ensure_transition(OrderStatus.PENDING, OrderStatus.ACCEPTED, Actor.CHEF)
        >>> ensure_transition(OrderStatus.PENDING, OrderStatus.DELIVERED, Actor.CHEF)
        Traceback (most recent call last):
        ...
        homeplate.domain.shared.errors.InvalidTransitionError: ...
    """
    if not can_transition(current, target, actor):
        raise InvalidTransitionError(current.value, target.value, actor.value)


def next_statuses(current: OrderStatus, actor: Actor) -> Tuple[OrderStatus, ...]:
    """Statuses ``actor`` may move the order to, in lifecycle order."""
    return tuple(
        target
        for target in OrderStatus
        if can_transition(current, target, actor)
    )


class Order(RemoteRow):
    """
    ``orders`` row.

    ``chef_id`` is the chef's user id. ``status`` accepts unknown legacy
    values (e.g. 'paid') as plain strings so that a bad row never breaks a
    whole list; use ``order_status`` for the typed value.
    """

    id: str
    meal_id: str
    customer_id: str
    chef_id: str
    quantity: int = Field(1, ge=1)
    total_price: float = Field(0.0, ge=0)
    status: str = OrderStatus.PENDING.value
    delivery_partner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v: object) -> str:
        if isinstance(v, OrderStatus):
            return v.value
        return str(v or OrderStatus.PENDING.value)

    @field_validator("created_at")
    @classmethod
    def utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def order_status(self) -> Optional[OrderStatus]:
        try:
            return OrderStatus(self.status)
        except ValueError:
            return None

    @property
    def is_delivered(self) -> bool:
        return self.order_status == OrderStatus.DELIVERED


class OrderItem(RemoteRow):
    """``order_items`` row with the customer's preparation choices."""

    order_id: str
    meal_id: str
    quantity: int = Field(..., ge=1)
    price_per_unit: float = Field(..., ge=0)
    subtotal: float = Field(..., ge=0)
    spice_level: Optional[str] = None
    oil_preference: Optional[str] = None
