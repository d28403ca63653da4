"""Read models: rows joined with the display fields screens need."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from homeplate.domain.marketplace.chef import Chef
from homeplate.domain.marketplace.meal import Meal
from homeplate.domain.marketplace.order import Order
from homeplate.domain.marketplace.review import Review
from homeplate.domain.marketplace.subscription import Subscription


@dataclass(frozen=True)
class MealListing:
    meal: Meal
    chef_name: str


@dataclass(frozen=True)
class ChefCard:
    """Chef with display name, specialties and (for featured lists) a signature dish."""

    chef: Chef
    name: str
    specialties: Tuple[str, ...] = ()
    signature_dish: Optional[Meal] = None


@dataclass(frozen=True)
class OrderView:
    """
    Order plus the denormalized fields of the screen showing it.

    Fields a screen does not display stay None.
    """

    order: Order
    meal_title: Optional[str] = None
    customer_name: Optional[str] = None
    chef_name: Optional[str] = None


@dataclass(frozen=True)
class ReviewView:
    review: Review
    customer_name: str


@dataclass(frozen=True)
class SubscriptionView:
    subscription: Subscription
    chef_name: str


@dataclass(frozen=True)
class ChefProfileView:
    """Everything the public chef profile page renders."""

    card: ChefCard
    meals: Tuple[Meal, ...] = field(default_factory=tuple)
    reviews: Tuple[ReviewView, ...] = field(default_factory=tuple)
