"""Review fetcher."""

import logging
from typing import List, Set

from homeplate.application.fetchers.joins import JoinStrategy, RelatedLookup, label
from homeplate.domain.marketplace.forms import ReviewForm
from homeplate.domain.marketplace.listings import ReviewView
from homeplate.domain.marketplace.order import Order
from homeplate.domain.marketplace.review import Review
from homeplate.domain.shared.errors import AuthorizationError, ValidationError
from homeplate.domain.shared.ports.data_service import IDataService

logger = logging.getLogger(__name__)

CUSTOMER = "Customer"
PROFILE_REVIEW_LIMIT = 10


class ReviewFetcher:
    """Reads and writes ``reviews``. ``Review.chef_id`` is the chef's user id."""

    def __init__(
        self,
        data_service: IDataService,
        strategy: JoinStrategy = JoinStrategy.BATCH,
    ):
        self._data = data_service
        self._lookup = RelatedLookup(data_service, strategy)

    async def list_for_chef(
        self, chef_user_id: str, limit: int = PROFILE_REVIEW_LIMIT
    ) -> List[ReviewView]:
        """Latest reviews of a chef with customer names."""
        result = await (
            self._data.table("reviews")
            .select("*")
            .eq("chef_id", chef_user_id)
            .order("created_at", ascending=False)
            .limit(limit)
            .execute()
        )
        reviews = [Review.from_row(row) for row in result.data]
        names = await self._lookup.names(review.customer_id for review in reviews)
        return [
            ReviewView(review=review, customer_name=label(names, review.customer_id, CUSTOMER))
            for review in reviews
        ]

    async def reviewed_order_ids(self, customer_id: str) -> Set[str]:
        result = await (
            self._data.table("reviews")
            .select("order_id")
            .eq("customer_id", customer_id)
            .execute()
        )
        return {str(row["order_id"]) for row in result.data}

    async def submit_review(self, order: Order, customer_id: str, form: ReviewForm) -> Review:
        """
        Review a delivered order.

        Raises:
            AuthorizationError: Order placed by someone else
            ValidationError: Order not delivered, or already reviewed
        """
        if order.customer_id != customer_id:
            raise AuthorizationError("You can only review your own orders")
        if not order.is_delivered:
            raise ValidationError(
                "Only delivered orders can be reviewed", {"order_id": order.status}
            )

        existing = await (
            self._data.table("reviews")
            .select("id")
            .eq("order_id", order.id)
            .limit(1)
            .execute()
        )
        if existing.data:
            raise ValidationError(
                "You already reviewed this order", {"order_id": "already reviewed"}
            )

        result = await (
            self._data.table("reviews")
            .insert(
                {
                    "order_id": order.id,
                    "customer_id": customer_id,
                    "chef_id": order.chef_id,
                    "rating": form.rating,
                    "comment": form.comment,
                }
            )
            .execute()
        )
        review = Review.from_row(result.data[0])
        logger.info(
            "Review submitted",
            extra={"order_id": order.id, "chef_id": order.chef_id, "rating": form.rating},
        )
        return review
