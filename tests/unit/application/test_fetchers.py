"""Unit tests for the entity fetchers against the seeded demo marketplace."""

import pytest

from homeplate.application.fetchers.chefs import ChefFetcher
from homeplate.application.fetchers.meals import MealFetcher
from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.application.fetchers.reviews import ReviewFetcher
from homeplate.application.fetchers.subscriptions import SubscriptionFetcher
from homeplate.domain.marketplace.chef import VerificationStatus
from homeplate.domain.marketplace.forms import (
    ChefProfileForm,
    DeliveryAssignmentForm,
    MealForm,
    OrderRequest,
    ReviewForm,
    SpecialtyForm,
)
from homeplate.domain.marketplace.order import Actor, Order, OrderItem, OrderStatus
from homeplate.domain.shared.errors import (
    AuthorizationError,
    EntityNotFoundError,
    InvalidTransitionError,
    NetworkError,
    ValidationError,
)
from homeplate.infrastructure.in_memory import demo


def _order(data, order_id: str) -> Order:
    row = next(row for row in data.rows("orders") if row["id"] == order_id)
    return Order.from_row(row)


class TestMealFetcher:
    @pytest.mark.asyncio
    async def test_list_available_with_chef_names(self, data):
        listings = await MealFetcher(data).list_available()

        assert [listing.meal.id for listing in listings] == ["meal-1"]
        assert listings[0].chef_name == "Meera Kitchen"

    @pytest.mark.asyncio
    async def test_search(self, data):
        assert await MealFetcher(data).list_available("biryani") == []
        assert len(await MealFetcher(data).list_available("THALI")) == 1

    @pytest.mark.asyncio
    async def test_chef_name_fallbacks(self, data):
        data.fail_on("profiles")
        meals = MealFetcher(data)

        assert (await meals.list_available())[0].chef_name == "Unknown Chef"
        assert (await meals.list_popular())[0].chef_name == "Home Chef"

    @pytest.mark.asyncio
    async def test_get_meal_not_found(self, data):
        with pytest.raises(EntityNotFoundError):
            await MealFetcher(data).get_meal("missing")

    @pytest.mark.asyncio
    async def test_list_for_chef_includes_unavailable(self, data):
        dishes = await MealFetcher(data).list_for_chef(demo.CHEF.id)
        assert [dish.id for dish in dishes] == ["meal-2", "meal-1"]

    @pytest.mark.asyncio
    async def test_create_update_delete(self, data):
        meals = MealFetcher(data)
        form = MealForm.parse(
            {"title": "Poha", "description": "Flattened rice", "price": 60, "category": "breakfast"}
        )

        meal = await meals.create_meal(demo.CHEF.id, form)
        assert meal.chef_id == demo.CHEF.id

        edited = MealForm.parse({**form.to_row(), "price": 70})
        updated = await meals.update_meal(meal.id, demo.CHEF.id, edited)
        assert updated.price == 70

        await meals.delete_meal(meal.id)
        assert all(row["id"] != meal.id for row in data.rows("meals"))

    @pytest.mark.asyncio
    async def test_update_other_chefs_meal(self, data):
        form = MealForm.parse(
            {"title": "Poha", "description": "Flattened rice", "price": 60, "category": "breakfast"}
        )

        with pytest.raises(EntityNotFoundError):
            await MealFetcher(data).update_meal("meal-1", demo.CUSTOMER.id, form)

    @pytest.mark.asyncio
    async def test_set_availability(self, data):
        await MealFetcher(data).set_availability("meal-2", True)

        assert len(await MealFetcher(data).list_available()) == 2


class TestChefFetcher:
    @pytest.mark.asyncio
    async def test_list_approved(self, data):
        cards = await ChefFetcher(data).list_approved()

        assert len(cards) == 1
        assert cards[0].name == "Meera Kitchen"
        assert cards[0].specialties == ("Gujarati", "Thali")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("search,found", [("meera", 1), ("thali", 1), ("bengali", 0)])
    async def test_search(self, data, search, found):
        assert len(await ChefFetcher(data).list_approved(search)) == found

    @pytest.mark.asyncio
    async def test_list_featured_has_signature_dish(self, data):
        cards = await ChefFetcher(data).list_featured()

        assert cards[0].signature_dish is not None
        assert cards[0].signature_dish.id == "meal-1"

    @pytest.mark.asyncio
    async def test_featured_fallback_name(self, data):
        data.fail_on("profiles")
        cards = await ChefFetcher(data).list_featured()
        assert cards[0].name == "Home Chef"

    @pytest.mark.asyncio
    async def test_get_profile(self, data):
        profile = await ChefFetcher(data).get_profile("chef-1")

        assert profile.card.chef.user_id == demo.CHEF.id
        assert [meal.id for meal in profile.meals] == ["meal-1"]
        assert profile.reviews[0].customer_name == "Arjun Rao"

    @pytest.mark.asyncio
    async def test_get_profile_not_found(self, data):
        with pytest.raises(EntityNotFoundError):
            await ChefFetcher(data).get_profile("chef-404")

    @pytest.mark.asyncio
    async def test_ensure_profile_creates_pending(self, data):
        chefs = ChefFetcher(data)

        created = await chefs.ensure_profile("user-new")
        again = await chefs.ensure_profile("user-new")

        assert created.verification_status == VerificationStatus.PENDING
        assert again.id == created.id
        assert len(data.rows("chefs")) == 2

    @pytest.mark.asyncio
    async def test_profile_and_specialties(self, data):
        chefs = ChefFetcher(data)

        chef = await chefs.update_profile("chef-1", ChefProfileForm.parse({"bio": "New bio", "fssai_license": True}))
        await chefs.add_specialty("chef-1", SpecialtyForm.parse({"specialty": "Farsan"}))
        await chefs.remove_specialty("chef-1", "Thali")

        assert chef.bio == "New bio"
        assert chef.fssai_license
        assert await chefs.specialties("chef-1") == ["Gujarati", "Farsan"]
        added = data.rows("chef_specialties")[-1]
        assert (added["chef_id"], added["specialty"]) == ("chef-1", "Farsan")

    @pytest.mark.asyncio
    async def test_moderation(self, data):
        chefs = ChefFetcher(data)

        rejected = await chefs.set_verification_status("chef-1", VerificationStatus.REJECTED)
        unfeatured = await chefs.set_featured("chef-1", False)

        assert rejected.verification_status == VerificationStatus.REJECTED
        assert not unfeatured.is_featured
        assert await chefs.list_approved() == []
        assert len(await chefs.list_all(VerificationStatus.REJECTED)) == 1

    @pytest.mark.asyncio
    async def test_update_missing_chef(self, data):
        with pytest.raises(EntityNotFoundError):
            await ChefFetcher(data).set_featured("chef-404", True)


class TestOrderFetcher:
    @pytest.mark.asyncio
    async def test_list_for_customer(self, data):
        views = await OrderFetcher(data).list_for_customer(demo.CUSTOMER.id)

        assert [view.order.id for view in views] == ["order-4", "order-3", "order-2", "order-1"]
        assert views[0].meal_title == "Gujarati Thali"
        assert views[0].chef_name == "Meera Kitchen"

    @pytest.mark.asyncio
    async def test_list_for_chef_by_status(self, data):
        views = await OrderFetcher(data).list_for_chef(demo.CHEF.id, OrderStatus.PENDING)

        assert [view.order.id for view in views] == ["order-4"]
        assert views[0].customer_name == "Arjun Rao"

    @pytest.mark.asyncio
    async def test_list_all_fallbacks(self, data):
        data.fail_on("meals")
        data.fail_on("profiles")

        views = await OrderFetcher(data).list_all()

        assert len(views) == 4
        assert {(v.meal_title, v.customer_name, v.chef_name) for v in views} == {
            ("Unknown", "Customer", "Chef")
        }

    @pytest.mark.asyncio
    async def test_list_delivered_for_chef(self, data):
        orders = await OrderFetcher(data).list_delivered_for_chef(demo.CHEF.id)
        assert sorted(order.id for order in orders) == ["order-1", "order-2", "order-3"]

    @pytest.mark.asyncio
    async def test_place_order(self, data):
        meal = (await MealFetcher(data).get_meal("meal-1")).meal
        request = OrderRequest.parse({"quantity": 3, "spice_level": "mild", "oil_preference": "ghee"})

        order = await OrderFetcher(data).place_order(demo.CUSTOMER.id, meal, request)

        assert order.order_status == OrderStatus.PENDING
        assert order.total_price == 540.0
        assert order.chef_id == demo.CHEF.id
        item = OrderItem.from_row(data.rows("order_items")[0])
        assert item.order_id == order.id
        assert item.meal_id == "meal-1"
        assert item.quantity == 3
        assert item.price_per_unit == 180.0
        assert item.subtotal == 540.0
        assert item.spice_level == "mild"
        assert item.oil_preference == "ghee"

    @pytest.mark.asyncio
    async def test_unavailable_meal_cannot_be_ordered(self, data):
        meal = (await MealFetcher(data).get_meal("meal-2")).meal

        with pytest.raises(ValidationError, match="unavailable"):
            await OrderFetcher(data).place_order(
                demo.CUSTOMER.id, meal, OrderRequest.parse({"quantity": 1})
            )

        assert data.rows("order_items") == []

    @pytest.mark.asyncio
    async def test_unoffered_choice_rejected_before_write(self, data):
        meal = (await MealFetcher(data).get_meal("meal-1")).meal
        orders_before = len(data.rows("orders"))

        with pytest.raises(ValidationError):
            await OrderFetcher(data).place_order(
                demo.CUSTOMER.id, meal, OrderRequest.parse({"quantity": 1, "oil_preference": "palm"})
            )

        assert len(data.rows("orders")) == orders_before

    @pytest.mark.asyncio
    async def test_transition(self, data):
        fetcher = OrderFetcher(data)

        accepted = await fetcher.transition(_order(data, "order-4"), OrderStatus.ACCEPTED, Actor.CHEF)

        assert accepted.order_status == OrderStatus.ACCEPTED
        assert _order(data, "order-4").status == "accepted"

    @pytest.mark.asyncio
    async def test_invalid_transition_writes_nothing(self, data):
        with pytest.raises(InvalidTransitionError):
            await OrderFetcher(data).transition(
                _order(data, "order-1"), OrderStatus.CANCELLED, Actor.CUSTOMER
            )

        assert data.calls_to("orders") == []

    @pytest.mark.asyncio
    async def test_legacy_status_cannot_transition(self, data):
        data.seed(
            "orders",
            [{"id": "order-9", "meal_id": "meal-1", "customer_id": "c", "chef_id": demo.CHEF.id, "status": "paid"}],
        )

        with pytest.raises(InvalidTransitionError):
            await OrderFetcher(data).transition(_order(data, "order-9"), OrderStatus.ACCEPTED, Actor.CHEF)

    @pytest.mark.asyncio
    async def test_failed_write_keeps_status(self, data):
        order = _order(data, "order-4")
        data.fail_on("orders")

        with pytest.raises(NetworkError):
            await OrderFetcher(data).transition(order, OrderStatus.ACCEPTED, Actor.CHEF)

        data.clear_failures()
        assert _order(data, "order-4").status == "pending"

    @pytest.mark.asyncio
    async def test_assign_delivery(self, data):
        data.seed(
            "orders",
            [{"id": "order-5", "meal_id": "meal-1", "customer_id": demo.CUSTOMER.id, "chef_id": demo.CHEF.id, "status": "preparing"}],
        )
        form = DeliveryAssignmentForm.parse({"delivery_partner_id": "rider-7"})

        updated = await OrderFetcher(data).assign_delivery(_order(data, "order-5"), form)

        assert updated.delivery_partner_id == "rider-7"
        assert updated.order_status == OrderStatus.OUT_FOR_DELIVERY

    @pytest.mark.asyncio
    async def test_assign_delivery_requires_preparing(self, data):
        form = DeliveryAssignmentForm.parse({"delivery_partner_id": "rider-7"})

        with pytest.raises(InvalidTransitionError):
            await OrderFetcher(data).assign_delivery(_order(data, "order-4"), form)

    @pytest.mark.asyncio
    async def test_assign_delivery_only_once(self, data):
        data.seed(
            "orders",
            [
                {
                    "id": "order-6",
                    "meal_id": "meal-1",
                    "customer_id": demo.CUSTOMER.id,
                    "chef_id": demo.CHEF.id,
                    "status": "preparing",
                    "delivery_partner_id": "rider-1",
                }
            ],
        )
        form = DeliveryAssignmentForm.parse({"delivery_partner_id": "rider-7"})

        with pytest.raises(ValidationError, match="already assigned"):
            await OrderFetcher(data).assign_delivery(_order(data, "order-6"), form)


class TestReviewFetcher:
    @pytest.mark.asyncio
    async def test_list_for_chef(self, data):
        views = await ReviewFetcher(data).list_for_chef(demo.CHEF.id)

        assert [view.review.rating for view in views] == [5]
        assert views[0].customer_name == "Arjun Rao"

    @pytest.mark.asyncio
    async def test_reviewed_order_ids(self, data):
        assert await ReviewFetcher(data).reviewed_order_ids(demo.CUSTOMER.id) == {"order-1"}

    @pytest.mark.asyncio
    async def test_submit_review(self, data):
        review = await ReviewFetcher(data).submit_review(
            _order(data, "order-2"), demo.CUSTOMER.id, ReviewForm.parse({"rating": 4, "comment": "Good"})
        )

        assert review.chef_id == demo.CHEF.id
        assert len(data.rows("reviews")) == 2

    @pytest.mark.asyncio
    async def test_only_own_orders(self, data):
        with pytest.raises(AuthorizationError):
            await ReviewFetcher(data).submit_review(
                _order(data, "order-2"), demo.CHEF.id, ReviewForm.parse({"rating": 4})
            )

    @pytest.mark.asyncio
    async def test_only_delivered_orders(self, data):
        with pytest.raises(ValidationError, match="delivered"):
            await ReviewFetcher(data).submit_review(
                _order(data, "order-4"), demo.CUSTOMER.id, ReviewForm.parse({"rating": 4})
            )

    @pytest.mark.asyncio
    async def test_one_review_per_order(self, data):
        with pytest.raises(ValidationError, match="already reviewed"):
            await ReviewFetcher(data).submit_review(
                _order(data, "order-1"), demo.CUSTOMER.id, ReviewForm.parse({"rating": 4})
            )


class TestSubscriptionFetcher:
    @pytest.mark.asyncio
    async def test_list_for_customer(self, data):
        views = await SubscriptionFetcher(data).list_for_customer(demo.CUSTOMER.id)

        assert views[0].chef_name == "Meera Kitchen"
        assert views[0].subscription.meals_used == 3

    @pytest.mark.asyncio
    async def test_chef_fallback(self, data):
        data.fail_on("profiles")
        views = await SubscriptionFetcher(data).list_for_customer(demo.CUSTOMER.id)
        assert views[0].chef_name == "Chef"
