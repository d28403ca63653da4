"""Demo marketplace used by ``HOMEPLATE_BACKEND=inmemory`` and the CLI ``--demo`` flag."""

from typing import Tuple

from homeplate.domain.session.identity import Identity
from homeplate.infrastructure.in_memory.auth_provider import InMemoryAuthProvider
from homeplate.infrastructure.in_memory.data_service import InMemoryDataService

DEMO_PASSWORD = "homeplate-demo"

ADMIN = Identity(
    id="user-admin",
    email="admin@homeplate.test",
    display_name="Ravi Admin",
    role_claim="customer",
)
CHEF = Identity(
    id="user-chef",
    email="chef@homeplate.test",
    display_name="Meera Kitchen",
    role_claim="chef",
)
CUSTOMER = Identity(
    id="user-customer",
    email="customer@homeplate.test",
    display_name="Arjun Rao",
    role_claim="customer",
)


def build_demo() -> Tuple[InMemoryDataService, InMemoryAuthProvider]:
    """Seeded data service plus an auth provider knowing the three demo accounts."""
    data = InMemoryDataService(
        {
            "profiles": [
                {"id": ADMIN.id, "name": ADMIN.display_name, "email": ADMIN.email},
                {"id": CHEF.id, "name": CHEF.display_name, "email": CHEF.email},
                {"id": CUSTOMER.id, "name": CUSTOMER.display_name, "email": CUSTOMER.email},
            ],
            "user_roles": [
                {"user_id": ADMIN.id, "role": "admin"},
                {"user_id": ADMIN.id, "role": "customer"},
                {"user_id": CHEF.id, "role": "chef"},
                {"user_id": CUSTOMER.id, "role": "customer"},
            ],
            "chefs": [
                {
                    "id": "chef-1",
                    "user_id": CHEF.id,
                    "bio": "Home-style Gujarati thalis",
                    "verification_status": "approved",
                    "is_featured": True,
                    "avg_rating": 4.8,
                    "total_reviews": 1,
                    "total_orders": 4,
                    "created_at": "2026-01-05T09:00:00+00:00",
                },
            ],
            "chef_specialties": [
                {"chef_id": "chef-1", "specialty": "Gujarati"},
                {"chef_id": "chef-1", "specialty": "Thali"},
            ],
            "meals": [
                {
                    "id": "meal-1",
                    "chef_id": CHEF.id,
                    "title": "Gujarati Thali",
                    "description": "Dal, kadhi, two sabzis, rotli and rice",
                    "price": 180.0,
                    "category": "lunch",
                    "available": True,
                    "spice_levels": ["mild", "medium"],
                    "oil_options": ["ghee", "groundnut"],
                    "created_at": "2026-01-06T08:00:00+00:00",
                },
                {
                    "id": "meal-2",
                    "chef_id": CHEF.id,
                    "title": "Methi Thepla",
                    "description": "Fenugreek flatbread with pickle",
                    "price": 90.0,
                    "category": "breakfast",
                    "available": False,
                    "created_at": "2026-01-07T08:00:00+00:00",
                },
            ],
            "orders": [
                _order("order-1", "meal-1", 2, 360.0, "delivered", "2026-02-01T12:30:00+00:00"),
                _order("order-2", "meal-1", 1, 180.0, "delivered", "2026-02-01T13:10:00+00:00"),
                _order("order-3", "meal-1", 3, 540.0, "delivered", "2026-02-02T12:00:00+00:00"),
                _order("order-4", "meal-1", 1, 180.0, "pending", "2026-02-03T11:45:00+00:00"),
            ],
            "reviews": [
                {
                    "id": "review-1",
                    "order_id": "order-1",
                    "customer_id": CUSTOMER.id,
                    "chef_id": CHEF.id,
                    "rating": 5,
                    "comment": "Tastes like home",
                    "created_at": "2026-02-01T15:00:00+00:00",
                },
            ],
            "subscriptions": [
                {
                    "id": "sub-1",
                    "customer_id": CUSTOMER.id,
                    "chef_id": CHEF.id,
                    "plan_type": "weekly",
                    "meals_count": 7,
                    "meals_remaining": 4,
                    "price_per_meal": 160.0,
                    "total_price": 1120.0,
                    "status": "active",
                    "start_date": "2026-02-01",
                    "end_date": "2026-02-07",
                    "created_at": "2026-02-01T07:00:00+00:00",
                },
            ],
        }
    )

    auth = InMemoryAuthProvider()
    for identity in (ADMIN, CHEF, CUSTOMER):
        auth.register(identity.email or "", DEMO_PASSWORD, identity)
    return data, auth


def _order(
    order_id: str, meal_id: str, quantity: int, total: float, status: str, created_at: str
) -> dict:
    return {
        "id": order_id,
        "meal_id": meal_id,
        "customer_id": CUSTOMER.id,
        "chef_id": CHEF.id,
        "quantity": quantity,
        "total_price": total,
        "status": status,
        "created_at": created_at,
    }
