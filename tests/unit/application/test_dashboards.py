"""Unit tests for dashboard aggregators and their query handlers."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from homeplate.application.dashboards.admin_stats import (
    AdminStats,
    GetAdminStatsQuery,
    GetAdminStatsQueryHandler,
)
from homeplate.application.dashboards.customer_orders import (
    GetCustomerOrdersQuery,
    GetCustomerOrdersQueryHandler,
)
from homeplate.application.dashboards.earnings import (
    GetChefEarningsQuery,
    GetChefEarningsQueryHandler,
    aggregate_earnings,
)
from homeplate.application.dashboards.partner_stats import (
    GetPartnerStatsQuery,
    GetPartnerStatsQueryHandler,
)
from homeplate.application.fetchers.orders import OrderFetcher
from homeplate.application.fetchers.reviews import ReviewFetcher
from homeplate.domain.marketplace.order import Order
from homeplate.domain.shared.errors import NetworkError
from homeplate.infrastructure.in_memory import demo

UTC = timezone.utc


def make_order(
    order_id: str,
    total: float,
    status: str = "delivered",
    created_at: Optional[datetime] = datetime(2026, 3, 10, 12, 0, tzinfo=UTC),
) -> Order:
    return Order(
        id=order_id,
        meal_id="meal-1",
        customer_id="user-customer",
        chef_id="user-chef",
        total_price=total,
        status=status,
        created_at=created_at,
    )


class TestAggregateEarnings:
    def test_same_day_orders_form_one_group(self):
        orders = [make_order("o1", 100), make_order("o2", 200), make_order("o3", 300)]

        report = aggregate_earnings(orders, UTC)

        assert len(report.groups) == 1
        group = report.groups[0]
        assert group.date == date(2026, 3, 10)
        assert group.orders == 3
        assert group.revenue == 600
        assert group.earnings == pytest.approx(510)
        assert report.total_earnings == pytest.approx(510)

    @pytest.mark.parametrize("status", ["pending", "accepted", "cancelled", "rejected", "paid"])
    def test_only_delivered_orders_count(self, status):
        orders = [make_order("o1", 100), make_order("o2", 1000, status=status)]

        report = aggregate_earnings(orders, UTC)

        assert report.total_orders == 1
        assert report.total_revenue == 100
        assert report.total_earnings == pytest.approx(85)

    def test_groups_newest_first(self):
        orders = [
            make_order("o1", 100, created_at=datetime(2026, 3, 1, 9, tzinfo=UTC)),
            make_order("o2", 100, created_at=datetime(2026, 3, 3, 9, tzinfo=UTC)),
            make_order("o3", 100, created_at=datetime(2026, 3, 2, 9, tzinfo=UTC)),
        ]

        report = aggregate_earnings(orders, UTC)

        assert [g.date for g in report.groups] == [
            date(2026, 3, 3),
            date(2026, 3, 2),
            date(2026, 3, 1),
        ]

    def test_day_boundary_follows_timezone(self):
        late = make_order("o1", 100, created_at=datetime(2026, 3, 1, 20, 0, tzinfo=UTC))
        ist = timezone(timedelta(hours=5, minutes=30))

        assert aggregate_earnings([late], UTC).groups[0].date == date(2026, 3, 1)
        assert aggregate_earnings([late], ist).groups[0].date == date(2026, 3, 2)

    def test_empty_input(self):
        report = aggregate_earnings([], UTC)

        assert report.groups == ()
        assert report.total_orders == 0
        assert report.total_earnings == 0.0

    def test_only_undelivered_orders_is_empty(self):
        report = aggregate_earnings([make_order("o1", 100, status="pending")], UTC)
        assert report.groups == ()

    def test_order_without_timestamp_skipped(self, caplog):
        orders = [make_order("o1", 100), make_order("o2", 500, created_at=None)]

        report = aggregate_earnings(orders, UTC)

        assert report.total_orders == 1
        assert "without timestamp" in caplog.text

    def test_idempotent(self):
        orders = [make_order(f"o{i}", 50.0 * i) for i in range(1, 6)]

        assert aggregate_earnings(orders, UTC) == aggregate_earnings(orders, UTC)

    def test_totals_match_groups(self):
        orders = [
            make_order(f"o{i}", 37.5 * i, created_at=datetime(2026, 3, 1 + i % 4, 12, tzinfo=UTC))
            for i in range(1, 13)
        ]

        report = aggregate_earnings(orders, UTC)

        assert report.total_orders == sum(g.orders for g in report.groups) == 12
        assert report.total_earnings == pytest.approx(report.total_revenue * 0.85)
        for group in report.groups:
            assert group.earnings == pytest.approx(group.revenue * 0.85)


class TestChefEarningsHandler:
    @pytest.mark.asyncio
    async def test_demo_chef(self, data):
        handler = GetChefEarningsQueryHandler(OrderFetcher(data))

        report = await handler.handle(GetChefEarningsQuery(chef_user_id=demo.CHEF.id, tz=UTC))

        assert report.total_orders == 3
        assert report.total_revenue == 1080
        assert report.total_earnings == pytest.approx(918)
        assert [(g.date, g.orders) for g in report.groups] == [
            (date(2026, 2, 2), 1),
            (date(2026, 2, 1), 2),
        ]

    @pytest.mark.asyncio
    async def test_requests_delivered_rows_only(self, data):
        await GetChefEarningsQueryHandler(OrderFetcher(data)).handle(
            GetChefEarningsQuery(chef_user_id=demo.CHEF.id, tz=UTC)
        )

        spec = data.calls_to("orders")[0]
        assert spec.filter_value("chef_id") == demo.CHEF.id
        assert [(f.column, f.op, list(f.value)) for f in spec.filters if f.column == "status"] == [
            ("status", "in", ["delivered"])
        ]

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, data):
        data.fail_on("orders")

        with pytest.raises(NetworkError):
            await GetChefEarningsQueryHandler(OrderFetcher(data)).handle(
                GetChefEarningsQuery(chef_user_id=demo.CHEF.id)
            )


class TestAdminStatsHandler:
    @pytest.mark.asyncio
    async def test_counts(self, data):
        stats = await GetAdminStatsQueryHandler(data).handle(GetAdminStatsQuery())

        assert stats == AdminStats(total_chefs=1, pending_chefs=0, total_orders=4, pending_orders=1)

    @pytest.mark.asyncio
    async def test_count_only_queries(self, data):
        await GetAdminStatsQueryHandler(data).handle(GetAdminStatsQuery())

        assert len(data.calls) == 4
        assert all(spec.head and spec.count == "exact" for spec in data.calls)


class TestPartnerStatsHandler:
    @pytest.mark.asyncio
    async def test_demo_chef(self, data):
        handler = GetPartnerStatsQueryHandler(data, OrderFetcher(data))

        stats = await handler.handle(GetPartnerStatsQuery(chef_user_id=demo.CHEF.id))

        assert stats.total_orders == 4
        assert stats.pending_orders == 1
        assert stats.active_dishes == 1
        assert stats.total_earnings == pytest.approx(918)

    @pytest.mark.asyncio
    async def test_chef_without_orders(self, data):
        handler = GetPartnerStatsQueryHandler(data, OrderFetcher(data))

        stats = await handler.handle(GetPartnerStatsQuery(chef_user_id="user-new"))

        assert (stats.total_orders, stats.pending_orders, stats.active_dishes) == (0, 0, 0)
        assert stats.total_earnings == 0.0


class TestCustomerOrdersHandler:
    @pytest.mark.asyncio
    async def test_overview(self, data):
        handler = GetCustomerOrdersQueryHandler(OrderFetcher(data), ReviewFetcher(data))

        overview = await handler.handle(GetCustomerOrdersQuery(customer_id=demo.CUSTOMER.id))

        assert len(overview.orders) == 4
        assert overview.status_counts == {"delivered": 3, "pending": 1}
        assert overview.reviewable_order_ids == frozenset({"order-2", "order-3"})
        assert not overview.can_review("order-1")
        assert not overview.can_review("order-4")
