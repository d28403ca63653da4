"""Admin dashboard counters."""

from dataclasses import dataclass
import logging

from homeplate.application.dashboards.counts import count_rows
from homeplate.domain.marketplace.chef import VerificationStatus
from homeplate.domain.marketplace.order import OrderStatus
from homeplate.domain.shared.ports.data_service import IDataService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminStats:
    """
    Platform-wide counters.

    Attributes:
        total_chefs: All chef profiles
        pending_chefs: Chef profiles awaiting verification
        total_orders: All orders
        pending_orders: Orders not yet accepted or rejected
    """

    total_chefs: int
    pending_chefs: int
    total_orders: int
    pending_orders: int


@dataclass(frozen=True)
class GetAdminStatsQuery:
    """Query: Get admin dashboard counters."""


class GetAdminStatsQueryHandler:
    """
    Handler for GetAdminStatsQuery.

    Runs four independent count-only queries; no list is fetched.
    Callers gate access with RoleResolver first.
    """

    def __init__(self, data_service: IDataService):
        self._data = data_service

    async def handle(self, query: GetAdminStatsQuery) -> AdminStats:
        stats = AdminStats(
            total_chefs=await count_rows(self._data, "chefs"),
            pending_chefs=await count_rows(
                self._data, "chefs", verification_status=VerificationStatus.PENDING.value
            ),
            total_orders=await count_rows(self._data, "orders"),
            pending_orders=await count_rows(
                self._data, "orders", status=OrderStatus.PENDING.value
            ),
        )
        logger.debug("Admin stats computed", extra=stats.__dict__)
        return stats
