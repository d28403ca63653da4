"""Unit tests for RoleResolver.

The admin check always reads ``user_roles`` and fails closed.
"""

import pytest

from homeplate.application.auth.role_resolver import (
    HOME_PATH,
    LOGIN_PATH,
    NO_ADMIN_ACCESS,
    NO_CHEF_ACCESS,
    SIGN_IN_NOTICE,
    RoleResolver,
    navigation_role,
)
from homeplate.domain.session.identity import Identity
from homeplate.domain.session.roles import EffectiveRole, Role, ScreenAccess
from homeplate.domain.shared.errors import PermissionDeniedError
from homeplate.domain.shared.ports.data_service import QueryResult, QuerySpec, TableQuery
from homeplate.infrastructure.in_memory import demo


class StaticRows:
    """Data service answering every query with the same rows."""

    def __init__(self, *rows) -> None:
        self._rows = rows

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    async def execute(self, spec: QuerySpec) -> QueryResult:
        return QueryResult(data=[dict(row) for row in self._rows])


@pytest.fixture
def resolver(data) -> RoleResolver:
    return RoleResolver(data)


class TestNavigationRole:
    @pytest.mark.parametrize(
        "claim,expected",
        [
            ("chef", EffectiveRole.CHEF),
            ("customer", EffectiveRole.CUSTOMER),
            (None, EffectiveRole.CUSTOMER),
            ("admin", EffectiveRole.CUSTOMER),
        ],
    )
    def test_claim_mapping(self, claim, expected):
        assert navigation_role(Identity(id="u1", role_claim=claim)) == expected

    def test_anonymous(self):
        assert navigation_role(None) == EffectiveRole.ANONYMOUS


class TestHasRole:
    @pytest.mark.asyncio
    async def test_assigned_role(self, resolver):
        assert await resolver.has_role(demo.ADMIN, Role.ADMIN)
        assert await resolver.has_role(demo.CHEF, Role.CHEF)

    @pytest.mark.asyncio
    async def test_missing_role(self, resolver):
        assert not await resolver.has_role(demo.CHEF, Role.ADMIN)

    @pytest.mark.asyncio
    async def test_anonymous_has_no_role(self, resolver, data):
        assert not await resolver.has_role(None, Role.CUSTOMER)
        assert data.calls_to("user_roles") == []

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_closed(self, resolver, data):
        data.fail_on("user_roles")
        assert not await resolver.has_role(demo.ADMIN, Role.ADMIN)

    @pytest.mark.asyncio
    async def test_permission_denied_fails_closed(self, resolver, data):
        data.fail_on("user_roles", PermissionDeniedError("RLS", status_code=403))
        assert not await resolver.has_role(demo.ADMIN, Role.ADMIN)

    @pytest.mark.asyncio
    async def test_query_shape(self, resolver, data):
        await resolver.has_role(demo.ADMIN, Role.ADMIN)

        spec = data.calls_to("user_roles")[0]
        assert spec.filter_value("user_id") == demo.ADMIN.id
        assert spec.filter_value("role") == "admin"
        assert spec.limit == 1

    @pytest.mark.asyncio
    async def test_row_must_match_user_and_role(self):
        granted = RoleResolver(StaticRows({"user_id": demo.ADMIN.id, "role": "admin"}))
        other_user = RoleResolver(StaticRows({"user_id": demo.CHEF.id, "role": "admin"}))

        assert await granted.has_role(demo.ADMIN, Role.ADMIN)
        assert not await other_user.has_role(demo.ADMIN, Role.ADMIN)

    @pytest.mark.asyncio
    async def test_malformed_rows_fail_closed(self):
        resolver = RoleResolver(
            StaticRows({"user_id": demo.ADMIN.id, "role": "superuser"}, {"role": "admin"})
        )

        assert not await resolver.has_role(demo.ADMIN, Role.ADMIN)


class TestResolveRole:
    @pytest.mark.asyncio
    async def test_public_screen_needs_nothing(self, resolver, data):
        decision = await resolver.resolve_role(None, ScreenAccess.PUBLIC)

        assert decision.granted
        assert decision.effective_role == EffectiveRole.ANONYMOUS
        assert data.calls == []

    @pytest.mark.asyncio
    async def test_anonymous_sent_to_login(self, resolver):
        decision = await resolver.resolve_role(None, ScreenAccess.AUTHENTICATED)

        assert not decision.granted
        assert decision.redirect_to == LOGIN_PATH
        assert decision.notice == SIGN_IN_NOTICE

    @pytest.mark.asyncio
    async def test_authenticated_screen(self, resolver):
        decision = await resolver.resolve_role(demo.CUSTOMER, ScreenAccess.AUTHENTICATED)
        assert decision.granted

    @pytest.mark.asyncio
    async def test_chef_claim_without_admin_row_is_denied(self, resolver):
        """A chef claim never opens the admin screen."""
        decision = await resolver.resolve_role(demo.CHEF, ScreenAccess.ADMIN)

        assert not decision.granted
        assert decision.redirect_to == HOME_PATH
        assert decision.notice == NO_ADMIN_ACCESS
        assert decision.effective_role == EffectiveRole.CHEF

    @pytest.mark.asyncio
    async def test_admin_claim_alone_is_not_enough(self, resolver):
        impostor = Identity(id="user-customer", role_claim="admin")

        decision = await resolver.resolve_role(impostor, ScreenAccess.ADMIN)

        assert not decision.granted

    @pytest.mark.asyncio
    async def test_admin_row_grants_admin(self, resolver):
        """The demo admin carries a customer claim; the row decides."""
        decision = await resolver.resolve_role(demo.ADMIN, ScreenAccess.ADMIN)

        assert decision.granted
        assert decision.effective_role == EffectiveRole.ADMIN

    @pytest.mark.asyncio
    async def test_admin_denied_when_lookup_fails(self, resolver, data):
        data.fail_on("user_roles")

        decision = await resolver.resolve_role(demo.ADMIN, ScreenAccess.ADMIN)

        assert not decision.granted
        assert decision.notice == NO_ADMIN_ACCESS

    @pytest.mark.asyncio
    async def test_chef_claim_without_chef_row_is_denied(self, resolver):
        pretender = Identity(id="user-customer", role_claim="chef")

        decision = await resolver.resolve_role(pretender, ScreenAccess.CHEF)

        assert not decision.granted
        assert decision.notice == NO_CHEF_ACCESS

    @pytest.mark.asyncio
    async def test_chef_row_grants_chef(self, resolver):
        decision = await resolver.resolve_role(demo.CHEF, ScreenAccess.CHEF)
        assert decision.granted
