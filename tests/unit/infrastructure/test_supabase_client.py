"""Unit tests for SupabaseDataService with a mocked supabase client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from supabase import PostgrestAPIError

from homeplate.domain.shared.errors import (
    EntityNotFoundError,
    NetworkError,
    PermissionDeniedError,
    RejectedWriteError,
    RemoteServiceError,
)
from homeplate.infrastructure.supabase.client import SupabaseDataService, format_value

BUILDER_METHODS = ("select", "insert", "update", "delete", "eq", "in_", "is_", "order", "limit")


@pytest.fixture
def client() -> MagicMock:
    """Fixture providing a mocked supabase client whose query builder chains."""
    mock = MagicMock()
    builder = mock.table.return_value
    for name in BUILDER_METHODS:
        getattr(builder, name).return_value = builder
    builder.execute = AsyncMock(return_value=SimpleNamespace(data=[], count=None))
    return mock


@pytest.fixture
def service(client) -> SupabaseDataService:
    return SupabaseDataService("https://demo.supabase.co", "anon-key", client=client)


def api_error(code: str, message: str = "rejected") -> PostgrestAPIError:
    return PostgrestAPIError({"message": message, "code": code, "hint": None, "details": None})


def test_format_value():
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(42) == "42"
    assert format_value("pending") == "pending"


class TestSelect:
    @pytest.mark.asyncio
    async def test_filters_and_ordering(self, service, client):
        builder = client.table.return_value
        builder.execute.return_value = SimpleNamespace(data=[{"id": "m1"}], count=None)

        result = await (
            service.table("meals")
            .select("*")
            .eq("available", True)
            .in_("chef_id", ["u1", "u2"])
            .order("created_at", ascending=False)
            .limit(8)
            .execute()
        )

        client.table.assert_called_once_with("meals")
        builder.select.assert_called_once_with("*", count=None, head=False)
        builder.eq.assert_called_once_with("available", "true")
        builder.in_.assert_called_once_with("chef_id", ["u1", "u2"])
        builder.order.assert_called_once_with("created_at", desc=True)
        builder.limit.assert_called_once_with(8)
        assert result.data == [{"id": "m1"}]
        assert result.count is None

    @pytest.mark.asyncio
    async def test_null_filter(self, service, client):
        await service.table("orders").select("*").eq("delivery_partner_id", None).execute()

        client.table.return_value.is_.assert_called_once_with("delivery_partner_id", "null")

    @pytest.mark.asyncio
    async def test_head_count(self, service, client):
        builder = client.table.return_value
        builder.execute.return_value = SimpleNamespace(data=None, count=4)

        result = await service.table("orders").select("*", count="exact", head=True).execute()

        builder.select.assert_called_once_with("*", count="exact", head=True)
        assert result.data == []
        assert result.count == 4

    @pytest.mark.asyncio
    async def test_single_not_found(self, service):
        with pytest.raises(EntityNotFoundError):
            await service.table("meals").select("*").eq("id", "missing").single().execute()

    @pytest.mark.asyncio
    async def test_maybe_single(self, service, client):
        client.table.return_value.execute.return_value = SimpleNamespace(data=[{"id": "c1"}], count=None)

        result = await service.table("chefs").select("*").eq("user_id", "u1").maybe_single().execute()

        assert result.data == {"id": "c1"}


class TestWrites:
    @pytest.mark.asyncio
    async def test_insert(self, service, client):
        builder = client.table.return_value
        builder.execute.return_value = SimpleNamespace(data=[{"id": "r1", "rating": 5}], count=None)

        result = await service.table("reviews").insert({"rating": 5}).execute()

        builder.insert.assert_called_once_with([{"rating": 5}])
        assert result.data[0]["id"] == "r1"

    @pytest.mark.asyncio
    async def test_update_ignores_ordering(self, service, client):
        builder = client.table.return_value

        await (
            service.table("orders")
            .update({"status": "confirmed"})
            .eq("id", "o1")
            .order("created_at")
            .execute()
        )

        builder.update.assert_called_once_with({"status": "confirmed"})
        builder.eq.assert_called_once_with("id", "o1")
        builder.order.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete(self, service, client):
        builder = client.table.return_value

        await service.table("chef_specialties").delete().eq("id", "s1").execute()

        builder.delete.assert_called_once_with()
        builder.eq.assert_called_once_with("id", "s1")


class TestErrors:
    @pytest.mark.asyncio
    async def test_row_level_security(self, service, client):
        client.table.return_value.execute.side_effect = api_error("42501", "permission denied")

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.table("user_roles").select("*").execute()

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_constraint_on_write(self, service, client):
        client.table.return_value.execute.side_effect = api_error("23505", "duplicate key")

        with pytest.raises(RejectedWriteError, match="duplicate key"):
            await service.table("reviews").insert({"order_id": "o1"}).execute()

    @pytest.mark.asyncio
    async def test_data_error_on_read(self, service, client):
        client.table.return_value.execute.side_effect = api_error("22P02", "invalid input syntax")

        with pytest.raises(RemoteServiceError) as exc_info:
            await service.table("meals").select("*").eq("id", "x").execute()

        assert not isinstance(exc_info.value, RejectedWriteError)

    @pytest.mark.asyncio
    async def test_connection_failure(self, service, client):
        client.table.return_value.execute.side_effect = httpx.ConnectError("refused")

        with pytest.raises(NetworkError, match="failed"):
            await service.table("meals").select("*").execute()

    @pytest.mark.asyncio
    async def test_timeout(self, service, client):
        client.table.return_value.execute.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(NetworkError, match="timed out"):
            await service.table("meals").select("*").execute()


class TestAccessToken:
    def test_applies_token_to_client(self, service, client):
        service.set_access_token("user-jwt")

        client.postgrest.auth.assert_called_once_with("user-jwt")

    def test_reverts_to_anon_key(self, service, client):
        service.set_access_token(None)

        client.postgrest.auth.assert_called_once_with("anon-key")

    def test_no_client_created_before_use(self):
        service = SupabaseDataService("https://demo.supabase.co", "anon-key")

        service.set_access_token("user-jwt")

        assert service._client is None
