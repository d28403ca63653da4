"""
Supabase data service.

Translates QuerySpec objects into calls on the supabase client's
PostgREST query builder. No retries: every failure is mapped onto the
domain error taxonomy and returned to the caller.
"""

from typing import Any, Optional

import httpx
import structlog
from supabase import AsyncClient, AsyncClientOptions, PostgrestAPIError

from homeplate.domain.shared.ports.data_service import (
    QueryAction,
    QueryResult,
    QuerySpec,
    TableQuery,
)
from homeplate.infrastructure.supabase.errors import network_error, query_error

logger = structlog.get_logger(__name__)


def format_value(value: Any) -> str:
    """PostgREST literal for a filter value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SupabaseDataService:
    """
    IDataService over the supabase client.

    Requests carry the anon key, and the signed-in user's access token
    once ``set_access_token`` is called, so row-level security applies.
    The client is created on first use.

    Example:
        >>> service = SupabaseDataService(url, anon_key)
        >>> result = await service.table("meals").select("*").eq("available", True).execute()
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 10.0,
        client: Optional[AsyncClient] = None,
    ) -> None:
        """Initialize data service.

        Args:
            url: Project URL
            anon_key: Public API key
            timeout: Request timeout in seconds
            client: Prebuilt supabase client (tests)
        """
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._timeout = timeout
        self._access_token: Optional[str] = None
        self._client = client

    def set_access_token(self, token: Optional[str]) -> None:
        """Act as the signed-in user (None reverts to the anon key)."""
        self._access_token = token
        if self._client is not None:
            self._client.postgrest.auth(token or self._anon_key)

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = AsyncClient(
                self._url,
                self._anon_key,
                options=AsyncClientOptions(
                    postgrest_client_timeout=self._timeout,
                    auto_refresh_token=False,
                    persist_session=False,
                ),
            )
            if self._access_token:
                self._client.postgrest.auth(self._access_token)
        return self._client

    def _build(self, spec: QuerySpec) -> Any:
        table = self._get_client().table(spec.table)

        if spec.action == QueryAction.INSERT:
            return table.insert(spec.payload)
        if spec.action == QueryAction.UPDATE:
            query = table.update(spec.payload)
        elif spec.action == QueryAction.DELETE:
            query = table.delete()
        else:
            query = table.select(spec.columns, count=spec.count, head=spec.head)

        for flt in spec.filters:
            if flt.op == "in":
                query = query.in_(flt.column, [format_value(v) for v in flt.value])
            elif flt.value is None:
                query = query.is_(flt.column, "null")
            else:
                query = query.eq(flt.column, format_value(flt.value))

        if spec.action == QueryAction.SELECT:
            for ordering in spec.orderings:
                query = query.order(ordering.column, desc=not ordering.ascending)
            if spec.limit is not None:
                query = query.limit(spec.limit)
        return query

    async def execute(self, spec: QuerySpec) -> QueryResult:
        """
        Execute ``spec`` with one request.

        Raises:
            NetworkError: Transport failure or timeout
            PermissionDeniedError: Row-level security or token refused
            RejectedWriteError: Write refused by a constraint
            RemoteServiceError: Any other failure
        """
        write = spec.action != QueryAction.SELECT
        try:
            response = await self._build(spec).execute()
        except PostgrestAPIError as e:
            raise query_error(e, spec.table, write=write) from e
        except httpx.TransportError as e:
            raise network_error(e, spec.table) from e

        data = [] if spec.head else list(response.data or [])
        count = response.count if spec.count else None

        logger.debug(
            "Remote query",
            action=spec.action.value,
            table=spec.table,
            rows=len(data),
            count=count,
        )
        return QueryResult(data=data, count=count)
