"""Remote data service port (interface).

Defines the contract for reads and writes against the managed backend.
The chainable query builder is part of the contract: fetchers describe
a query with ``table(...).select(...).eq(...).order(...).limit(...)``
and adapters only have to execute the resulting immutable QuerySpec.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from homeplate.domain.shared.errors import EntityNotFoundError, RemoteServiceError

Row = Dict[str, Any]


class QueryAction(str, Enum):
    """Kind of remote operation."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Filter:
    """Exact-match filter: ``column = value`` or ``column in values``."""

    column: str
    op: str
    value: Any


@dataclass(frozen=True)
class Ordering:
    """Sort key."""

    column: str
    ascending: bool = True


@dataclass(frozen=True)
class QuerySpec:
    """
    Immutable description of one remote call.

    Attributes:
        table: Target table name
        action: select / insert / update / delete
        columns: Column list for select ("*" for all)
        filters: Exact filters, all of which must match
        orderings: Sort keys, applied in order
        limit: Maximum number of rows
        payload: Rows to insert, or column values to update
        count: "exact" to request a row count
        head: Count-only query, no row payload
    """

    table: str
    action: QueryAction = QueryAction.SELECT
    columns: str = "*"
    filters: Tuple[Filter, ...] = ()
    orderings: Tuple[Ordering, ...] = ()
    limit: Optional[int] = None
    payload: Optional[Union[List[Row], Row]] = None
    count: Optional[str] = None
    head: bool = False

    def filter_value(self, column: str) -> Any:
        """Return the value of the first eq filter on ``column`` (or None)."""
        for flt in self.filters:
            if flt.column == column and flt.op == "eq":
                return flt.value
        return None


@dataclass(frozen=True)
class QueryResult:
    """
    Result of an executed query.

    ``data`` is a list of rows, except after ``single()``/``maybe_single()``
    where it is one row (or None).
    """

    data: Any
    count: Optional[int] = None


class IQueryExecutor(Protocol):
    """Adapter side of the contract: run a QuerySpec against the backend."""

    async def execute(self, spec: QuerySpec) -> QueryResult:
        """
        Execute a query.

        Returns:
            QueryResult whose data is always a list of rows

        Raises:
            NetworkError: transport failure
            PermissionDeniedError: credentials refused
            RejectedWriteError: backend refused a write
            RemoteServiceError: any other backend failure
        """
        ...


class TableQuery:
    """
    Chainable query builder bound to an executor.

    Example:
        >>> rows = await (
        ...     service.table("orders")
        ...     .select("*")
        ...     .eq("chef_id", user_id)
        ...     .order("created_at", ascending=False)
        ...     .execute()
        ... )
    """

    def __init__(self, executor: IQueryExecutor, table: str) -> None:
        self._executor = executor
        self._spec = QuerySpec(table=table)
        self._expect: Optional[str] = None

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def select(
        self, columns: str = "*", *, count: Optional[str] = None, head: bool = False
    ) -> "TableQuery":
        self._spec = replace(
            self._spec, action=QueryAction.SELECT, columns=columns, count=count, head=head
        )
        return self

    def insert(self, rows: Union[Row, Sequence[Row]]) -> "TableQuery":
        payload = [dict(rows)] if isinstance(rows, Mapping) else [dict(r) for r in rows]
        self._spec = replace(self._spec, action=QueryAction.INSERT, payload=payload)
        return self

    def update(self, values: Row) -> "TableQuery":
        self._spec = replace(self._spec, action=QueryAction.UPDATE, payload=dict(values))
        return self

    def delete(self) -> "TableQuery":
        self._spec = replace(self._spec, action=QueryAction.DELETE)
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter(Filter(column, "eq", value))

    def in_(self, column: str, values: Sequence[Any]) -> "TableQuery":
        return self._add_filter(Filter(column, "in", tuple(values)))

    def order(self, column: str, *, ascending: bool = True) -> "TableQuery":
        self._spec = replace(
            self._spec, orderings=self._spec.orderings + (Ordering(column, ascending),)
        )
        return self

    def limit(self, count: int) -> "TableQuery":
        self._spec = replace(self._spec, limit=count)
        return self

    def single(self) -> "TableQuery":
        """Expect exactly one row; EntityNotFoundError when none matches."""
        self._expect = "single"
        return self

    def maybe_single(self) -> "TableQuery":
        """Expect at most one row; data is None when none matches."""
        self._expect = "maybe_single"
        return self

    def _add_filter(self, flt: Filter) -> "TableQuery":
        self._spec = replace(self._spec, filters=self._spec.filters + (flt,))
        return self

    async def execute(self) -> QueryResult:
        result = await self._executor.execute(self._spec)
        if self._expect is None:
            return result

        rows = list(result.data or [])
        if len(rows) > 1:
            raise RemoteServiceError(
                f"Expected a single {self._spec.table} row, got {len(rows)}"
            )
        if rows:
            return QueryResult(data=rows[0], count=result.count)
        if self._expect == "single":
            identifier = self._spec.filter_value("id")
            raise EntityNotFoundError(
                self._spec.table, str(identifier) if identifier is not None else None
            )
        return QueryResult(data=None, count=result.count)


class IDataService(Protocol):
    """
    Interface of the remote relational store.

    Implementations:
    - SupabaseDataService (supabase client, production)
    - InMemoryDataService (tests and demo mode)
    """

    def table(self, name: str) -> TableQuery:
        """Start a query against ``name``."""
        ...
