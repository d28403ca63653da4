"""In-memory data service implementation.

Provides an in-memory implementation of the IDataService port for tests
and demo mode. Tables are lists of dict rows; queries follow the same
semantics as the Supabase adapter (exact filters, multi-key ordering,
limit, exact counts).
"""

import asyncio
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set
from uuid import uuid4

from homeplate.domain.shared.errors import HomePlateError, NetworkError
from homeplate.domain.shared.ports.data_service import (
    Filter,
    QueryAction,
    QueryResult,
    QuerySpec,
    Row,
    TableQuery,
)


def _matches(row: Row, filters: Iterable[Filter]) -> bool:
    for flt in filters:
        value = row.get(flt.column)
        if flt.op == "in":
            if value not in flt.value:
                return False
        elif value != flt.value:
            return False
    return True


def _project(row: Row, columns: str) -> Row:
    if columns.strip() == "*":
        return deepcopy(row)
    names = [name.strip() for name in columns.split(",") if name.strip()]
    return {name: deepcopy(row[name]) for name in names if name in row}


class InMemoryDataService:
    """
    In-memory implementation of IDataService.

    Test hooks:
    - ``fail_on(table)`` makes every call on ``table`` raise (NetworkError
      by default) until ``clear_failures()``
    - ``hold(*tables)`` keeps responses in flight until ``release()``
    - ``calls`` records every executed QuerySpec

    Thread safety: NOT thread-safe (single event loop only)
    Persistence: Data lost on process restart (in-memory only)

    Example:
        >>> service = InMemoryDataService({"meals": [{"id": "m1", "available": True}]})
        >>> result = await service.table("meals").select("*").eq("available", True).execute()
        >>> len(result.data)
        1
    """

    def __init__(self, tables: Optional[Mapping[str, Iterable[Row]]] = None) -> None:
        """Initialize service with optional seed rows per table."""
        self._tables: Dict[str, List[Row]] = {}
        self._failures: Dict[str, HomePlateError] = {}
        self._gate: Optional[asyncio.Event] = None
        self._held_tables: Set[str] = set()
        self.calls: List[QuerySpec] = []
        for name, rows in (tables or {}).items():
            self.seed(name, rows)

    # ── Test helpers ─────────────────────────────────────────

    def seed(self, table: str, rows: Iterable[Row]) -> None:
        self._tables.setdefault(table, []).extend(deepcopy(dict(row)) for row in rows)

    def rows(self, table: str) -> List[Row]:
        """Deep copy of every stored row of ``table``."""
        return deepcopy(self._tables.get(table, []))

    def fail_on(self, table: str, error: Optional[HomePlateError] = None) -> None:
        self._failures[table] = error or NetworkError(f"Simulated network failure on {table}")

    def clear_failures(self) -> None:
        self._failures.clear()

    def hold(self, *tables: str) -> None:
        """Keep responses (of ``tables`` only, when given) in flight until release()."""
        self._gate = asyncio.Event()
        self._held_tables = set(tables)

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()
            self._gate = None
            self._held_tables = set()

    def calls_to(self, table: str) -> List[QuerySpec]:
        return [spec for spec in self.calls if spec.table == table]

    # ── IDataService ─────────────────────────────────────────

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    async def execute(self, spec: QuerySpec) -> QueryResult:
        self.calls.append(spec)

        gate = self._gate
        if gate is not None and (not self._held_tables or spec.table in self._held_tables):
            await gate.wait()
        else:
            # Yield like a real network call would
            await asyncio.sleep(0)

        error = self._failures.get(spec.table)
        if error is not None:
            raise error

        if spec.action == QueryAction.SELECT:
            return self._select(spec)
        if spec.action == QueryAction.INSERT:
            return self._insert(spec)
        if spec.action == QueryAction.UPDATE:
            return self._update(spec)
        return self._delete(spec)

    def _select(self, spec: QuerySpec) -> QueryResult:
        rows = [row for row in self._tables.get(spec.table, []) if _matches(row, spec.filters)]

        # Stable sorts applied last key first give multi-key ordering;
        # nulls sort last ascending and first descending
        for ordering in reversed(spec.orderings):
            rows.sort(
                key=lambda row: (row.get(ordering.column) is None, row.get(ordering.column)),
                reverse=not ordering.ascending,
            )

        count = len(rows) if spec.count else None
        if spec.limit is not None:
            rows = rows[: spec.limit]
        if spec.head:
            return QueryResult(data=[], count=count)
        return QueryResult(data=[_project(row, spec.columns) for row in rows], count=count)

    def _insert(self, spec: QuerySpec) -> QueryResult:
        stored = self._tables.setdefault(spec.table, [])
        inserted: List[Row] = []
        for payload in spec.payload or []:
            row = deepcopy(dict(payload))
            row.setdefault("id", str(uuid4()))
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            stored.append(row)
            inserted.append(_project(row, spec.columns))
        return QueryResult(data=inserted, count=len(inserted) if spec.count else None)

    def _update(self, spec: QuerySpec) -> QueryResult:
        values: Dict[str, Any] = dict(spec.payload or {})
        updated: List[Row] = []
        for row in self._tables.get(spec.table, []):
            if _matches(row, spec.filters):
                row.update(deepcopy(values))
                updated.append(_project(row, spec.columns))
        return QueryResult(data=updated, count=len(updated) if spec.count else None)

    def _delete(self, spec: QuerySpec) -> QueryResult:
        kept: List[Row] = []
        deleted: List[Row] = []
        for row in self._tables.get(spec.table, []):
            if _matches(row, spec.filters):
                deleted.append(_project(row, spec.columns))
            else:
                kept.append(row)
        self._tables[spec.table] = kept
        return QueryResult(data=deleted, count=len(deleted) if spec.count else None)
