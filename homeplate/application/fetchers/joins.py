"""Client-side joins.

The backend offers no joins for the display fields screens need (meal
title, customer name, chef name), so they are looked up by id after the
parent rows are fetched. Two strategies produce identical output:

- ``batch``: one ``in`` request per related table;
- ``per_row``: one request per distinct id, issued concurrently and paired
  with its result by id.

A failed lookup never drops a parent row; callers fall back to a label.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from homeplate.domain.shared.errors import HomePlateError
from homeplate.domain.shared.ports.data_service import IDataService, Row

logger = logging.getLogger(__name__)


class JoinStrategy(str, Enum):
    BATCH = "batch"
    PER_ROW = "per_row"


def distinct_ids(ids: Iterable[Optional[str]]) -> List[str]:
    """Non-empty ids, first-seen order, no duplicates."""
    return list(dict.fromkeys(str(i) for i in ids if i))


def label(names: Dict[str, str], key: Optional[str], fallback: str) -> str:
    if key is None:
        return fallback
    return names.get(key) or fallback


class RelatedLookup:
    """
    Looks up related rows by key.

    Example:
        >>> lookup = RelatedLookup(data_service, JoinStrategy.BATCH)
        >>> names = await lookup.values("profiles", ["u1", "u2"], "name")
        >>> label(names, "u3", "Customer")
        'Customer'
    """

    def __init__(
        self, data_service: IDataService, strategy: JoinStrategy = JoinStrategy.BATCH
    ) -> None:
        self._data = data_service
        self._strategy = strategy

    @property
    def strategy(self) -> JoinStrategy:
        return self._strategy

    async def rows_by(
        self,
        table: str,
        column: str,
        ids: Iterable[Optional[str]],
        columns: str = "*",
        where: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, List[Row]]:
        """
        Related rows grouped by ``column``.

        Args:
            table: Related table
            column: Column holding the parent's key
            ids: Parent keys (duplicates and blanks ignored)
            columns: Columns to select
            where: Extra exact filters applied to every lookup

        Ids whose lookup failed, or that have no related row, are absent
        from the result.
        """
        keys = distinct_ids(ids)
        if not keys:
            return {}

        if self._strategy == JoinStrategy.PER_ROW:
            pairs = await asyncio.gather(
                *(self._rows_for(table, column, key, columns, where) for key in keys)
            )
            return {key: rows for key, rows in pairs if rows}

        query = self._data.table(table).select(columns).in_(column, keys)
        for name, value in (where or {}).items():
            query = query.eq(name, value)
        try:
            result = await query.execute()
        except HomePlateError as e:
            logger.warning(
                "Related lookup failed",
                extra={"table": table, "ids": len(keys), "error": str(e)},
            )
            return {}

        grouped: Dict[str, List[Row]] = {}
        for row in result.data or []:
            grouped.setdefault(str(row.get(column)), []).append(row)
        return grouped

    async def values(
        self,
        table: str,
        ids: Iterable[Optional[str]],
        value_column: str,
        key_column: str = "id",
    ) -> Dict[str, Any]:
        """Map each key to ``value_column`` of its first related row."""
        grouped = await self.rows_by(
            table, key_column, ids, columns=f"{key_column},{value_column}"
        )
        return {
            key: rows[0].get(value_column)
            for key, rows in grouped.items()
            if rows[0].get(value_column)
        }

    async def names(self, user_ids: Iterable[Optional[str]]) -> Dict[str, str]:
        """Display names from ``profiles``."""
        return await self.values("profiles", user_ids, "name")

    async def _rows_for(
        self,
        table: str,
        column: str,
        key: str,
        columns: str,
        where: Optional[Mapping[str, Any]],
    ) -> Tuple[str, Optional[List[Row]]]:
        query = self._data.table(table).select(columns).eq(column, key)
        for name, value in (where or {}).items():
            query = query.eq(name, value)
        try:
            result = await query.execute()
        except HomePlateError as e:
            logger.warning(
                "Related lookup failed",
                extra={"table": table, "id": key, "error": str(e)},
            )
            return key, None
        return key, list(result.data or [])
