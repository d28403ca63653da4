"""Count-only queries shared by the dashboards."""

from typing import Any

from homeplate.domain.shared.ports.data_service import IDataService


async def count_rows(data_service: IDataService, table: str, **filters: Any) -> int:
    """Exact row count of ``table`` matching ``filters``, without fetching rows."""
    query = data_service.table(table).select("*", count="exact", head=True)
    for column, value in filters.items():
        query = query.eq(column, value)
    result = await query.execute()
    return result.count or 0
