"""Common base for rows fetched from the remote store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

TRow = TypeVar("TRow", bound="RemoteRow")


class RemoteRow(BaseModel):
    """
    Immutable, validated view of a backend row.

    Unknown columns are ignored so that schema additions on the backend do
    not break the client.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=False)

    @classmethod
    def from_row(cls: Type[TRow], row: Mapping[str, Any]) -> TRow:
        return cls.model_validate(dict(row))


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
