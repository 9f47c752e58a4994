"""Column builders shared by the table models."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum


def _member_values(enum_cls: Iterable[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


def enum_column(enum_cls: type[Enum], *, index: bool = False) -> Column:
    """Build a non-nullable column persisting ``enum_cls`` members by value."""

    return Column(
        SAEnum(
            enum_cls,
            values_callable=_member_values,
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        index=index,
    )


def timestamp_column(*, index: bool = False) -> Column:
    """Build a non-nullable column holding naive UTC datetimes.

    The type is declared explicitly so every SQLModel release binds the same
    naive value instead of picking its own datetime mapping.
    """

    return Column(DateTime(timezone=False), nullable=False, index=index)


__all__ = ["enum_column", "timestamp_column"]
