"""Owner scope for transactions and payment methods."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .columns import timestamp_column


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what SQLite hands back."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(SQLModel, table=True):
    """Opaque owner; every ledger row is partitioned by ``User.id``."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
