"""Per-owner payment method balances."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .columns import enum_column, timestamp_column
from .enums import PaymentType
from .user import utcnow


class PaymentMethod(SQLModel, table=True):
    """Cached running balance for one (owner, payment type) pair."""

    __tablename__: ClassVar[str] = "payment_methods"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_payment_methods_owner_name"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: PaymentType = Field(sa_column=enum_column(PaymentType))
    balance: float = Field(default=0.0, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
