"""SQLModel definitions for income/expense transactions."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .columns import enum_column, timestamp_column
from .enums import DayOfWeek, PaymentType, TransactionKind, TransactionReason
from .user import utcnow


class Transaction(SQLModel, table=True):
    """A single income or expense entry charged against one payment method.

    ``amount`` is always positive; ``kind`` alone decides whether it raises or
    lowers the payment method balance.
    """

    __tablename__: ClassVar[str] = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    day: DayOfWeek = Field(sa_column=enum_column(DayOfWeek))
    nepali_date: str = Field(nullable=False, max_length=64)
    english_date: datetime = Field(sa_column=timestamp_column(index=True))
    kind: TransactionKind = Field(sa_column=enum_column(TransactionKind))
    amount: float = Field(nullable=False)
    reason: TransactionReason = Field(sa_column=enum_column(TransactionReason))
    payment_type: PaymentType = Field(sa_column=enum_column(PaymentType, index=True))
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    def signed_amount(self) -> float:
        """Return the balance effect of this transaction."""

        return signed_effect(self.kind, self.amount)


def signed_effect(kind: TransactionKind | str, amount: float) -> float:
    """Income adds ``amount`` to a balance, expense subtracts it."""

    return amount if TransactionKind(kind) is TransactionKind.INCOME else -amount
