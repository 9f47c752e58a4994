"""Read-only aggregates computed on demand from both stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelPaymentMethodRepository, SQLModelTransactionRepository
from ..models.enums import TransactionKind, TransactionReason
from .storage import storage_scope


@dataclass(frozen=True, slots=True)
class LedgerSummary:
    """Totals for one owner.

    ``total_balance`` sums the cached payment method balances, so it drifts
    from ``total_income - total_expense`` after a manual balance override.
    """

    total_income: float
    total_expense: float
    total_balance: float
    last_updated: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalIncome": self.total_income,
            "totalExpense": self.total_expense,
            "totalBalance": self.total_balance,
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class ReasonTotal:
    reason: TransactionReason
    amount: float

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason.value, "amount": self.amount}


def summarize(session_factory: SessionFactory, owner_id: int) -> LedgerSummary:
    """Rescan transactions and balances; ``last_updated`` is the computation time."""

    with storage_scope(
        session_factory, operation="fetching", entity="summary", owner_id=owner_id
    ) as session:
        totals = SQLModelTransactionRepository(session).totals_by_kind(owner_id)
        total_balance = SQLModelPaymentMethodRepository(session).total_balance(owner_id)

    return LedgerSummary(
        total_income=totals[TransactionKind.INCOME],
        total_expense=totals[TransactionKind.EXPENSE],
        total_balance=total_balance,
        last_updated=datetime.now(timezone.utc),
    )


def expense_by_reason(session_factory: SessionFactory, owner_id: int) -> list[ReasonTotal]:
    """Expense totals grouped by reason, largest first."""

    with storage_scope(
        session_factory, operation="fetching", entity="summary", owner_id=owner_id
    ) as session:
        rows = SQLModelTransactionRepository(session).expense_by_reason(owner_id)
    return [ReasonTotal(reason=reason, amount=amount) for reason, amount in rows]
