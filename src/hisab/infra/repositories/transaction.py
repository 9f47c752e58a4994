"""SQLModel implementation of the transaction repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import String, cast, delete, func, or_, update
from sqlmodel import Session, select

from ...models.enums import PaymentType, TransactionKind, TransactionReason
from ...models.transaction import Transaction, signed_effect


@dataclass
class SQLModelTransactionRepository:
    """Transaction repository bound to one SQLModel session.

    The caller owns the session, so a row write and the matching balance
    adjustment commit or roll back together.
    """

    session: Session

    def list_for_owner(
        self,
        owner_id: int,
        *,
        kind: Optional[TransactionKind] = None,
        search: Optional[str] = None,
    ) -> list[Transaction]:
        statement = select(Transaction).where(Transaction.user_id == owner_id)
        if kind is not None:
            statement = statement.where(Transaction.kind == kind)

        term = (search or "").strip()
        if term:
            pattern = f"%{term}%"
            # Enum columns validate bound values, so compare them as plain text
            statement = statement.where(
                or_(
                    cast(Transaction.reason, String).ilike(pattern),
                    cast(Transaction.payment_type, String).ilike(pattern),
                    Transaction.notes.ilike(pattern),  # type: ignore[union-attr]
                )
            )

        # Equal dates keep insertion order
        statement = statement.order_by(
            Transaction.english_date.desc(),  # type: ignore[attr-defined]
            Transaction.id.asc(),  # type: ignore[union-attr]
        )
        return list(self.session.exec(statement).all())

    def get(self, owner_id: int, transaction_id: int) -> Optional[Transaction]:
        return self.session.exec(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .where(Transaction.user_id == owner_id)
        ).first()

    def add(self, transaction: Transaction) -> Transaction:
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def save(self, transaction: Transaction) -> Transaction:
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def lock_for_write(self, owner_id: int, transaction_id: int) -> bool:
        """Take the write lock on one row before it is read for a mutation.

        A no-op UPDATE holds the row lock (the database write lock on SQLite)
        until commit, so a concurrent mutation of the same transaction waits
        and then reads the committed row. Returns False when no row matched.
        """

        statement = (
            update(Transaction)
            .where(Transaction.id == transaction_id)
            .where(Transaction.user_id == owner_id)
            .values(user_id=Transaction.user_id)
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def remove(self, owner_id: int, transaction_id: int) -> bool:
        """Delete one row; False when it was already gone."""

        statement = (
            delete(Transaction)
            .where(Transaction.id == transaction_id)
            .where(Transaction.user_id == owner_id)
            .execution_options(synchronize_session="evaluate")
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def totals_by_kind(self, owner_id: int) -> dict[TransactionKind, float]:
        statement = (
            select(Transaction.kind, func.sum(Transaction.amount))
            .where(Transaction.user_id == owner_id)
            .group_by(Transaction.kind)
        )
        totals = {kind: 0.0 for kind in TransactionKind}
        for kind, total in self.session.exec(statement).all():
            totals[TransactionKind(kind)] = float(total or 0.0)
        return totals

    def expense_by_reason(self, owner_id: int) -> list[tuple[TransactionReason, float]]:
        total = func.sum(Transaction.amount)
        statement = (
            select(Transaction.reason, total)
            .where(Transaction.user_id == owner_id)
            .where(Transaction.kind == TransactionKind.EXPENSE)
            .group_by(Transaction.reason)
        )
        rows = [
            (TransactionReason(reason), float(amount or 0.0))
            for reason, amount in self.session.exec(statement).all()
        ]
        rows.sort(key=lambda row: (-row[1], row[0].value))
        return rows

    def net_by_payment_type(self, owner_id: int) -> dict[PaymentType, float]:
        statement = select(Transaction.payment_type, Transaction.kind, Transaction.amount).where(
            Transaction.user_id == owner_id
        )
        totals = {payment_type: 0.0 for payment_type in PaymentType}
        for payment_type, kind, amount in self.session.exec(statement).all():
            totals[PaymentType(payment_type)] += signed_effect(kind, amount)
        return totals
