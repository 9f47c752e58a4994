"""SQLModel implementation of the payment method repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.enums import PaymentType
from ...models.payment_method import PaymentMethod
from ...models.user import utcnow

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


@dataclass
class SQLModelPaymentMethodRepository:
    """Payment method repository bound to one SQLModel session."""

    session: Session

    def list_for_owner(self, owner_id: int) -> list[PaymentMethod]:
        statement = (
            select(PaymentMethod)
            .where(PaymentMethod.user_id == owner_id)
            .order_by(PaymentMethod.id)  # type: ignore[arg-type]
        )
        return list(self.session.exec(statement).all())

    def get_by_name(self, owner_id: int, name: PaymentType) -> Optional[PaymentMethod]:
        return self.session.exec(
            select(PaymentMethod)
            .where(PaymentMethod.user_id == owner_id)
            .where(PaymentMethod.name == name)
        ).first()

    def insert_if_absent(self, owner_id: int, name: PaymentType, balance: float = 0.0) -> bool:
        """Create the (owner, name) row unless the unique constraint says it exists."""

        values = {
            "user_id": owner_id,
            "name": name,
            "balance": balance,
            "updated_at": utcnow(),
        }
        dialect = self.session.get_bind().dialect.name
        insert_factory = _UPSERT_DIALECTS.get(dialect)
        if insert_factory is not None:
            statement = (
                insert_factory(PaymentMethod.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["user_id", "name"])
            )
            result = self.session.exec(statement)  # type: ignore[call-overload]
            return bool(result.rowcount)

        try:
            with self.session.begin_nested():
                self.session.add(PaymentMethod(**values))
        except IntegrityError:
            logger.debug(
                "Payment method already provisioned",
                extra={"owner_id": owner_id, "payment_method": name.value},
            )
            return False
        return True

    def add_to_balance(self, owner_id: int, name: PaymentType, delta: float) -> bool:
        statement = (
            update(PaymentMethod)
            .where(PaymentMethod.user_id == owner_id)
            .where(PaymentMethod.name == name)
            .values(balance=PaymentMethod.balance + delta, updated_at=utcnow())
        )
        result = self.session.exec(statement)  # type: ignore[call-overload]
        return bool(result.rowcount)

    def set_balance(
        self, owner_id: int, name: PaymentType, balance: float
    ) -> Optional[PaymentMethod]:
        method = self.get_by_name(owner_id, name)
        if method is None:
            return None
        method.balance = balance
        method.updated_at = utcnow()
        self.session.add(method)
        self.session.flush()
        return method

    def total_balance(self, owner_id: int) -> float:
        statement = select(func.sum(PaymentMethod.balance)).where(
            PaymentMethod.user_id == owner_id
        )
        return float(self.session.exec(statement).one() or 0.0)
