"""Balance ledger: keeps each payment method equal to the signed sum of its transactions.

Balances are adjusted incrementally on every transaction mutation instead of
being recomputed, so each mutation must apply exactly the delta it implies:

* create: ``+amount`` for income, ``-amount`` for expense on the transaction's method
* delete: the inverse of the create delta
* update: revert the old effect, then apply the merged effect; skipped when
  payment type, kind and amount are all unchanged
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..domain.repositories import PaymentMethodRepository, TransactionRepository
from ..errors import StorageError
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelPaymentMethodRepository, SQLModelTransactionRepository
from ..logging_config import get_logger
from ..models.enums import PaymentType, TransactionKind
from ..models.transaction import Transaction, signed_effect
from .storage import storage_scope

logger = get_logger(__name__)

_DRIFT_TOLERANCE = 1e-9


@dataclass(frozen=True, slots=True)
class LedgerEffect:
    """The part of a transaction that matters to balances."""

    payment_type: PaymentType
    kind: TransactionKind
    amount: float

    @classmethod
    def of(cls, transaction: Transaction) -> "LedgerEffect":
        return cls(
            payment_type=PaymentType(transaction.payment_type),
            kind=TransactionKind(transaction.kind),
            amount=transaction.amount,
        )

    @property
    def signed(self) -> float:
        return signed_effect(self.kind, self.amount)


@dataclass(frozen=True, slots=True)
class BalanceDrift:
    """Difference between a cached balance and a full recompute."""

    name: PaymentType
    cached: float | None
    expected: float

    @property
    def difference(self) -> float:
        return (self.cached or 0.0) - self.expected


@dataclass
class BalanceLedger:
    """Applies transaction deltas to payment method balances."""

    payment_methods: PaymentMethodRepository

    def apply_delta(self, owner_id: int, name: PaymentType, delta: float) -> None:
        """Add ``delta`` to the (owner, name) balance, creating the row if missing.

        The add runs as one SQL increment so concurrent deltas on the same
        method both land. Negative results are valid.
        """

        if self.payment_methods.add_to_balance(owner_id, name, delta):
            logger.debug(
                "Adjusted %s balance by %s",
                name.value,
                delta,
                extra={"owner_id": owner_id, "payment_method": name.value, "delta": delta},
            )
            return

        # Insert at zero and then add, so a row created concurrently is not double counted.
        created = self.payment_methods.insert_if_absent(owner_id, name, 0.0)
        logger.info(
            "Payment method %s missing during adjustment (%s)",
            name.value,
            "created" if created else "created concurrently",
            extra={"owner_id": owner_id, "payment_method": name.value, "delta": delta},
        )
        if not self.payment_methods.add_to_balance(owner_id, name, delta):
            raise StorageError("adjusting", "payment method", name.value)

    def record_created(self, owner_id: int, transaction: Transaction) -> None:
        effect = LedgerEffect.of(transaction)
        self.apply_delta(owner_id, effect.payment_type, effect.signed)

    def record_deleted(self, owner_id: int, transaction: Transaction) -> None:
        effect = LedgerEffect.of(transaction)
        self.apply_delta(owner_id, effect.payment_type, -effect.signed)

    def record_updated(self, owner_id: int, before: LedgerEffect, after: LedgerEffect) -> bool:
        """Move a transaction's effect from ``before`` to ``after``.

        Returns False when nothing balance-relevant changed.
        """

        if before == after:
            return False
        self.apply_delta(owner_id, before.payment_type, -before.signed)
        self.apply_delta(owner_id, after.payment_type, after.signed)
        return True

    def drift(
        self, owner_id: int, transactions: TransactionRepository
    ) -> list[BalanceDrift]:
        """Compare cached balances with a full recompute over current transactions."""

        expected = transactions.net_by_payment_type(owner_id)
        cached = {
            PaymentType(method.name): method.balance
            for method in self.payment_methods.list_for_owner(owner_id)
        }
        drifts = []
        for name in PaymentType:
            current = cached.get(name)
            if current is None or abs(current - expected[name]) > _DRIFT_TOLERANCE:
                drifts.append(BalanceDrift(name=name, cached=current, expected=expected[name]))
        return drifts

    def reconcile(self, owner_id: int, drifts: Iterable[BalanceDrift]) -> None:
        """Overwrite cached balances with the recomputed values in ``drifts``."""

        for item in drifts:
            self.payment_methods.insert_if_absent(owner_id, item.name, 0.0)
            self.payment_methods.set_balance(owner_id, item.name, item.expected)
            logger.warning(
                "Reconciled %s balance from %s to %s",
                item.name.value,
                item.cached,
                item.expected,
                extra={"owner_id": owner_id, "payment_method": item.name.value},
            )


def reconcile_balances(
    session_factory: SessionFactory, owner_id: int, *, apply: bool = False
) -> list[BalanceDrift]:
    """Report (and with ``apply`` fix) cached balances that disagree with history.

    Manual balance overrides show up as drift too; applying discards them.
    """

    with storage_scope(
        session_factory, operation="reconciling", entity="payment methods", owner_id=owner_id
    ) as session:
        ledger = BalanceLedger(SQLModelPaymentMethodRepository(session))
        drifts = ledger.drift(owner_id, SQLModelTransactionRepository(session))
        if apply and drifts:
            ledger.reconcile(owner_id, drifts)
    return drifts
