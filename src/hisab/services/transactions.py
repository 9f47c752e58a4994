"""Transaction CRUD with balance bookkeeping.

Every mutation writes the transaction row and the matching ledger
adjustment(s) in one session, so they commit or roll back together.
"""

from __future__ import annotations

from typing import Optional

from ..domain.schemas import TransactionCreate, TransactionUpdate
from ..errors import NotFoundError
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelPaymentMethodRepository, SQLModelTransactionRepository
from ..logging_config import get_logger
from ..models.enums import TransactionKind
from ..models.transaction import Transaction
from .ledger import BalanceLedger, LedgerEffect
from .storage import storage_scope

logger = get_logger(__name__)

ENTITY = "transaction"


def _ledger(session) -> BalanceLedger:
    return BalanceLedger(SQLModelPaymentMethodRepository(session))


def _load_for_write(
    repository: SQLModelTransactionRepository, owner_id: int, transaction_id: int
) -> Transaction:
    """Lock the row, then read it; the balance delta is computed from what is locked."""

    if not repository.lock_for_write(owner_id, transaction_id):
        raise NotFoundError("Transaction", transaction_id)
    transaction = repository.get(owner_id, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction", transaction_id)
    return transaction


def list_transactions(
    session_factory: SessionFactory,
    owner_id: int,
    *,
    kind: Optional[TransactionKind] = None,
    search: Optional[str] = None,
) -> list[Transaction]:
    """Return the owner's transactions, most recent English date first."""

    with storage_scope(
        session_factory, operation="fetching", entity="transactions", owner_id=owner_id
    ) as session:
        return SQLModelTransactionRepository(session).list_for_owner(
            owner_id, kind=kind, search=search
        )


def get_transaction(session_factory: SessionFactory, owner_id: int, transaction_id: int) -> Transaction:
    with storage_scope(
        session_factory, operation="fetching", entity=ENTITY, key=transaction_id, owner_id=owner_id
    ) as session:
        transaction = SQLModelTransactionRepository(session).get(owner_id, transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction


def create_transaction(
    session_factory: SessionFactory, owner_id: int, payload: TransactionCreate
) -> Transaction:
    """Persist a new transaction and apply its delta to the payment method."""

    with storage_scope(
        session_factory, operation="creating", entity=ENTITY, owner_id=owner_id
    ) as session:
        transaction = Transaction(user_id=owner_id, **payload.model_dump())
        SQLModelTransactionRepository(session).add(transaction)
        _ledger(session).record_created(owner_id, transaction)

    logger.info(
        "Transaction %s created",
        transaction.id,
        extra={
            "owner_id": owner_id,
            "transaction_id": transaction.id,
            "payment_method": transaction.payment_type.value,
        },
    )
    return transaction


def update_transaction(
    session_factory: SessionFactory,
    owner_id: int,
    transaction_id: int,
    payload: TransactionUpdate,
) -> Transaction:
    """Merge ``payload`` onto the stored row and move its balance effect if needed."""

    changes = payload.changes()
    with storage_scope(
        session_factory, operation="updating", entity=ENTITY, key=transaction_id, owner_id=owner_id
    ) as session:
        repository = SQLModelTransactionRepository(session)
        transaction = _load_for_write(repository, owner_id, transaction_id)

        before = LedgerEffect.of(transaction)
        for field_name, value in changes.items():
            setattr(transaction, field_name, value)
        adjusted = _ledger(session).record_updated(owner_id, before, LedgerEffect.of(transaction))
        repository.save(transaction)

    logger.info(
        "Transaction %s updated",
        transaction_id,
        extra={
            "owner_id": owner_id,
            "transaction_id": transaction_id,
            "fields": sorted(changes),
            "balance_adjusted": adjusted,
        },
    )
    return transaction


def delete_transaction(session_factory: SessionFactory, owner_id: int, transaction_id: int) -> bool:
    """Revert the transaction's balance effect and remove the row."""

    with storage_scope(
        session_factory, operation="deleting", entity=ENTITY, key=transaction_id, owner_id=owner_id
    ) as session:
        repository = SQLModelTransactionRepository(session)
        transaction = _load_for_write(repository, owner_id, transaction_id)
        if not repository.remove(owner_id, transaction_id):
            raise NotFoundError("Transaction", transaction_id)
        _ledger(session).record_deleted(owner_id, transaction)

    logger.info(
        "Transaction %s deleted",
        transaction_id,
        extra={"owner_id": owner_id, "transaction_id": transaction_id},
    )
    return True
