"""Transaction repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.enums import PaymentType, TransactionKind, TransactionReason
from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Owner-scoped persistence for transaction rows."""

    def list_for_owner(
        self,
        owner_id: int,
        *,
        kind: Optional[TransactionKind] = None,
        search: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions, most recent English date first."""
        ...

    def get(self, owner_id: int, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction if it belongs to ``owner_id``."""
        ...

    def add(self, transaction: Transaction) -> Transaction:
        """Stage a new row and assign its id."""
        ...

    def save(self, transaction: Transaction) -> Transaction:
        """Flush changes made to an existing row."""
        ...

    def lock_for_write(self, owner_id: int, transaction_id: int) -> bool:
        """Hold the row for writing until commit; False when it does not exist."""
        ...

    def remove(self, owner_id: int, transaction_id: int) -> bool:
        """Delete a row; False when no row matched."""
        ...

    def totals_by_kind(self, owner_id: int) -> dict[TransactionKind, float]:
        """Sum amounts per transaction kind."""
        ...

    def expense_by_reason(self, owner_id: int) -> list[tuple[TransactionReason, float]]:
        """Sum expense amounts per reason, largest first."""
        ...

    def net_by_payment_type(self, owner_id: int) -> dict[PaymentType, float]:
        """Signed sum of transactions per payment type."""
        ...
