"""Payment method repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.enums import PaymentType
from ...models.payment_method import PaymentMethod


class PaymentMethodRepository(Protocol):
    """Owner-scoped persistence for payment method balances."""

    def list_for_owner(self, owner_id: int) -> list[PaymentMethod]:
        """List all payment methods for an owner."""
        ...

    def get_by_name(self, owner_id: int, name: PaymentType) -> Optional[PaymentMethod]:
        """Retrieve one payment method by name."""
        ...

    def insert_if_absent(self, owner_id: int, name: PaymentType, balance: float = 0.0) -> bool:
        """Create the row unless it exists; return True when a row was inserted."""
        ...

    def add_to_balance(self, owner_id: int, name: PaymentType, delta: float) -> bool:
        """Atomically add ``delta``; return False when no row matched."""
        ...

    def set_balance(
        self, owner_id: int, name: PaymentType, balance: float
    ) -> Optional[PaymentMethod]:
        """Overwrite a balance; return None when the row does not exist."""
        ...

    def total_balance(self, owner_id: int) -> float:
        """Sum of all balances for an owner."""
        ...
