"""Repository protocol definitions for domain layer."""

from .payment_method import PaymentMethodRepository
from .transaction import TransactionRepository

__all__ = [
    "PaymentMethodRepository",
    "TransactionRepository",
]
