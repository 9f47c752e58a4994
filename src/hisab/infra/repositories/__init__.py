"""Concrete repository implementations using SQLModel."""

from .payment_method import SQLModelPaymentMethodRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelPaymentMethodRepository",
    "SQLModelTransactionRepository",
]
