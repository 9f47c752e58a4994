"""SQLModel table exports."""

from .enums import DayOfWeek, PaymentType, TransactionKind, TransactionReason
from .payment_method import PaymentMethod
from .transaction import Transaction, signed_effect
from .user import User, utcnow

__all__ = [
    "DayOfWeek",
    "PaymentMethod",
    "PaymentType",
    "Transaction",
    "TransactionKind",
    "TransactionReason",
    "User",
    "signed_effect",
    "utcnow",
]
