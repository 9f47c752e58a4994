"""Service module exports."""

from . import ledger, owners, payment_methods, summary, transactions

__all__ = [
    "ledger",
    "owners",
    "payment_methods",
    "summary",
    "transactions",
]
