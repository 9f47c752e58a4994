"""Demo data seeding script."""

from __future__ import annotations

from datetime import datetime, timedelta

from hisab.config import BaseConfig
from hisab.domain.schemas import TransactionCreate
from hisab.infra.database import bootstrap_database
from hisab.models import DayOfWeek
from hisab.services import owners, transactions

_DEMO_ROWS = [
    ("Income", 45000, "Salary", "LAXMIBANK", "Monthly salary"),
    ("Expense", 5000, "Cash Withdrawal", "LAXMIBANK", None),
    ("Income", 5000, "Cash Withdrawal", "CASH", None),
    ("Expense", 350, "Food", "CASH", "Momo"),
    ("Expense", 1200, "Internet", "ESEWA", "Worldlink"),
    ("Expense", 500, "Phone Recharge", "KHALTI", None),
    ("Expense", 250, "Transportation", "CASH", "Bus"),
]

_WEEKDAYS = [
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
]


def seed_demo() -> None:
    """Populate the configured database with a week of transactions for the default owner."""

    config = BaseConfig()
    _, session_factory = bootstrap_database(config)
    owner = owners.ensure_owner(session_factory, config.DEFAULT_OWNER)

    start = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0) - timedelta(days=len(_DEMO_ROWS))
    for offset, (kind, amount, reason, method, notes) in enumerate(_DEMO_ROWS):
        when = start + timedelta(days=offset)
        payload = TransactionCreate(
            day=_WEEKDAYS[when.weekday()],
            # Rough Bikram Sambat label; demo rows only
            nepali_date=f"{when.year + 57}-{when.month:02d}-{when.day:02d}",
            english_date=when,
            kind=kind,
            amount=float(amount),
            reason=reason,
            payment_type=method,
            notes=notes,
        )
        transactions.create_transaction(session_factory, owner.id, payload)

    print(f"Seeded {len(_DEMO_ROWS)} transactions for {owner.username}.")


if __name__ == "__main__":
    seed_demo()
