"""Closed enumerations shared by payload validation and table columns."""

from __future__ import annotations

from enum import Enum


class DayOfWeek(str, Enum):
    """Weekday label recorded alongside each transaction."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"


class TransactionKind(str, Enum):
    """Direction of a transaction; the only source of its balance sign."""

    INCOME = "Income"
    EXPENSE = "Expense"


class PaymentType(str, Enum):
    """The fixed set of wallets and accounts a transaction can move through."""

    CASH = "CASH"
    ESEWA = "ESEWA"
    KHALTI = "KHALTI"
    LAXMIBANK = "LAXMIBANK"
    IMEPAY = "IMEPAY"
    NIC_ASIA = "NIC ASIA"
    MACHA_BL = "MACHA BL"

    @classmethod
    def from_name(cls, value: str) -> "PaymentType | None":
        """Return the member whose value is ``value`` or None."""

        try:
            return cls(value)
        except ValueError:
            return None


class TransactionReason(str, Enum):
    """Reasons users can tag a transaction with."""

    TRANSPORTATION = "Transportation"
    FOOD = "Food"
    SALARY = "Salary"
    INTERNET = "Internet"
    TV = "TV"
    HOUSE_RENT_INCOME = "House Rent Income"
    DAD_MOM = "Dad/ Mom"
    GAMES_APPS = "Games / Apps"
    PHONE_RECHARGE = "Phone Recharge"
    FESTIVAL = "Festival"
    ONLINE_TO_CASH = "Online to Cash"
    CASH_TO_ONLINE = "Cash To Online"
    STATIONARY = "Stationary"
    BANK_WALLET_INTEREST = "Bank/ Wallet Interest"
    LOAN = "Loan"
    EMI = "EMI"
    TRANSFER_TO_ANOTHER_APP = "Transfer to Antother app"
    GIVEN_BY_OTHERS = "Given By others"
    GIFT_TO_OTHERS = "Gift to others"
    TECH = "Tech"
    LOST = "Lost"
    ENTERTAINMENT = "Entertainment"
    CLOTHES_SHOES = "Clothes / Shoes"
    CASH_WITHDRAWAL = "Cash Withdrawal"
    MEDICINE = "Medicine"
    HAIRCUT = "Haircut"
    CARD_GAME = "Card Game"


__all__ = [
    "DayOfWeek",
    "PaymentType",
    "TransactionKind",
    "TransactionReason",
]
