"""Transaction CRUD and the balance bookkeeping that rides along with it."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from hisab.domain.schemas import TransactionUpdate
from hisab.errors import NotFoundError, StorageError
from hisab.infra.repositories import SQLModelPaymentMethodRepository
from hisab.models import PaymentType, TransactionKind, TransactionReason
from hisab.services import summary, transactions
from tests.conftest import assert_float_equal, at, balances


def _update(**fields) -> TransactionUpdate:
    return TransactionUpdate.model_validate(fields)


def _expected_balances(session_factory, owner_id) -> dict[PaymentType, float]:
    expected = {name: 0.0 for name in PaymentType}
    for tx in transactions.list_transactions(session_factory, owner_id):
        expected[tx.payment_type] += tx.signed_amount()
    return expected


# =============================================================================
# Create / update / delete deltas
# =============================================================================


def test_expense_on_fresh_owner_lowers_cash(session_factory, owner, make_create):
    created = transactions.create_transaction(session_factory, owner.id, make_create())

    assert created.id is not None
    assert created.kind is TransactionKind.EXPENSE
    assert created.created_at is not None
    assert_float_equal(balances(session_factory, owner.id)[PaymentType.CASH], -500.0)
    assert_float_equal(summary.summarize(session_factory, owner.id).total_expense, 500.0)


def test_changing_payment_type_moves_the_effect(session_factory, owner, make_create):
    created = transactions.create_transaction(session_factory, owner.id, make_create())

    updated = transactions.update_transaction(
        session_factory, owner.id, created.id, _update(paymentType="ESEWA")
    )

    current = balances(session_factory, owner.id)
    assert updated.payment_type is PaymentType.ESEWA
    assert_float_equal(updated.amount, 500.0)
    assert_float_equal(current[PaymentType.CASH], 0.0)
    assert_float_equal(current[PaymentType.ESEWA], -500.0)


def test_delete_reverts_the_effect(session_factory, owner, make_create):
    created = transactions.create_transaction(session_factory, owner.id, make_create())
    transactions.update_transaction(session_factory, owner.id, created.id, _update(paymentType="ESEWA"))

    assert transactions.delete_transaction(session_factory, owner.id, created.id) is True

    assert balances(session_factory, owner.id) == {name: 0.0 for name in PaymentType}
    assert transactions.list_transactions(session_factory, owner.id) == []


def test_income_and_expense_net_on_one_method(session_factory, owner, make_create):
    transactions.create_transaction(session_factory, owner.id, make_create(type="Income", amount=1000))
    transactions.create_transaction(session_factory, owner.id, make_create(amount=300))

    result = summary.summarize(session_factory, owner.id)

    assert_float_equal(balances(session_factory, owner.id)[PaymentType.CASH], 700.0)
    assert_float_equal(result.total_income, 1000.0)
    assert_float_equal(result.total_expense, 300.0)
    assert_float_equal(result.total_balance, 700.0)


def test_flipping_kind_swings_balance_twice(session_factory, owner, make_create):
    created = transactions.create_transaction(session_factory, owner.id, make_create(amount=200))

    transactions.update_transaction(session_factory, owner.id, created.id, _update(type="Income"))

    assert_float_equal(balances(session_factory, owner.id)[PaymentType.CASH], 200.0)


def test_changing_amount_applies_difference(session_factory, owner, make_create):
    created = transactions.create_transaction(
        session_factory, owner.id, make_create(type="Income", amount=100, paymentType="KHALTI")
    )

    transactions.update_transaction(session_factory, owner.id, created.id, _update(amount=250.75))

    assert_float_equal(balances(session_factory, owner.id)[PaymentType.KHALTI], 250.75)


def test_update_of_other_fields_leaves_balances_alone(session_factory, owner, make_create):
    created = transactions.create_transaction(session_factory, owner.id, make_create())
    before = balances(session_factory, owner.id)

    updated = transactions.update_transaction(
        session_factory,
        owner.id,
        created.id,
        _update(notes="Dinner", reason="Festival", day="Friday", amount=500),
    )

    assert updated.notes == "Dinner"
    assert updated.reason is TransactionReason.FESTIVAL
    assert updated.kind is TransactionKind.EXPENSE
    assert balances(session_factory, owner.id) == before


def test_update_can_clear_notes(session_factory, owner, make_create):
    created = transactions.create_transaction(session_factory, owner.id, make_create())

    updated = transactions.update_transaction(session_factory, owner.id, created.id, _update(notes=None))

    assert updated.notes is None


def test_mixed_history_keeps_every_balance_equal_to_its_transactions(
    session_factory, owner, make_create
):
    ids = []
    for kind, amount, method in [
        ("Income", 5000, "CASH"),
        ("Expense", 120.5, "CASH"),
        ("Income", 800, "ESEWA"),
        ("Expense", 60, "NIC ASIA"),
        ("Expense", 999.99, "MACHA BL"),
        ("Income", 42, "IMEPAY"),
    ]:
        created = transactions.create_transaction(
            session_factory, owner.id, make_create(type=kind, amount=amount, paymentType=method)
        )
        ids.append(created.id)

    transactions.update_transaction(session_factory, owner.id, ids[0], _update(amount=4500))
    transactions.update_transaction(session_factory, owner.id, ids[1], _update(paymentType="LAXMIBANK"))
    transactions.update_transaction(
        session_factory, owner.id, ids[2], _update(type="Expense", paymentType="KHALTI", amount=10)
    )
    transactions.delete_transaction(session_factory, owner.id, ids[3])
    transactions.update_transaction(session_factory, owner.id, ids[4], _update(notes="unchanged"))

    actual = balances(session_factory, owner.id)
    for name, expected in _expected_balances(session_factory, owner.id).items():
        assert_float_equal(actual[name], expected)


# =============================================================================
# Lookup, scoping and ordering
# =============================================================================


def test_missing_ids_raise_not_found(session_factory, owner):
    with pytest.raises(NotFoundError):
        transactions.get_transaction(session_factory, owner.id, 999)
    with pytest.raises(NotFoundError):
        transactions.update_transaction(session_factory, owner.id, 999, _update(amount=1))
    with pytest.raises(NotFoundError) as excinfo:
        transactions.delete_transaction(session_factory, owner.id, 999)

    assert excinfo.value.to_dict() == {"message": "Transaction not found"}


def test_owners_cannot_see_or_touch_each_others_transactions(
    session_factory, owner, other_owner, make_create
):
    mine = transactions.create_transaction(session_factory, owner.id, make_create())

    assert transactions.list_transactions(session_factory, other_owner.id) == []
    with pytest.raises(NotFoundError):
        transactions.get_transaction(session_factory, other_owner.id, mine.id)
    with pytest.raises(NotFoundError):
        transactions.delete_transaction(session_factory, other_owner.id, mine.id)

    assert balances(session_factory, other_owner.id)[PaymentType.CASH] == 0.0
    assert_float_equal(balances(session_factory, owner.id)[PaymentType.CASH], -500.0)


def test_list_orders_by_english_date_desc_then_insertion(session_factory, owner, make_create):
    oldest = transactions.create_transaction(session_factory, owner.id, make_create(englishDate=at(2024, 1, 1)))
    tie_first = transactions.create_transaction(session_factory, owner.id, make_create(englishDate=at(2024, 3, 1)))
    tie_second = transactions.create_transaction(session_factory, owner.id, make_create(englishDate=at(2024, 3, 1)))
    newest = transactions.create_transaction(session_factory, owner.id, make_create(englishDate=at(2024, 6, 1)))

    listed = [tx.id for tx in transactions.list_transactions(session_factory, owner.id)]

    assert listed == [newest.id, tie_first.id, tie_second.id, oldest.id]


def test_list_filters_by_kind_and_search(session_factory, owner, make_create):
    transactions.create_transaction(
        session_factory, owner.id, make_create(type="Income", reason="Salary", notes="October pay")
    )
    transactions.create_transaction(
        session_factory, owner.id, make_create(reason="Food", paymentType="ESEWA", notes="Momo")
    )
    transactions.create_transaction(session_factory, owner.id, make_create(reason="Internet", notes=None))

    incomes = transactions.list_transactions(session_factory, owner.id, kind=TransactionKind.INCOME)
    assert [tx.reason for tx in incomes] == [TransactionReason.SALARY]

    by_notes = transactions.list_transactions(session_factory, owner.id, search="momo")
    assert [tx.payment_type for tx in by_notes] == [PaymentType.ESEWA]

    by_method = transactions.list_transactions(session_factory, owner.id, search="esewa")
    assert len(by_method) == 1

    by_reason = transactions.list_transactions(
        session_factory, owner.id, kind=TransactionKind.EXPENSE, search="inter"
    )
    assert [tx.reason for tx in by_reason] == [TransactionReason.INTERNET]

    assert len(transactions.list_transactions(session_factory, owner.id, search="   ")) == 3


def test_english_date_round_trips_as_naive_utc(session_factory, owner, make_create):
    created = transactions.create_transaction(
        session_factory, owner.id, make_create(englishDate="2024-04-27T16:15:00+05:45")
    )

    fetched = transactions.get_transaction(session_factory, owner.id, created.id)

    assert fetched.english_date == datetime(2024, 4, 27, 10, 30)


# =============================================================================
# Atomicity
# =============================================================================


def test_failed_balance_adjustment_rolls_back_the_row(
    session_factory, owner, make_create, monkeypatch: pytest.MonkeyPatch
):
    def _locked(self, owner_id, name, delta):
        raise OperationalError("UPDATE payment_methods", {}, Exception("database is locked"))

    monkeypatch.setattr(SQLModelPaymentMethodRepository, "add_to_balance", _locked)

    with pytest.raises(StorageError) as excinfo:
        transactions.create_transaction(session_factory, owner.id, make_create())

    assert excinfo.value.status_code == 500
    assert excinfo.value.to_dict() == {"message": "Error creating transaction"}
    monkeypatch.undo()
    assert transactions.list_transactions(session_factory, owner.id) == []
    assert balances(session_factory, owner.id)[PaymentType.CASH] == 0.0


def test_failed_update_keeps_previous_row_and_balances(
    session_factory, owner, make_create, monkeypatch: pytest.MonkeyPatch
):
    created = transactions.create_transaction(session_factory, owner.id, make_create())
    calls = []

    real_add = SQLModelPaymentMethodRepository.add_to_balance

    def _fail_second(self, owner_id, name, delta):
        calls.append(name)
        if len(calls) == 2:
            raise OperationalError("UPDATE payment_methods", {}, Exception("disk I/O error"))
        return real_add(self, owner_id, name, delta)

    monkeypatch.setattr(SQLModelPaymentMethodRepository, "add_to_balance", _fail_second)

    with pytest.raises(StorageError):
        transactions.update_transaction(session_factory, owner.id, created.id, _update(paymentType="ESEWA"))

    monkeypatch.undo()
    fetched = transactions.get_transaction(session_factory, owner.id, created.id)
    current = balances(session_factory, owner.id)
    assert fetched.payment_type is PaymentType.CASH
    assert_float_equal(current[PaymentType.CASH], -500.0)
    assert current[PaymentType.ESEWA] == 0.0
