"""Transaction, payment method and summary endpoints."""

from __future__ import annotations

from threading import Lock
from typing import Any, Optional

from flask import current_app, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ...domain.schemas import (
    BalanceUpdate,
    PaymentMethodRead,
    TransactionCreate,
    TransactionRead,
    TransactionUpdate,
    dump,
    parse_payload,
)
from ...errors import BadIdentifierError, HisabError, UnknownOwnerError, ValidationError
from ...extensions import EXTENSION_KEY, get_session_factory
from ...logging_config import get_logger
from ...models.enums import PaymentType, TransactionKind
from ...services import owners, payment_methods, summary, transactions
from . import bp

logger = get_logger(__name__)

_PROVISION_LOCK = Lock()

_KIND_FILTERS = {
    "all": None,
    "income": TransactionKind.INCOME,
    "expense": TransactionKind.EXPENSE,
}


def _resolve_owner_id() -> int:
    """Owner comes from the authenticated session, else the configured default owner."""

    state = current_app.extensions[EXTENSION_KEY]
    raw = session.get("user_id")
    if raw is None:
        return state["default_owner_id"]
    try:
        owner_id = int(raw)
    except (TypeError, ValueError):
        raise UnknownOwnerError() from None

    provisioned: set[int] = state["provisioned_owners"]
    with _PROVISION_LOCK:
        if owner_id not in provisioned:
            if owners.find_owner(get_session_factory(), owner_id) is None:
                logger.warning("Session names unknown owner", extra={"owner_id": owner_id})
                raise UnknownOwnerError()
            payment_methods.ensure_provisioned(get_session_factory(), owner_id)
            provisioned.add(owner_id)
    return owner_id


def _parse_transaction_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise BadIdentifierError("Invalid transaction ID") from None


def _parse_payment_type(raw: str) -> PaymentType:
    name = PaymentType.from_name(raw)
    if name is None:
        raise BadIdentifierError("Invalid payment method name")
    return name


def _parse_kind_filter(raw: Optional[str]) -> Optional[TransactionKind]:
    if raw is None:
        return None
    key = raw.strip().lower()
    if key not in _KIND_FILTERS:
        raise ValidationError.single("type", "Filter must be one of: all, income, expense")
    return _KIND_FILTERS[key]


def _transaction_json(row: Any) -> dict[str, Any]:
    return dump(TransactionRead.model_validate(row))


def _payment_method_json(row: Any) -> dict[str, Any]:
    return dump(PaymentMethodRead.model_validate(row))


@bp.before_request
def _bind_owner() -> None:
    g.owner_id = _resolve_owner_id()


@bp.errorhandler(HisabError)
def _handle_domain_error(exc: HisabError):
    # StorageError is logged with its context where it is raised
    if isinstance(exc, ValidationError):
        logger.debug("Rejected payload on %s", request.path, extra={"errors": exc.errors})
    return jsonify(exc.to_dict()), exc.status_code


@bp.errorhandler(Exception)
def _handle_unexpected_error(exc: Exception):
    if isinstance(exc, HTTPException):
        return exc
    logger.exception(
        "Unhandled error on %s %s",
        request.method,
        request.path,
        extra={"owner_id": g.get("owner_id"), "endpoint": request.endpoint},
    )
    return jsonify({"message": HisabError.message}), 500


@bp.get("/transactions")
def list_transactions():
    """List the owner's transactions; optional ``type`` and ``q`` filters."""

    kind = _parse_kind_filter(request.args.get("type"))
    rows = transactions.list_transactions(
        get_session_factory(), g.owner_id, kind=kind, search=request.args.get("q")
    )
    return jsonify([_transaction_json(row) for row in rows])


@bp.get("/transactions/<transaction_id>")
def get_transaction(transaction_id: str):
    tx_id = _parse_transaction_id(transaction_id)
    row = transactions.get_transaction(get_session_factory(), g.owner_id, tx_id)
    return jsonify(_transaction_json(row))


@bp.post("/transactions")
def create_transaction():
    payload = parse_payload(TransactionCreate, request.get_json(silent=True))
    row = transactions.create_transaction(get_session_factory(), g.owner_id, payload)
    return jsonify(_transaction_json(row)), 201


@bp.patch("/transactions/<transaction_id>")
def update_transaction(transaction_id: str):
    tx_id = _parse_transaction_id(transaction_id)
    payload = parse_payload(TransactionUpdate, request.get_json(silent=True))
    row = transactions.update_transaction(get_session_factory(), g.owner_id, tx_id, payload)
    return jsonify(_transaction_json(row))


@bp.delete("/transactions/<transaction_id>")
def delete_transaction(transaction_id: str):
    tx_id = _parse_transaction_id(transaction_id)
    transactions.delete_transaction(get_session_factory(), g.owner_id, tx_id)
    return "", 204


@bp.get("/payment-methods")
def list_payment_methods():
    rows = payment_methods.list_payment_methods(get_session_factory(), g.owner_id)
    return jsonify([_payment_method_json(row) for row in rows])


@bp.get("/payment-methods/<name>")
def get_payment_method(name: str):
    payment_type = _parse_payment_type(name)
    row = payment_methods.get_payment_method(get_session_factory(), g.owner_id, payment_type)
    return jsonify(_payment_method_json(row))


@bp.patch("/payment-methods/<name>")
def update_payment_method(name: str):
    """Manual balance override; does not touch transaction history."""

    payment_type = _parse_payment_type(name)
    payload = parse_payload(BalanceUpdate, request.get_json(silent=True))
    row = payment_methods.set_balance(
        get_session_factory(), g.owner_id, payment_type, payload.balance
    )
    return jsonify(_payment_method_json(row))


@bp.get("/summary")
def get_summary():
    result = summary.summarize(get_session_factory(), g.owner_id)
    return jsonify(result.to_dict())


@bp.get("/summary/reasons")
def get_expense_by_reason():
    rows = summary.expense_by_reason(get_session_factory(), g.owner_id)
    return jsonify([row.to_dict() for row in rows])
