"""Payment method lookup, provisioning and manual balance overrides."""

from __future__ import annotations

from ..errors import NotFoundError
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelPaymentMethodRepository
from ..logging_config import get_logger
from ..models.enums import PaymentType
from ..models.payment_method import PaymentMethod
from .storage import storage_scope

logger = get_logger(__name__)

ENTITY = "payment method"


def list_payment_methods(session_factory: SessionFactory, owner_id: int) -> list[PaymentMethod]:
    with storage_scope(
        session_factory, operation="fetching", entity="payment methods", owner_id=owner_id
    ) as session:
        return SQLModelPaymentMethodRepository(session).list_for_owner(owner_id)


def get_payment_method(
    session_factory: SessionFactory, owner_id: int, name: PaymentType
) -> PaymentMethod:
    with storage_scope(
        session_factory, operation="fetching", entity=ENTITY, key=name.value, owner_id=owner_id
    ) as session:
        method = SQLModelPaymentMethodRepository(session).get_by_name(owner_id, name)
        if method is None:
            raise NotFoundError("Payment method", name.value)
        return method


def ensure_provisioned(session_factory: SessionFactory, owner_id: int) -> list[PaymentType]:
    """Create any of the fixed payment methods the owner is missing, at zero balance.

    Idempotent. A row created concurrently by another request is skipped, not
    reported. Returns the names that were created by this call.
    """

    with storage_scope(
        session_factory, operation="provisioning", entity="payment methods", owner_id=owner_id
    ) as session:
        repository = SQLModelPaymentMethodRepository(session)
        created = [name for name in PaymentType if repository.insert_if_absent(owner_id, name)]

    if created:
        logger.info(
            "Provisioned %d payment method(s)",
            len(created),
            extra={"owner_id": owner_id, "payment_methods": [name.value for name in created]},
        )
    else:
        logger.debug("Payment methods already provisioned", extra={"owner_id": owner_id})
    return created


def set_balance(
    session_factory: SessionFactory, owner_id: int, name: PaymentType, balance: float
) -> PaymentMethod:
    """Overwrite a balance directly, independent of transaction history."""

    with storage_scope(
        session_factory, operation="updating", entity=ENTITY, key=name.value, owner_id=owner_id
    ) as session:
        method = SQLModelPaymentMethodRepository(session).set_balance(owner_id, name, balance)
        if method is None:
            raise NotFoundError("Payment method", name.value)

    logger.info(
        "Balance of %s set to %s",
        name.value,
        balance,
        extra={"owner_id": owner_id, "payment_method": name.value},
    )
    return method
