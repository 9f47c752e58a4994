"""Owner (user) bootstrap."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.user import User
from .payment_methods import ensure_provisioned
from .storage import storage_scope

logger = get_logger(__name__)


def _find(session_factory: SessionFactory, username: str) -> User | None:
    with storage_scope(session_factory, operation="fetching", entity="owner", key=username) as session:
        return session.exec(select(User).where(User.username == username)).first()


def find_owner(session_factory: SessionFactory, owner_id: int) -> User | None:
    with storage_scope(session_factory, operation="fetching", entity="owner", key=owner_id) as session:
        return session.get(User, owner_id)


def ensure_owner(session_factory: SessionFactory, username: str) -> User:
    """Create or return the owner named ``username`` with all payment methods provisioned."""

    username = username.strip()
    if not username:
        raise ValueError("Owner username must not be empty")

    user = _find(session_factory, username)
    if user is None:
        try:
            with session_factory() as session:
                user = User(username=username)
                session.add(user)
                session.flush()
            logger.info("Created owner %s", username, extra={"owner_id": user.id})
        except IntegrityError:
            # Another process created the same owner first
            user = _find(session_factory, username)
            if user is None:
                raise

    ensure_provisioned(session_factory, user.id)
    return user
