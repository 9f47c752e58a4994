"""Transactional scope that turns persistence failures into StorageError."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..errors import StorageError
from ..infra.database import SessionFactory
from ..logging_config import get_logger

logger = get_logger(__name__)


@contextmanager
def storage_scope(
    session_factory: SessionFactory,
    *,
    operation: str,
    entity: str,
    key: Any = None,
    owner_id: int | None = None,
) -> Iterator[Session]:
    """Run one logical unit of work; everything inside commits or rolls back together."""

    try:
        with session_factory() as session:
            yield session
    except SQLAlchemyError as exc:
        logger.exception(
            "Storage failure while %s %s",
            operation,
            entity,
            extra={
                "operation": operation,
                "entity": entity,
                "entity_key": key,
                "owner_id": owner_id,
            },
        )
        raise StorageError(operation, entity, key) from exc
