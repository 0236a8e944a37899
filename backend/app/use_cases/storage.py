"""Commit helpers that translate SQLAlchemy failures into domain errors."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..domain_errors import DomainError, StaleWriteError, StorageError

logger = logging.getLogger(__name__)


def commit_or_raise(
    db: Session,
    *,
    operation: str,
    on_integrity_error: DomainError | None = None,
) -> None:
    """Commit the unit of work; roll back and raise a domain error on failure."""
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        raise StaleWriteError("Record was modified by another request, reload and retry")
    except IntegrityError:
        db.rollback()
        if on_integrity_error is not None:
            raise on_integrity_error
        logger.exception("Integrity failure during %s", operation)
        raise StorageError(f"Failed to {operation}")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Storage failure during %s", operation)
        raise StorageError(f"Failed to {operation}")


def storage_failure(db: Session, *, operation: str) -> StorageError:
    """Roll back after a failed read and build the error to raise."""
    db.rollback()
    logger.exception("Storage failure during %s", operation)
    return StorageError(f"Failed to {operation}")
