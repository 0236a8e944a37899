"""Operations history ledger: append-only, queried newest first."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import OperationRecord
from ..schemas import HistoryRecordCreate
from ..services.timestamps import now_utc
from .storage import commit_or_raise, storage_failure

logger = logging.getLogger(__name__)


def append_history_record_use_case(
    *,
    db: Session,
    ru_id: str,
    payload: HistoryRecordCreate,
    at: datetime | None = None,
) -> OperationRecord:
    """Store a new ledger entry for the unit and return it with its generated id."""
    ts = at or now_utc()
    record = OperationRecord(
        ru_id=ru_id,
        created_at=ts,
        updated_at=ts,
        **payload.model_dump(),
    )
    db.add(record)
    commit_or_raise(db, operation="add history record")
    db.refresh(record)

    logger.info("history.append ru=%s record=%s action=%s", ru_id, record.id, record.action)
    return record


def list_history_use_case(*, db: Session, ru_id: str, limit: int | None = None) -> list[OperationRecord]:
    """Records for one unit, newest first; ``limit`` <= 0 or None means no bound."""
    query = (
        db.query(OperationRecord)
        .filter(OperationRecord.ru_id == ru_id)
        .order_by(OperationRecord.created_at.desc())
    )
    if limit is not None and limit > 0:
        query = query.limit(limit)
    try:
        return query.all()
    except SQLAlchemyError:
        raise storage_failure(db, operation="get history")
