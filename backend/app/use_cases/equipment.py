"""Equipment registry use-cases: units, cells and their status transitions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain_errors import ConflictError, InvalidInputError, NotFoundError, StaleWriteError
from ..models import Cell, CellStatus, EquipmentUnit
from ..schemas import CellCreate, EquipmentUnitCreate
from ..services.cell_state import (
    apply_info_edit,
    apply_status_transition,
    ensure_expected_version,
)
from ..services.timestamps import now_utc
from .storage import commit_or_raise, storage_failure

logger = logging.getLogger(__name__)

REASSIGN_UPDATED = "updated"
REASSIGN_NOT_FOUND = "not_found"
REASSIGN_ERROR = "error"


def _get_unit_or_404(*, db: Session, ru_id: str) -> EquipmentUnit:
    try:
        unit = db.query(EquipmentUnit).filter(EquipmentUnit.id == ru_id).first()
    except SQLAlchemyError:
        raise storage_failure(db, operation="load equipment unit")
    if not unit:
        raise NotFoundError("Equipment unit not found", code="RU_NOT_FOUND")
    return unit


def _get_cell_or_404(*, db: Session, ru_id: str, cell_id: int) -> Cell:
    """Cells are only addressable through their owning unit."""
    try:
        cell = db.query(Cell).filter(
            Cell.id == cell_id,
            Cell.ru_id == ru_id,
        ).first()
    except SQLAlchemyError:
        raise storage_failure(db, operation="load cell")
    if not cell:
        raise NotFoundError("Cell not found", code="CELL_NOT_FOUND")
    return cell


def list_units_use_case(*, db: Session) -> list[EquipmentUnit]:
    try:
        return db.query(EquipmentUnit).order_by(EquipmentUnit.created_at.desc()).all()
    except SQLAlchemyError:
        raise storage_failure(db, operation="list equipment units")


def get_unit_with_cells_use_case(*, db: Session, ru_id: str) -> tuple[EquipmentUnit, list[Cell]]:
    unit = _get_unit_or_404(db=db, ru_id=ru_id)
    try:
        cells = db.query(Cell).filter(Cell.ru_id == ru_id).order_by(Cell.id.asc()).all()
    except SQLAlchemyError:
        raise storage_failure(db, operation="list cells")
    return unit, cells


def update_cell_status_use_case(
    *,
    db: Session,
    ru_id: str,
    cell_id: int,
    status: CellStatus | str,
    is_grounded: bool | None = None,
    expected_version: int | None = None,
    at: datetime | None = None,
) -> Cell:
    """Overwrite cell status, optionally grounding, and stamp the operation time."""
    cell = _get_cell_or_404(db=db, ru_id=ru_id, cell_id=cell_id)

    try:
        ensure_expected_version(current_version=cell.version, expected_version=expected_version)
    except ValueError as exc:
        raise StaleWriteError(str(exc), details={"currentVersion": cell.version})

    try:
        apply_status_transition(cell, status=status, is_grounded=is_grounded, at=at)
    except ValueError as exc:
        raise InvalidInputError(str(exc), code="INVALID_CELL_STATUS")
    commit_or_raise(db, operation="update cell status")
    db.refresh(cell)

    logger.info(
        "cell.status ru=%s cell=%s status=%s grounded=%s",
        ru_id,
        cell_id,
        cell.status,
        cell.is_grounded,
    )
    return cell


def update_cell_info_use_case(
    *,
    db: Session,
    ru_id: str,
    cell_id: int,
    name: str,
    description: str,
    voltage: str,
    at: datetime | None = None,
) -> Cell:
    """Metadata correction only; status, grounding and lastOperation stay untouched."""
    cell = _get_cell_or_404(db=db, ru_id=ru_id, cell_id=cell_id)
    apply_info_edit(cell, name=name, description=description, voltage=voltage, at=at)
    commit_or_raise(db, operation="update cell info")
    db.refresh(cell)
    return cell


def update_unit_status_use_case(
    *,
    db: Session,
    ru_id: str,
    status: str,
    at: datetime | None = None,
) -> EquipmentUnit:
    unit = _get_unit_or_404(db=db, ru_id=ru_id)
    unit.status = status
    unit.updated_at = at or now_utc()
    commit_or_raise(db, operation="update equipment unit status")
    db.refresh(unit)
    return unit


@dataclass
class ReassignmentResult:
    updated: list[EquipmentUnit] = field(default_factory=list)
    results: dict[str, str] = field(default_factory=dict)


def reassign_units_use_case(
    *,
    db: Session,
    ru_ids: list[str],
    substation_id: str,
    at: datetime | None = None,
) -> ReassignmentResult:
    """Move units to a substation one by one, reporting the outcome per id.

    Each unit is committed on its own; a failure on one id never undoes or
    blocks the others.
    """
    outcome = ReassignmentResult()
    ts = at or now_utc()

    for ru_id in dict.fromkeys(ru_ids):
        try:
            unit = db.query(EquipmentUnit).filter(EquipmentUnit.id == ru_id).first()
            if unit is None:
                outcome.results[ru_id] = REASSIGN_NOT_FOUND
                continue
            unit.substation_id = substation_id
            unit.updated_at = ts
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to reassign equipment unit %s", ru_id)
            outcome.results[ru_id] = REASSIGN_ERROR
            continue

        outcome.updated.append(unit)
        outcome.results[ru_id] = REASSIGN_UPDATED

    logger.info(
        "ru.reassign substation=%s updated=%d requested=%d",
        substation_id,
        len(outcome.updated),
        len(outcome.results),
    )
    return outcome


def create_unit_use_case(*, db: Session, payload: EquipmentUnitCreate) -> EquipmentUnit:
    """Register a new unit; ids are immutable so an existing id is a conflict."""
    try:
        exists = db.query(EquipmentUnit.id).filter(EquipmentUnit.id == payload.id).first()
    except SQLAlchemyError:
        raise storage_failure(db, operation="check equipment unit id")
    conflict = ConflictError("Equipment unit with this id already exists", code="RU_ALREADY_EXISTS")
    if exists:
        raise conflict

    data = payload.model_dump()
    data["type"] = payload.type.value
    unit = EquipmentUnit(**data)
    db.add(unit)
    commit_or_raise(db, operation="create equipment unit", on_integrity_error=conflict)
    db.refresh(unit)
    return unit


def create_cells_use_case(*, db: Session, ru_id: str, cells: list[CellCreate]) -> list[Cell]:
    _get_unit_or_404(db=db, ru_id=ru_id)

    created: list[Cell] = []
    for payload in cells:
        data = payload.model_dump()
        data["type"] = payload.type.value
        data["status"] = payload.status.value
        cell = Cell(ru_id=ru_id, **data)
        db.add(cell)
        created.append(cell)

    commit_or_raise(db, operation="create cells")
    for cell in created:
        db.refresh(cell)
    return created


def list_substation_units_use_case(*, db: Session, substation_id: str) -> list[EquipmentUnit]:
    try:
        return (
            db.query(EquipmentUnit)
            .filter(EquipmentUnit.substation_id == substation_id)
            .order_by(EquipmentUnit.created_at.desc())
            .all()
        )
    except SQLAlchemyError:
        raise storage_failure(db, operation="list substation units")
