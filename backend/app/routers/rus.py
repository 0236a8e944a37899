"""Equipment unit, cell and operations history endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas import (
    CellInfoUpdate,
    CellResponse,
    CellStatusUpdate,
    EquipmentUnitResponse,
    HistoryRecordCreate,
    HistoryRecordResponse,
    SubstationReassignRequest,
    SubstationReassignResponse,
    UnitStatusUpdate,
    UnitWithCellsResponse,
)
from ..security import authenticate
from ..use_cases.equipment import (
    get_unit_with_cells_use_case,
    list_units_use_case,
    reassign_units_use_case,
    update_cell_info_use_case,
    update_cell_status_use_case,
    update_unit_status_use_case,
)
from ..use_cases.history import append_history_record_use_case, list_history_use_case

router = APIRouter(prefix="/rus", tags=["rus"], dependencies=[Depends(authenticate)])


@router.get("", response_model=list[EquipmentUnitResponse])
def list_units(db: Session = Depends(get_db)):
    """Get all equipment units."""
    units = list_units_use_case(db=db)
    return [EquipmentUnitResponse.model_validate(unit) for unit in units]


@router.put("/substations/{substation_id}/rus", response_model=SubstationReassignResponse)
def reassign_units(
    substation_id: str,
    payload: SubstationReassignRequest,
    db: Session = Depends(get_db),
):
    """Assign the listed units to a substation, reporting per-unit outcome."""
    outcome = reassign_units_use_case(db=db, ru_ids=payload.ru_ids, substation_id=substation_id)
    return SubstationReassignResponse(
        message="Equipment units updated",
        count=len(outcome.updated),
        rus=[EquipmentUnitResponse.model_validate(unit) for unit in outcome.updated],
        results=outcome.results,
    )


@router.get("/{ru_id}", response_model=UnitWithCellsResponse)
def get_unit(ru_id: str, db: Session = Depends(get_db)):
    """Get an equipment unit with its cells ordered by id."""
    unit, cells = get_unit_with_cells_use_case(db=db, ru_id=ru_id)
    return UnitWithCellsResponse(
        ru_info=EquipmentUnitResponse.model_validate(unit),
        cells=[CellResponse.model_validate(cell) for cell in cells],
    )


@router.put("/{ru_id}/status", response_model=EquipmentUnitResponse)
def update_unit_status(
    ru_id: str,
    payload: UnitStatusUpdate,
    db: Session = Depends(get_db),
):
    """Overwrite the unit's coarse status."""
    unit = update_unit_status_use_case(db=db, ru_id=ru_id, status=payload.status)
    return EquipmentUnitResponse.model_validate(unit)


@router.put("/{ru_id}/cells/{cell_id}/status", response_model=CellResponse)
def update_cell_status(
    ru_id: str,
    cell_id: int,
    payload: CellStatusUpdate,
    db: Session = Depends(get_db),
):
    """Switch a cell and optionally change its grounding."""
    cell = update_cell_status_use_case(
        db=db,
        ru_id=ru_id,
        cell_id=cell_id,
        status=payload.status,
        is_grounded=payload.is_grounded,
        expected_version=payload.version,
    )
    return CellResponse.model_validate(cell)


@router.patch("/{ru_id}/cells/{cell_id}/info", response_model=CellResponse)
def update_cell_info(
    ru_id: str,
    cell_id: int,
    payload: CellInfoUpdate,
    db: Session = Depends(get_db),
):
    """Correct cell name, description and voltage."""
    cell = update_cell_info_use_case(
        db=db,
        ru_id=ru_id,
        cell_id=cell_id,
        name=payload.name,
        description=payload.description,
        voltage=payload.voltage,
    )
    return CellResponse.model_validate(cell)


@router.get("/{ru_id}/history", response_model=list[HistoryRecordResponse])
def get_history(
    ru_id: str,
    limit: Optional[int] = Query(None, description="Max records; 0 or less returns everything"),
    db: Session = Depends(get_db),
):
    """Get operation history for a unit, newest first."""
    if limit is None:
        limit = settings.HISTORY_DEFAULT_LIMIT
    records = list_history_use_case(db=db, ru_id=ru_id, limit=limit)
    return [HistoryRecordResponse.model_validate(record) for record in records]


@router.post("/{ru_id}/history", response_model=HistoryRecordResponse, status_code=status.HTTP_201_CREATED)
def add_history(
    ru_id: str,
    payload: HistoryRecordCreate,
    db: Session = Depends(get_db),
):
    """Append a record to the unit's operations history."""
    record = append_history_record_use_case(db=db, ru_id=ru_id, payload=payload)
    return HistoryRecordResponse.model_validate(record)
