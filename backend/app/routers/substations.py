"""Public substation view."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import EquipmentUnitResponse, SubstationInfo, SubstationResponse
from ..services.substations import describe_substation
from ..use_cases.equipment import list_substation_units_use_case

router = APIRouter(prefix="/substations", tags=["substations"])


@router.get("/{substation_id}", response_model=SubstationResponse)
def get_substation(substation_id: str, db: Session = Depends(get_db)):
    """Substation metadata with the equipment units assigned to it."""
    units = list_substation_units_use_case(db=db, substation_id=substation_id)
    return SubstationResponse(
        substation=SubstationInfo(
            **describe_substation(substation_id),
            total_rus=len(units),
            rus=[EquipmentUnitResponse.model_validate(unit) for unit in units],
        )
    )
