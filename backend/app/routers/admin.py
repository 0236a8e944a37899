"""Admin endpoints: account administration and equipment registration."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import (
    AccountActionResponse,
    AccountResponse,
    AdminChangePasswordRequest,
    AdminCreateAccountRequest,
    AdminUpdateAccountRequest,
    CellCreate,
    CellResponse,
    CellsCreatedResponse,
    EquipmentUnitCreate,
    EquipmentUnitResponse,
)
from ..security import require_admin
from ..use_cases.accounts import (
    change_password_use_case,
    create_account_use_case,
    delete_account_use_case,
    list_accounts_use_case,
    update_account_use_case,
)
from ..use_cases.equipment import create_cells_use_case, create_unit_use_case

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=list[AccountResponse])
def get_users(db: Session = Depends(get_db)):
    """Get all users."""
    accounts = list_accounts_use_case(db=db)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.post("/users", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: AdminCreateAccountRequest, db: Session = Depends(get_db)):
    """Create a user with an explicit role."""
    account = create_account_use_case(
        db=db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return AccountResponse.model_validate(account)


@router.put("/users/{user_id}", response_model=AccountResponse)
def update_user(user_id: str, payload: AdminUpdateAccountRequest, db: Session = Depends(get_db)):
    """Update name, email and role."""
    account = update_account_use_case(
        db=db,
        account_id=user_id,
        name=payload.name,
        email=payload.email,
        role=payload.role,
    )
    return AccountResponse.model_validate(account)


@router.delete("/users/{user_id}", response_model=AccountActionResponse)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    delete_account_use_case(db=db, account_id=user_id)
    return AccountActionResponse(message="User deleted successfully", user_id=user_id)


@router.put("/users/{user_id}/password", response_model=AccountActionResponse)
def change_password(user_id: str, payload: AdminChangePasswordRequest, db: Session = Depends(get_db)):
    change_password_use_case(db=db, account_id=user_id, new_password=payload.new_password)
    return AccountActionResponse(message="Password changed successfully", user_id=user_id)


@router.post("/rus", response_model=EquipmentUnitResponse, status_code=status.HTTP_201_CREATED)
def create_unit(payload: EquipmentUnitCreate, db: Session = Depends(get_db)):
    """Register a new equipment unit."""
    unit = create_unit_use_case(db=db, payload=payload)
    return EquipmentUnitResponse.model_validate(unit)


@router.post("/rus/{ru_id}/cells", response_model=CellsCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_cells(ru_id: str, payload: list[CellCreate], db: Session = Depends(get_db)):
    """Add cells to an existing equipment unit."""
    cells = create_cells_use_case(db=db, ru_id=ru_id, cells=payload)
    return CellsCreatedResponse(
        message="Cells created",
        count=len(cells),
        ru_id=ru_id,
        cells=[CellResponse.model_validate(cell) for cell in cells],
    )
