"""Pydantic schemas for API."""
from pydantic import AfterValidator, BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional
from datetime import datetime
from email_validator import EmailNotValidError, validate_email

from .models import CellStatus, CellType, EquipmentType
from .services.timestamps import as_utc, format_operation_time


def _check_email(value: str) -> str:
    """Validate the address but keep it exactly as sent; email is a case-sensitive key."""
    value = value.strip()
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(str(exc))
    return value


Email = Annotated[str, Field(max_length=255), AfterValidator(_check_email)]
# Instants read back naive from SQLite are UTC.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Wire format keeps the frontend's camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Account schemas
class AccountResponse(BaseModel):
    """Public projection of an account; the password hash never leaves the server."""
    id: str
    name: str
    email: str
    role: str
    created_at: UtcDatetime
    model_config = ConfigDict(from_attributes=True)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: Email
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: Email
    password: str


class AuthResponse(BaseModel):
    user: AccountResponse
    token: str


class CurrentAccountResponse(BaseModel):
    user: AccountResponse


class AdminCreateAccountRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: Email
    password: str
    # Parsed against the closed role set by the use case (INVALID_ROLE on mismatch).
    role: str


class AdminUpdateAccountRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: Email
    role: str


class AdminChangePasswordRequest(BaseModel):
    new_password: str = Field(alias="newPassword")
    model_config = ConfigDict(populate_by_name=True)


class AccountActionResponse(BaseModel):
    message: str
    user_id: str


# Equipment unit schemas
class EquipmentUnitBase(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    voltage: str = ""
    sections: int = 0
    cells_count: int = 0
    transformers: int = 0
    transformer_power: str = ""
    location: str = ""
    installation_date: str = ""
    manufacturer: str = ""
    last_maintenance: str = ""
    next_maintenance: str = ""
    status: str = ""
    scheme_type: str = ""
    total_load_high: str = ""
    total_load_low: str = ""
    total_power_high: str = ""
    total_power_low: str = ""
    max_capacity_high: str = ""
    max_capacity_low: str = ""
    operational_hours: int = 0
    last_inspection: str = ""
    type: EquipmentType = EquipmentType.TP
    has_high_side: bool = True
    has_low_side: bool = True
    bus_sections: int = 0
    cells_per_section: int = 0
    substation_id: Optional[str] = None


class EquipmentUnitCreate(EquipmentUnitBase):
    id: str = Field(min_length=1, max_length=64)


class EquipmentUnitResponse(EquipmentUnitBase):
    id: str
    created_at: Optional[UtcDatetime] = Field(default=None, alias="created_at")
    updated_at: Optional[UtcDatetime] = Field(default=None, alias="updated_at")


class UnitStatusUpdate(BaseModel):
    status: str = Field(min_length=1, max_length=255)


class SubstationReassignRequest(CamelModel):
    ru_ids: list[str]


class SubstationReassignResponse(BaseModel):
    message: str
    count: int
    rus: list[EquipmentUnitResponse]
    # ruId -> "updated" | "not_found" | "error"
    results: dict[str, str]


# Cell schemas
class CellBase(CamelModel):
    number: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    type: CellType
    status: CellStatus = CellStatus.OFF
    voltage: str = ""
    voltage_level: str = ""
    power: Optional[str] = None
    description: str = ""
    is_grounded: bool = False
    transformer_number: Optional[str] = None
    bus_section: Optional[int] = None
    current: Optional[float] = None
    temperature: Optional[float] = None
    load: Optional[float] = None


class CellCreate(CellBase):
    pass


class CellResponse(CellBase):
    id: int
    ru_id: str
    # Rendered as DD.MM.YYYY HH:MM:SS.
    last_operation: Optional[str] = None
    last_grounded_operation: Optional[str] = None
    version: int
    created_at: Optional[UtcDatetime] = Field(default=None, alias="created_at")
    updated_at: Optional[UtcDatetime] = Field(default=None, alias="updated_at")

    @field_validator("last_operation", "last_grounded_operation", mode="before")
    @classmethod
    def _format_operation_time(cls, value):
        if isinstance(value, datetime):
            return format_operation_time(value)
        return value


class CellsCreatedResponse(CamelModel):
    message: str
    count: int
    ru_id: str
    cells: list[CellResponse]


class UnitWithCellsResponse(CamelModel):
    ru_info: EquipmentUnitResponse
    cells: list[CellResponse]


class CellStatusUpdate(CamelModel):
    status: CellStatus
    is_grounded: Optional[bool] = None
    # When sent, the update only applies if the row is still at this version.
    version: Optional[int] = None


class CellInfoUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    voltage: str = Field(min_length=1, max_length=20)


# Operations history schemas
class HistoryRecordBase(CamelModel):
    cell_number: str = Field(min_length=1, max_length=50)
    cell_name: str = ""
    action: str = Field(min_length=1)
    operator: str = ""
    timestamp: str = ""
    reason: Optional[str] = None
    document_type: Optional[str] = None
    order_number: Optional[str] = None
    work_order_number: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    responsible_person: Optional[str] = None
    comment: Optional[str] = None
    severity: Optional[str] = None


class HistoryRecordCreate(HistoryRecordBase):
    pass


class HistoryRecordResponse(HistoryRecordBase):
    id: str
    ru_id: str
    created_at: Optional[UtcDatetime] = Field(default=None, alias="created_at")
    updated_at: Optional[UtcDatetime] = Field(default=None, alias="updated_at")


# Substation view
class SubstationInfo(CamelModel):
    id: str
    name: str
    location: str
    description: str
    voltage: str
    installed_power: str
    total_rus: int = Field(alias="totalRUs")
    status: str
    rus: list[EquipmentUnitResponse]


class SubstationResponse(BaseModel):
    substation: SubstationInfo


class RoleProbeResponse(BaseModel):
    message: str
    user: str
    role: str
