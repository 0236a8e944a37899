"""SQLAlchemy models: accounts, equipment units, cells and the operations ledger."""
from enum import Enum
import uuid

from sqlalchemy import (
    Boolean, Column, String, Integer, Float, DateTime, Text,
    ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .services.timestamps import now_utc


class Role(str, Enum):
    DISPATCHER = "dispatcher"
    ENGINEER = "engineer"
    ADMIN = "admin"


class EquipmentType(str, Enum):
    KRU = "KRU"
    TP = "TP"


class CellType(str, Enum):
    INPUT = "INPUT"
    SR = "SR"
    SV = "SV"
    TRANSFORMER = "TRANSFORMER"
    RESERVE = "RESERVE"
    BUS = "BUS"
    LOW_VOLTAGE = "LOW_VOLTAGE"
    OUTPUT = "OUTPUT"
    PROTECTION = "PROTECTION"
    MEASUREMENT = "MEASUREMENT"


class CellStatus(str, Enum):
    ON = "ON"
    OFF = "OFF"
    RESERVE = "RESERVE"
    ERROR = "ERROR"
    MAINTENANCE = "MAINTENANCE"


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _new_id() -> str:
    return str(uuid.uuid4())


class Account(Base):
    """User account. History rows reference operators by name, never by FK."""
    __tablename__ = "users"
    
    id = Column(String(64), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=Role.ENGINEER.value, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)
    
    __table_args__ = (
        CheckConstraint(role.in_(_values(Role)), name='chk_user_role'),
    )


class EquipmentUnit(Base):
    """Switchgear installation (RU): a KRU lineup or a TP cabinet."""
    __tablename__ = "ru_infos"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    voltage = Column(String(50), nullable=False, default="")
    sections = Column(Integer, nullable=False, default=0)
    cells_count = Column(Integer, nullable=False, default=0)
    transformers = Column(Integer, nullable=False, default=0)
    transformer_power = Column(String(100), nullable=False, default="")
    location = Column(String(255), nullable=False, default="")
    installation_date = Column(String(20), nullable=False, default="")
    manufacturer = Column(String(255), nullable=False, default="")
    last_maintenance = Column(String(20), nullable=False, default="")
    next_maintenance = Column(String(20), nullable=False, default="")
    status = Column(String(255), nullable=False, default="")
    scheme_type = Column(String(255), nullable=False, default="")
    total_load_high = Column(String(50), nullable=False, default="")
    total_load_low = Column(String(50), nullable=False, default="")
    total_power_high = Column(String(50), nullable=False, default="")
    total_power_low = Column(String(50), nullable=False, default="")
    max_capacity_high = Column(String(50), nullable=False, default="")
    max_capacity_low = Column(String(50), nullable=False, default="")
    operational_hours = Column(Integer, nullable=False, default=0)
    last_inspection = Column(String(20), nullable=False, default="")
    type = Column(String(10), nullable=False, default=EquipmentType.TP.value)
    has_high_side = Column(Boolean, nullable=False, default=True)
    has_low_side = Column(Boolean, nullable=False, default=True)
    bus_sections = Column(Integer, nullable=False, default=0)
    cells_per_section = Column(Integer, nullable=False, default=0)
    substation_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint(type.in_(_values(EquipmentType)), name='chk_ru_type'),
    )

    # Relationships
    cells = relationship("Cell", back_populates="unit", order_by="Cell.id")
    operation_records = relationship("OperationRecord", back_populates="unit")


class Cell(Base):
    """Single compartment of an equipment unit."""
    __tablename__ = "cells"

    id = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(String(50), nullable=False)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=CellStatus.OFF.value)
    voltage = Column(String(20), nullable=False, default="")
    voltage_level = Column(String(10), nullable=False, default="")
    power = Column(String(50), nullable=True)
    description = Column(Text, nullable=False, default="")
    # Instants; rendered as DD.MM.YYYY HH:MM:SS only when serialized.
    last_operation = Column(DateTime(timezone=True), nullable=True)
    is_grounded = Column(Boolean, nullable=False, default=False)
    last_grounded_operation = Column(DateTime(timezone=True), nullable=True)
    transformer_number = Column(String(20), nullable=True)
    bus_section = Column(Integer, nullable=True)
    current = Column(Float, nullable=True)
    temperature = Column(Float, nullable=True)
    load = Column(Float, nullable=True)
    ru_id = Column(String(64), ForeignKey("ru_infos.id"), nullable=False, index=True)
    # Row version for compare-and-swap updates.
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint(type.in_(_values(CellType)), name='chk_cell_type'),
        CheckConstraint(status.in_(_values(CellStatus)), name='chk_cell_status'),
    )
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    unit = relationship("EquipmentUnit", back_populates="cells")


class OperationRecord(Base):
    """Append-only ledger entry. Nothing updates or deletes these rows."""
    __tablename__ = "operation_records"

    id = Column(String(64), primary_key=True, default=_new_id)
    cell_number = Column(String(50), nullable=False, default="")
    cell_name = Column(String(255), nullable=False, default="")
    action = Column(Text, nullable=False)
    operator = Column(String(255), nullable=False, default="")
    # Client-supplied wall-clock string, kept verbatim.
    timestamp = Column(String(50), nullable=False, default="")
    reason = Column(Text, nullable=True)
    document_type = Column(String(100), nullable=True)
    order_number = Column(String(100), nullable=True)
    work_order_number = Column(String(100), nullable=True)
    start_date = Column(String(50), nullable=True)
    end_date = Column(String(50), nullable=True)
    responsible_person = Column(String(255), nullable=True)
    comment = Column(Text, nullable=True)
    severity = Column(String(50), nullable=True)
    ru_id = Column(String(64), ForeignKey("ru_infos.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    # Relationships
    unit = relationship("EquipmentUnit", back_populates="operation_records")
