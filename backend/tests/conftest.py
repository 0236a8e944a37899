"""Shared fixtures: in-memory SQLite, fast bcrypt and token helpers."""
from __future__ import annotations

import os

import pytest

# Must be set before the app settings are imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from fastapi.testclient import TestClient  # noqa: E402

from app.auth import get_token_service, hash_password  # noqa: E402
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Account, Cell, EquipmentUnit, Role  # noqa: E402

DEFAULT_PASSWORD = "Secret!1"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def make_account(db):
    def _make(*, email: str, role: Role = Role.ENGINEER, name: str = "Test User", password: str = DEFAULT_PASSWORD) -> Account:
        account = Account(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    return _make


@pytest.fixture
def auth_headers():
    def _headers(account: Account) -> dict[str, str]:
        token = get_token_service().issue(account)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_unit(db):
    def _make(unit_id: str, *, name: str = "ТП-1И", substation_id: str | None = None, cells: int = 0) -> EquipmentUnit:
        unit = EquipmentUnit(id=unit_id, name=name, type="TP", voltage="10/0.4 кВ", substation_id=substation_id)
        db.add(unit)
        for index in range(cells):
            db.add(
                Cell(
                    ru_id=unit_id,
                    number=str(index + 1),
                    name=f"Ячейка {index + 1}",
                    type="OUTPUT",
                    status="OFF",
                    voltage="10 кВ",
                )
            )
        db.commit()
        db.refresh(unit)
        return unit

    return _make
