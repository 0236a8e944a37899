from __future__ import annotations

from app.auth import verify_password
from app.config import settings
from app.models import Account, Cell, EquipmentUnit

from seed_data import DEMO_CELLS, seed


def test_seed_is_idempotent(db) -> None:
    seed()
    seed()

    admins = db.query(Account).filter(Account.email == settings.SEED_ADMIN_EMAIL).all()
    assert len(admins) == 1
    assert admins[0].role == "admin"
    assert verify_password(settings.SEED_ADMIN_PASSWORD, admins[0].password_hash)

    unit = db.get(EquipmentUnit, "tp-1i")
    assert unit.substation_id == "ps-164"
    assert db.query(Cell).filter(Cell.ru_id == "tp-1i").count() == len(DEMO_CELLS)
