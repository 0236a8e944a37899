"""Seed database with the admin account and demo equipment."""
from app.auth import hash_password
from app.config import settings
from app.database import SessionLocal, init_db
from app.models import Account, Cell, EquipmentUnit, Role


DEMO_UNIT = {
    "id": "tp-1i",
    "name": "ТП-1И",
    "voltage": "10/0,4 кВ",
    "sections": 2,
    "cells_count": 12,
    "transformers": 2,
    "transformer_power": "2 × 100 кВА",
    "location": "Промзона Хоргос",
    "installation_date": "2021-08-10",
    "manufacturer": "Энерготехника",
    "last_maintenance": "2024-02-15",
    "next_maintenance": "2024-08-15",
    "status": "Работает в штатном режиме",
    "scheme_type": "Две секции шин с секционированием",
    "total_load_high": "430 А",
    "total_load_low": "635 А",
    "total_power_high": "430 кВА",
    "total_power_low": "250 кВт",
    "max_capacity_high": "630 А",
    "max_capacity_low": "800 А",
    "operational_hours": 21500,
    "last_inspection": "2024-02-20",
    "type": "TP",
    "has_high_side": True,
    "has_low_side": True,
    "bus_sections": 2,
    "cells_per_section": 9,
    "substation_id": "ps-164",
}

DEMO_CELLS = [
    # High side, section 1
    {"number": "яч.11", "name": "Ввод-10 кВ №1", "type": "INPUT", "status": "ON", "voltage": "10 кВ", "voltage_level": "HIGH",
     "current": 150, "temperature": 35, "load": 75, "description": "Входное питание 10 кВ, секция 1", "bus_section": 1},
    {"number": "В10-2", "name": "Т-1 Выс. сторона", "type": "TRANSFORMER", "status": "ON", "voltage": "10 кВ", "voltage_level": "HIGH",
     "power": "100 кВА", "current": 95, "temperature": 65, "load": 85, "description": "Трансформатор №1 100 кВА, секция 1",
     "transformer_number": "Т-1", "bus_section": 1},
    # High side, section 2
    {"number": "яч.12", "name": "Ввод-10 кВ №2", "type": "INPUT", "status": "ON", "voltage": "10 кВ", "voltage_level": "HIGH",
     "current": 145, "temperature": 32, "load": 72, "description": "Входное питание 10 кВ, секция 2", "bus_section": 2},
    {"number": "В10-7", "name": "Т-2 Выс. сторона", "type": "TRANSFORMER", "status": "ON", "voltage": "10 кВ", "voltage_level": "HIGH",
     "power": "100 кВА", "current": 88, "temperature": 62, "load": 80, "description": "Трансформатор №2 100 кВА, секция 2",
     "transformer_number": "Т-2", "bus_section": 2},
    # Sectioning
    {"number": "яч.1", "name": "СР-10кВ", "type": "SR", "status": "OFF", "voltage": "10 кВ", "voltage_level": "HIGH",
     "current": 0, "temperature": 28, "load": 0, "description": "Секционный разъединитель", "bus_section": 0},
    {"number": "яч.2", "name": "СВ-10кВ", "type": "SV", "status": "ON", "voltage": "10 кВ", "voltage_level": "HIGH",
     "current": 50, "temperature": 40, "load": 25, "description": "Секционный выключатель", "bus_section": 0},
    # Low side
    {"number": "Н04-1", "name": "Т-1 Низ. сторона", "type": "TRANSFORMER", "status": "ON", "voltage": "0,4 кВ", "voltage_level": "LOW",
     "power": "100 кВА", "current": 140, "temperature": 45, "load": 85, "description": "Низковольтная сторона Трансформатора №1",
     "transformer_number": "Т-1", "bus_section": 1},
    {"number": "яч.9", "name": "ТП-2И", "type": "OUTPUT", "status": "ON", "voltage": "0,4 кВ", "voltage_level": "LOW",
     "power": "50 кВт", "current": 72, "temperature": 38, "load": 60, "description": "Выходной фидер №1", "bus_section": 1},
    {"number": "Н04-5", "name": "Т-2 Низ. сторона", "type": "TRANSFORMER", "status": "ON", "voltage": "0,4 кВ", "voltage_level": "LOW",
     "power": "100 кВА", "current": 130, "temperature": 42, "load": 80, "description": "Низковольтная сторона Трансформатора №2",
     "transformer_number": "Т-2", "bus_section": 2},
    {"number": "яч.10", "name": "ТП-2И", "type": "OUTPUT", "status": "ON", "voltage": "0,4 кВ", "voltage_level": "LOW",
     "power": "30 кВт", "current": 43, "temperature": 36, "load": 50, "description": "Выходной фидер №3", "bus_section": 2},
]


def seed():
    """Create missing seed rows; existing ones are left alone."""
    init_db()
    db = SessionLocal()

    try:
        admin = db.query(Account).filter(Account.email == settings.SEED_ADMIN_EMAIL).first()
        if admin is None:
            db.add(
                Account(
                    name="Administrator",
                    email=settings.SEED_ADMIN_EMAIL,
                    password_hash=hash_password(settings.SEED_ADMIN_PASSWORD),
                    role=Role.ADMIN.value,
                )
            )
            print(f"📝 Admin account created: {settings.SEED_ADMIN_EMAIL}")
        else:
            print(f"✅ Admin account already exists: {settings.SEED_ADMIN_EMAIL}")

        unit = db.query(EquipmentUnit).filter(EquipmentUnit.id == DEMO_UNIT["id"]).first()
        if unit is None:
            db.add(EquipmentUnit(**DEMO_UNIT))
            db.flush()
            for cell_data in DEMO_CELLS:
                db.add(Cell(ru_id=DEMO_UNIT["id"], **cell_data))
            print(f"📝 {DEMO_UNIT['name']} created with {len(DEMO_CELLS)} cells")
        else:
            print(f"✅ {DEMO_UNIT['name']} already exists")

        db.commit()
        print("✅ Database seeded successfully!")

    except Exception as e:
        db.rollback()
        print(f"❌ Error seeding database: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
