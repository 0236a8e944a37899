from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.services.cell_state import (
    apply_info_edit,
    apply_status_transition,
    ensure_expected_version,
    normalize_cell_status,
)
from app.services.timestamps import format_operation_time


def _cell(**overrides):
    values = {
        "status": "OFF",
        "is_grounded": False,
        "last_operation": None,
        "last_grounded_operation": None,
        "name": "Ввод 1",
        "description": "Ввод от ПС-164",
        "voltage": "10 кВ",
        "updated_at": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_status_change_stamps_last_operation() -> None:
    at = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    cell = apply_status_transition(_cell(), status="ON", at=at)

    assert cell.status == "ON"
    assert cell.last_operation == at
    assert cell.last_grounded_operation is None
    assert cell.is_grounded is False


def test_repeating_same_status_still_advances_last_operation() -> None:
    first = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    second = first + timedelta(minutes=5)
    cell = _cell()

    apply_status_transition(cell, status="ON", at=first)
    apply_status_transition(cell, status="ON", at=second)

    assert cell.status == "ON"
    assert cell.last_operation == second


def test_supplied_grounding_is_applied_and_stamped() -> None:
    at = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    cell = apply_status_transition(_cell(), status="MAINTENANCE", is_grounded=True, at=at)

    assert cell.is_grounded is True
    assert cell.last_grounded_operation == at


def test_ungrounding_also_stamps_grounding_time() -> None:
    at = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    cell = apply_status_transition(_cell(is_grounded=True), status="OFF", is_grounded=False, at=at)

    assert cell.is_grounded is False
    assert cell.last_grounded_operation == at


def test_unknown_status_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown cell status"):
        normalize_cell_status("BROKEN")


def test_info_edit_does_not_count_as_operation() -> None:
    previous = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    cell = _cell(status="ON", last_operation=previous)

    apply_info_edit(cell, name="Ввод 2", description="Новый ввод", voltage="6 кВ")

    assert (cell.name, cell.description, cell.voltage) == ("Ввод 2", "Новый ввод", "6 кВ")
    assert cell.status == "ON"
    assert cell.last_operation == previous


def test_expected_version_guard() -> None:
    ensure_expected_version(current_version=3, expected_version=None)
    ensure_expected_version(current_version=3, expected_version=3)
    with pytest.raises(ValueError, match="modified concurrently"):
        ensure_expected_version(current_version=4, expected_version=3)


def test_operation_time_format() -> None:
    at = datetime(2026, 3, 1, 8, 5, 9, tzinfo=timezone.utc)

    assert format_operation_time(at, tz_name="UTC") == "01.03.2026 08:05:09"
    assert format_operation_time(at.replace(tzinfo=None), tz_name="UTC") == "01.03.2026 08:05:09"
    assert format_operation_time(None) is None
