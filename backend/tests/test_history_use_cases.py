from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.schemas import HistoryRecordCreate, HistoryRecordResponse
from app.use_cases.history import append_history_record_use_case, list_history_use_case

BASE = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


def _record(action: str, **extra) -> HistoryRecordCreate:
    return HistoryRecordCreate(
        cell_number="3",
        cell_name="Ячейка 3",
        action=action,
        operator="Иванов И.И.",
        timestamp="01.03.2026 13:00:00",
        **extra,
    )


def _append(db, ru_id: str, action: str, minutes: int):
    return append_history_record_use_case(
        db=db, ru_id=ru_id, payload=_record(action), at=BASE + timedelta(minutes=minutes)
    )


def test_append_returns_stored_record_with_generated_id(db, make_unit) -> None:
    make_unit("tp-1i")

    record = append_history_record_use_case(
        db=db,
        ru_id="tp-1i",
        payload=_record("Заземление", reason="Плановые работы", work_order_number="НД-17"),
    )

    assert record.id
    assert record.ru_id == "tp-1i"
    body = HistoryRecordResponse.model_validate(record).model_dump(by_alias=True)
    assert body["cellNumber"] == "3"
    assert body["workOrderNumber"] == "НД-17"
    assert body["timestamp"] == "01.03.2026 13:00:00"
    assert body["severity"] is None


def test_newest_record_comes_first_and_stays_in_its_unit(db, make_unit) -> None:
    make_unit("tp-a")
    make_unit("tp-b")
    _append(db, "tp-a", "Включение", 0)
    _append(db, "tp-b", "Отключение", 5)
    newest = _append(db, "tp-a", "Отключение", 10)

    records = list_history_use_case(db=db, ru_id="tp-a")

    assert records[0].id == newest.id
    assert [r.action for r in records] == ["Отключение", "Включение"]
    assert newest.id not in {r.id for r in list_history_use_case(db=db, ru_id="tp-b")}


def test_limit_bounds_result_and_non_positive_limit_returns_all(db, make_unit) -> None:
    make_unit("tp-1i")
    for minute in range(5):
        _append(db, "tp-1i", f"Операция {minute}", minute)

    assert len(list_history_use_case(db=db, ru_id="tp-1i", limit=3)) == 3
    assert len(list_history_use_case(db=db, ru_id="tp-1i", limit=0)) == 5
    assert len(list_history_use_case(db=db, ru_id="tp-1i", limit=-1)) == 5
    assert list_history_use_case(db=db, ru_id="tp-1i", limit=1)[0].action == "Операция 4"
