import csv
import io
from datetime import datetime, timedelta

import pytest

from database.category_dao import CategoryDAO
from services.data_service import CSV_HEADER, sanitize_field
from utils.constants import EXPORT_VERSION


def test_sanitize_field():
    assert sanitize_field("a,b\nc\r\nd") == "a，b c d"
    assert sanitize_field(None) == ""


def test_csv_export_is_oldest_first_and_one_line_per_record(data_service, ledger, clock):
    ledger.append(120, "午餐", note="rice, soup\nand tea")
    ledger.append(80, "早餐", date=clock.current - timedelta(hours=5))
    text = data_service.export_csv()
    lines = text.splitlines()
    assert len(lines) == 3
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == CSV_HEADER
    assert rows[1] == ["2024-04-10", "07:30", "早餐", "80", ""]
    assert rows[2] == ["2024-04-10", "12:30", "午餐", "120", "rice， soup and tea"]


def test_json_export_shape(data_service, ledger, budget_service):
    budget_service.set(15000)
    e = ledger.append(120, "午餐")
    data = data_service.export_json()
    assert data["export_version"] == EXPORT_VERSION
    assert data["budget"] == 15000
    assert data["categories"][0]["start"] == [5, 0]
    assert data["expenses"] == [{
        "id": e.id,
        "date": "2024-04-10T12:30:00",
        "amount": 120,
        "category_name": "午餐",
        "note": None,
    }]


def test_replace_import_restores_exported_state(data_service, ledger, budget_service, category_service):
    budget_service.set(15000)
    kept = ledger.append(120, "午餐")
    category_service.create("飲品", (15, 0), (15, 30), "blue")
    snapshot = data_service.export_json()

    ledger.append(999, "娛樂")
    category_service.reset_defaults()
    budget_service.set(1)

    stats = data_service.import_json(snapshot, "replace")
    assert stats["expenses"] == 1
    assert stats["budget"] == 1
    assert [e.id for e in ledger.list()] == [kept.id]
    assert category_service.names()[-1] == "飲品"
    assert budget_service.get() == 15000


def test_merge_import_skips_known_ids_and_names(data_service, ledger, budget_service, category_service):
    existing = ledger.append(120, "午餐")
    data = {
        "export_version": EXPORT_VERSION,
        "budget": 1,
        "categories": [
            {"name": "午餐", "start": [11, 0], "end": [13, 59], "color": "orange"},
            {"name": "飲品", "start": [15, 0], "end": [15, 30], "color": "blue"},
        ],
        "expenses": [
            {"id": existing.id, "date": "2024-04-10T12:30:00", "amount": 120, "category_name": "午餐"},
            {"id": "new1", "date": "2024-04-09T19:00:00", "amount": 300, "category_name": "晚餐"},
        ],
    }
    stats = data_service.import_json(data, "merge")
    assert stats == {"categories": 1, "expenses": 1, "skipped": 0, "budget": 0}
    assert len(ledger) == 2
    assert budget_service.get() != 1


def test_invalid_records_are_skipped(data_service, ledger, clock):
    future = (clock.current + timedelta(days=1)).isoformat()
    data = {
        "export_version": EXPORT_VERSION,
        "categories": [{"name": "bad", "start": [25, 0], "end": [1, 0]}],
        "expenses": [
            {"date": "2024-04-01T10:00:00", "amount": 0, "category_name": "x"},
            {"date": "not a date", "amount": 5, "category_name": "x"},
            {"date": future, "amount": 5, "category_name": "x"},
            {"date": "2024-04-01T10:00:00", "amount": 5, "category_name": ""},
            {"date": "2024-04-01T10:00:00", "amount": 5, "category_name": "ok"},
        ],
    }
    stats = data_service.import_json(data, "merge")
    assert stats["skipped"] == 5
    assert stats["expenses"] == 1
    assert ledger.list()[0].date == datetime(2024, 4, 1, 10, 0)


def test_rejects_unknown_version_and_mode(data_service):
    with pytest.raises(ValueError):
        data_service.import_json({"export_version": 99}, "merge")
    with pytest.raises(ValueError):
        data_service.import_json({"export_version": EXPORT_VERSION}, "append")
    with pytest.raises(ValueError):
        data_service.import_json(["not", "a", "dict"], "merge")


def test_merge_import_after_rename_keeps_store_writable(db, data_service, category_service):
    snapshot = data_service.export_json()
    lunch = next(c for c in category_service.get_all() if c.name == "午餐")
    category_service.update(lunch.id, "中餐", (11, 0), (13, 59), "orange")

    stats = data_service.import_json(snapshot, "merge")
    assert stats["categories"] == 0
    ids = [c.id for c in category_service.get_all()]
    assert len(ids) == len(set(ids))

    category_service.create("飲品", (15, 0), (15, 30), "blue")
    assert category_service.last_persist_error is None
    assert [c.name for c in CategoryDAO(db).load_all()] == category_service.names()
