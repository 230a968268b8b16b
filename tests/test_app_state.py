from datetime import date, datetime, timedelta

import pytest

from services.app_state import AppState
from services.category_service import CategoryService
from services.errors import PersistenceWriteError
from utils.constants import UNCLASSIFIED_CATEGORY


def test_add_expense_resolves_category_from_clock(state, clock):
    e = state.add_expense(150)
    assert e.category_name == "午餐"
    clock.current = datetime(2024, 4, 10, 23, 45)
    assert state.add_expense(90).category_name == "宵夜"


def test_explicit_category_wins(state):
    assert state.add_expense(50, "飲品").category_name == "飲品"


def test_unclassified_when_no_category_matches(state):
    for c in state.categories:
        state.delete_category(c.id)
    assert state.add_expense(50).category_name == UNCLASSIFIED_CATEGORY


def test_backdated_entry_keeps_wall_clock_time(state, clock):
    e = state.add_expense_on(date(2024, 4, 3), 200)
    assert e.date == datetime(2024, 4, 3, 12, 30)


def test_today_expenses_and_delete_today(state, clock):
    state.add_expense_on(date(2024, 4, 9), 10)
    first = state.add_expense(20)
    clock.current += timedelta(minutes=5)
    second = state.add_expense(30)
    assert state.today_expenses() == [second, first]
    assert state.delete_today() == 2
    assert state.today_expenses() == []
    assert len(state.expenses) == 1


def test_listeners_hear_their_scope_and_full(state):
    heard = []
    state.subscribe("expense", lambda scope: heard.append(("expense", scope)))
    state.subscribe("budget", lambda scope: heard.append(("budget", scope)))
    state.subscribe("full", lambda scope: heard.append(("full", scope)))

    state.add_expense(100)
    assert heard == [("expense", "expense"), ("full", "expense")]

    heard.clear()
    state.set_budget(20000)
    assert heard == [("budget", "budget"), ("full", "budget")]


def test_full_event_reaches_every_listener_once(state, data_service):
    heard = []

    def listener(scope):
        heard.append(scope)

    for scope in ("expense", "category", "budget", "full"):
        state.subscribe(scope, listener)
    state.import_json(data_service.export_json(), "merge")
    assert heard == ["full"]


def test_failing_listener_does_not_block_others(state):
    heard = []

    def broken(scope):
        raise RuntimeError("boom")

    state.subscribe("expense", broken)
    state.subscribe("expense", heard.append)
    state.add_expense(100)
    assert heard == ["expense"]
    assert len(state.expenses) == 1


def test_noop_delete_does_not_notify(state):
    heard = []
    state.subscribe("expense", heard.append)
    assert state.delete_expense("missing") is False
    assert heard == []


def test_unsubscribe(state):
    heard = []
    state.subscribe("category", heard.append)
    state.unsubscribe("category", heard.append)
    state.reset_categories()
    assert heard == []


def test_unknown_scope_is_rejected(state):
    with pytest.raises(ValueError):
        state.subscribe("weather", print)


def test_snapshot_reflects_budget_change(state):
    state.set_budget(21000)
    assert state.snapshot().daily_allowance == 1000


def test_failed_validation_does_not_notify(state):
    heard = []
    state.subscribe("expense", heard.append)
    with pytest.raises(ValueError):
        state.add_expense(0)
    assert heard == []


class FlakyCategoryDAO:
    def __init__(self):
        self.fail = True

    def load_all(self):
        return []

    def has_been_saved(self):
        return True

    def save_all(self, categories):
        if self.fail:
            raise PersistenceWriteError("disk full")


def test_persist_failed_covers_category_writes(ledger, budget_service, report_service, data_service, clock):
    dao = FlakyCategoryDAO()
    state = AppState(
        CategoryService(dao, clock=clock), ledger, budget_service, report_service, data_service, clock=clock
    )
    state.add_category("飲品", (15, 0), (15, 30), "blue")
    assert state.persist_failed
    assert state.categories[0].name == "飲品"

    dao.fail = False
    state.add_category("點心", (16, 0), (16, 30), "pink")
    assert not state.persist_failed


def test_persist_failed_covers_budget_writes(state, budget_service, monkeypatch):
    def fail(value):
        raise PersistenceWriteError("read-only")

    monkeypatch.setattr(budget_service._dao, "save", fail)
    state.set_budget(20000)
    assert state.persist_failed
    assert state.budget == 20000
