"""Application state owned by the composition root.

Views read through the properties and change things only through the
mutation methods below; each mutation notifies the subscribers of its scope
so tabs can refresh themselves.
"""
import logging
from datetime import datetime
from typing import Callable

from models.budget import BudgetSnapshot
from models.category import Category
from models.expense import Expense
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.data_service import DataService
from services.expense_ledger import ExpenseLedger
from services.report_service import ReportService
from utils.date_helpers import combine_with_clock, now

logger = logging.getLogger(__name__)

SCOPES = ("expense", "category", "budget", "full")


class AppState:
    def __init__(
        self,
        category_service: CategoryService,
        ledger: ExpenseLedger,
        budget_service: BudgetService,
        report_service: ReportService,
        data_service: DataService,
        clock: Callable[[], datetime] = now,
    ):
        self.category_service = category_service
        self.ledger = ledger
        self.budget_service = budget_service
        self.reports = report_service
        self.data_service = data_service
        self._clock = clock
        self._listeners: dict[str, list[Callable[[str], None]]] = {s: [] for s in SCOPES}

    # ── Observers ────────────────────────────────────────────────────────────

    def subscribe(self, scope: str, callback: Callable[[str], None]):
        if scope not in self._listeners:
            raise ValueError(f"Unknown scope: {scope!r}")
        self._listeners[scope].append(callback)

    def unsubscribe(self, scope: str, callback: Callable[[str], None]):
        listeners = self._listeners.get(scope, [])
        if callback in listeners:
            listeners.remove(callback)

    def _emit(self, scope: str):
        # "full" listeners hear everything; a "full" event reaches every listener.
        if scope == "full":
            targets = [cb for cbs in self._listeners.values() for cb in cbs]
        else:
            targets = self._listeners[scope] + self._listeners["full"]
        seen = []
        for callback in targets:
            if callback in seen:
                continue
            seen.append(callback)
            try:
                callback(scope)
            except Exception:
                logger.exception("Listener %r failed on %s change", callback, scope)

    # ── Reads ────────────────────────────────────────────────────────────────

    @property
    def categories(self) -> list[Category]:
        return self.category_service.get_all()

    @property
    def expenses(self) -> list[Expense]:
        return self.ledger.list()

    @property
    def budget(self) -> int:
        return self.budget_service.get()

    def snapshot(self) -> BudgetSnapshot:
        return self.reports.snapshot(self._clock())

    def auto_category_name(self) -> str:
        return self.category_service.resolve_name(self._clock())

    def today_expenses(self) -> list[Expense]:
        """Today's entries, newest first."""
        day = self._clock().date()
        return [e for e in self.ledger.sorted_by_date() if e.date.date() == day]

    @property
    def persist_failed(self) -> bool:
        return any(
            svc.last_persist_error is not None
            for svc in (self.ledger, self.category_service, self.budget_service)
        )

    # ── Expenses ─────────────────────────────────────────────────────────────

    def add_expense(
        self,
        amount: int,
        category_name: str | None = None,
        note: str | None = None,
        date: datetime | None = None,
    ) -> Expense:
        """Without a category name, the time-of-day rules pick one."""
        if not category_name:
            category_name = self.auto_category_name()
        expense = self.ledger.append(amount, category_name, note=note, date=date)
        self._emit("expense")
        return expense

    def add_expense_on(self, day, amount: int, category_name: str | None = None, note: str | None = None) -> Expense:
        """Backdate to ``day`` while keeping the current wall-clock time."""
        return self.add_expense(amount, category_name, note, combine_with_clock(day, self._clock()))

    def delete_expense(self, expense_id: str) -> bool:
        removed = self.ledger.remove(expense_id)
        if removed:
            self._emit("expense")
        return removed

    def delete_today(self) -> int:
        count = self.ledger.remove_on_day(self._clock().date())
        if count:
            self._emit("expense")
        return count

    # ── Budget ───────────────────────────────────────────────────────────────

    def set_budget(self, value: int):
        self.budget_service.set(value)
        self._emit("budget")

    # ── Categories ───────────────────────────────────────────────────────────

    def add_category(self, name, start, end, color) -> Category:
        category = self.category_service.create(name, start, end, color)
        self._emit("category")
        return category

    def update_category(self, category_id, name, start, end, color) -> Category:
        category = self.category_service.update(category_id, name, start, end, color)
        self._emit("category")
        return category

    def update_category_time(self, category_id, start_hour, start_minute, end_hour, end_minute) -> Category:
        category = self.category_service.update_time(
            category_id, start_hour, start_minute, end_hour, end_minute
        )
        self._emit("category")
        return category

    def delete_category(self, category_id: str):
        self.category_service.delete(category_id)
        self._emit("category")

    def move_category(self, category_id: str, offset: int) -> int:
        index = self.category_service.move(category_id, offset)
        self._emit("category")
        return index

    def reset_categories(self):
        self.category_service.reset_defaults()
        self._emit("category")

    # ── Import ───────────────────────────────────────────────────────────────

    def import_json(self, data: dict, mode: str) -> dict:
        stats = self.data_service.import_json(data, mode)
        self._emit("full")
        return stats
