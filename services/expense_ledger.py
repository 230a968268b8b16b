"""In-memory expense ledger with best-effort persistence.

The in-memory list is authoritative for the session. Every effective
mutation writes the full collection through the DAO; a failed write is
logged and remembered in ``last_persist_error`` but never undoes the change.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from database.expense_dao import ExpenseDAO
from models.expense import Expense
from services.errors import InvalidAmountError, InvalidDateError, PersistenceWriteError
from utils.date_helpers import is_same_day, now

logger = logging.getLogger(__name__)


class ExpenseLedger:
    def __init__(self, expense_dao: ExpenseDAO, clock: Callable[[], datetime] = now):
        self._dao = expense_dao
        self._clock = clock
        self._expenses: list[Expense] = expense_dao.load_all()
        self.last_persist_error: Optional[PersistenceWriteError] = None

    def __len__(self) -> int:
        return len(self._expenses)

    def list(self) -> list[Expense]:
        return list(self._expenses)

    def sorted_by_date(self, descending: bool = True) -> list[Expense]:
        return sorted(self._expenses, key=lambda e: e.date, reverse=descending)

    def get(self, expense_id: str) -> Optional[Expense]:
        return next((e for e in self._expenses if e.id == expense_id), None)

    def append(
        self,
        amount: int,
        category_name: str,
        note: str | None = None,
        date: datetime | None = None,
    ) -> Expense:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"Amount must be a whole number, got {amount!r}.")
        if amount <= 0:
            raise InvalidAmountError("Amount must be greater than zero.")
        category_name = (category_name or "").strip()
        if not category_name:
            raise ValueError("Category name cannot be empty.")
        current = self._clock()
        if date is None:
            date = current
        elif date > current:
            raise InvalidDateError("Expenses cannot be dated in the future.")
        note = (note or "").strip() or None

        expense = Expense(date=date, amount=amount, category_name=category_name, note=note)
        self._expenses.append(expense)
        self._persist()
        return expense

    def remove(self, expense_id: str) -> bool:
        """Delete one record. Unknown ids are ignored."""
        return self.remove_where(lambda e: e.id == expense_id) > 0

    def remove_where(self, predicate: Callable[[Expense], bool]) -> int:
        kept = [e for e in self._expenses if not predicate(e)]
        removed = len(self._expenses) - len(kept)
        if removed:
            self._expenses = kept
            self._persist()
        return removed

    def remove_on_day(self, day: date) -> int:
        return self.remove_where(lambda e: is_same_day(e.date, day))

    def replace_all(self, expenses: list[Expense]):
        self._expenses = list(expenses)
        self._persist()

    def _persist(self):
        try:
            self._dao.save_all(self._expenses)
        except PersistenceWriteError as e:
            self.last_persist_error = e
            logger.error("Ledger kept in memory only (%d records): %s", len(self._expenses), e)
        else:
            self.last_persist_error = None
