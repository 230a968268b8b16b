"""Spending aggregates over a ledger snapshot.

The module-level functions are pure: they take the expenses and a reference
instant and never touch storage. All money stays in whole integers; floats
only appear in BudgetSnapshot.percentage for display.
"""
from datetime import datetime
from typing import Iterable

from models.budget import BudgetSnapshot
from models.category import CategoryColor
from models.expense import Expense
from utils.constants import OTHER_BUCKET
from utils.date_helpers import is_same_day, is_same_month, now, remaining_days_in_month

SCOPE_TODAY = "today"
SCOPE_MONTH = "month"


def today_spent(expenses: Iterable[Expense], ref: datetime) -> int:
    return sum(e.amount for e in expenses if is_same_day(e.date, ref))


def month_spent(expenses: Iterable[Expense], ref: datetime) -> int:
    return sum(e.amount for e in expenses if is_same_month(e.date, ref))


def daily_allowance(expenses: Iterable[Expense], budget: int, ref: datetime) -> int:
    """Remaining monthly budget spread over the days left, today included. Never negative."""
    remaining_days = remaining_days_in_month(ref)
    remaining_budget = budget - month_spent(expenses, ref)
    if remaining_budget <= 0:
        return 0
    return remaining_budget // max(1, remaining_days)


def category_breakdown(expenses: Iterable[Expense], ref: datetime, scope: str) -> dict[str, int]:
    """Sum per stored category name for today or for the current month."""
    if scope == SCOPE_TODAY:
        in_scope = is_same_day
    elif scope == SCOPE_MONTH:
        in_scope = is_same_month
    else:
        raise ValueError(f"Unknown breakdown scope: {scope!r}")
    totals: dict[str, int] = {}
    for e in expenses:
        if in_scope(e.date, ref):
            totals[e.category_name] = totals.get(e.category_name, 0) + e.amount
    return totals


def expenses_in_month(expenses: Iterable[Expense], year: int, month: int) -> list[Expense]:
    return [e for e in expenses if e.date.year == year and e.date.month == month]


class ReportService:
    def __init__(self, ledger, budget_service, category_service, clock=now):
        self._ledger = ledger
        self._budget = budget_service
        self._categories = category_service
        self._clock = clock

    def snapshot(self, ref: datetime | None = None) -> BudgetSnapshot:
        ref = ref or self._clock()
        expenses = self._ledger.list()
        budget = self._budget.get()
        return BudgetSnapshot(
            monthly_budget=budget,
            month_spent=month_spent(expenses, ref),
            today_spent=today_spent(expenses, ref),
            daily_allowance=daily_allowance(expenses, budget, ref),
        )

    def month_total(self, year: int, month: int) -> int:
        return sum(e.amount for e in expenses_in_month(self._ledger.list(), year, month))

    def month_breakdown(self, year: int, month: int) -> list[dict]:
        """Return [{category, color_hex, total}, ...] for the pie chart, largest first.

        Names that are no longer active categories are pooled in the catch-all bucket.
        """
        colors = {c.name: c.color for c in self._categories.get_all()}
        totals: dict[str, int] = {}
        for e in expenses_in_month(self._ledger.list(), year, month):
            name = e.category_name if e.category_name in colors else OTHER_BUCKET
            totals[name] = totals.get(name, 0) + e.amount
        rows = [
            {
                "category": name,
                "color_hex": colors.get(name, CategoryColor.GRAY).hex,
                "total": total,
            }
            for name, total in totals.items()
        ]
        rows.sort(key=lambda r: r["total"], reverse=True)
        return rows

    def month_expenses(self, year: int, month: int) -> list[Expense]:
        """Newest first."""
        rows = expenses_in_month(self._ledger.list(), year, month)
        return sorted(rows, key=lambda e: e.date, reverse=True)
