from datetime import datetime, timedelta

import pytest

from models.expense import Expense
from services import report_service as rs
from utils.constants import OTHER_BUCKET


def _e(amount, when, category="午餐"):
    return Expense(date=when, amount=amount, category_name=category)


def test_daily_allowance_spreads_remaining_budget():
    ref = datetime(2024, 4, 10, 9, 0)
    expenses = [_e(3000, datetime(2024, 4, 2, 12, 0))]
    # 21 days left including today, 7000 left to spend
    assert rs.daily_allowance(expenses, 10000, ref) == 333


def test_daily_allowance_is_clamped_at_zero():
    ref = datetime(2024, 4, 15, 9, 0)
    expenses = [_e(5000, datetime(2024, 4, 1, 12, 0))]
    assert rs.daily_allowance(expenses, 1000, ref) == 0


def test_daily_allowance_on_last_day_is_whole_remainder():
    ref = datetime(2024, 2, 29, 20, 0)
    assert rs.daily_allowance([], 10000, ref) == 10000


def test_other_months_do_not_count():
    ref = datetime(2024, 4, 10, 9, 0)
    expenses = [
        _e(100, datetime(2024, 3, 31, 23, 59)),
        _e(200, datetime(2023, 4, 10, 9, 0)),
        _e(300, datetime(2024, 4, 1, 0, 0)),
    ]
    assert rs.month_spent(expenses, ref) == 300
    assert rs.today_spent(expenses, ref) == 0


def test_today_spent_sums_calendar_day():
    ref = datetime(2024, 4, 10, 12, 0)
    expenses = [
        _e(100, datetime(2024, 4, 10, 0, 0)),
        _e(50, datetime(2024, 4, 10, 23, 59)),
        _e(999, datetime(2024, 4, 9, 23, 59)),
    ]
    assert rs.today_spent(expenses, ref) == 150


def test_category_breakdown_scopes():
    ref = datetime(2024, 4, 10, 12, 0)
    expenses = [
        _e(100, ref, "午餐"),
        _e(40, ref, "飲品"),
        _e(60, ref - timedelta(days=1), "午餐"),
    ]
    assert rs.category_breakdown(expenses, ref, rs.SCOPE_TODAY) == {"午餐": 100, "飲品": 40}
    assert rs.category_breakdown(expenses, ref, rs.SCOPE_MONTH) == {"午餐": 160, "飲品": 40}
    with pytest.raises(ValueError):
        rs.category_breakdown(expenses, ref, "week")


def test_append_now_moves_today_and_month_only(ledger, clock):
    ledger.append(80, "早餐", date=clock.current - timedelta(days=1))
    ledger.append(120, "午餐")
    now = clock.current
    yesterday = now - timedelta(days=1)

    def totals():
        expenses = ledger.list()
        return (
            rs.today_spent(expenses, now),
            rs.month_spent(expenses, now),
            rs.today_spent(expenses, yesterday),
        )

    before = totals()
    ledger.append(250, "午餐", date=now)
    after = totals()
    assert after[0] - before[0] == 250
    assert after[1] - before[1] == 250
    assert after[2] == before[2]


def test_snapshot_uses_budget_and_clock(report_service, ledger, budget_service, clock):
    ledger.append(3000, "午餐", date=datetime(2024, 4, 2, 12, 0))
    ledger.append(200, "午餐")
    budget_service.set(10000)
    snap = report_service.snapshot()
    assert snap.monthly_budget == 10000
    assert snap.month_spent == 3200
    assert snap.today_spent == 200
    assert snap.daily_allowance == 6800 // 21
    assert snap.today_remaining == snap.daily_allowance - 200
    assert not snap.is_over_budget


def test_snapshot_flags_overspend(report_service, ledger):
    ledger.append(9000, "娛樂")
    snap = report_service.snapshot()
    assert snap.daily_allowance == 1000 // 21
    assert snap.is_over_budget
    assert snap.percentage == pytest.approx(0.9)


def test_month_breakdown_pools_removed_categories(report_service, ledger, clock):
    ledger.append(300, "午餐")
    ledger.append(100, "已刪除")
    ledger.append(50, "另一個")
    rows = report_service.month_breakdown(2024, 4)
    assert [(r["category"], r["total"]) for r in rows] == [("午餐", 300), (OTHER_BUCKET, 150)]
    assert all(r["color_hex"].startswith("#") for r in rows)


def test_month_expenses_newest_first(report_service, ledger, clock):
    a = ledger.append(1, "a", date=datetime(2024, 4, 1, 8, 0))
    b = ledger.append(2, "b")
    ledger.append(3, "c", date=datetime(2024, 3, 30, 8, 0))
    assert report_service.month_expenses(2024, 4) == [b, a]
    assert report_service.month_total(2024, 3) == 3
