from datetime import datetime

import pytest

from database.budget_dao import BudgetDAO
from database.category_dao import CategoryDAO
from database.db_manager import DatabaseManager
from database.expense_dao import ExpenseDAO
from services.app_state import AppState
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.data_service import DataService
from services.expense_ledger import ExpenseLedger
from services.report_service import ReportService

# April has 30 days; the 10th leaves 21 days including today.
FIXED_NOW = datetime(2024, 4, 10, 12, 30)


class FixedClock:
    """Callable clock tests can move forward."""

    def __init__(self, current: datetime = FIXED_NOW):
        self.current = current

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def category_service(db, clock):
    return CategoryService(CategoryDAO(db), clock=clock)


@pytest.fixture
def ledger(db, clock):
    return ExpenseLedger(ExpenseDAO(db), clock=clock)


@pytest.fixture
def budget_service(db):
    return BudgetService(BudgetDAO(db))


@pytest.fixture
def report_service(ledger, budget_service, category_service, clock):
    return ReportService(ledger, budget_service, category_service, clock=clock)


@pytest.fixture
def data_service(category_service, ledger, budget_service, clock):
    return DataService(category_service, ledger, budget_service, clock=clock)


@pytest.fixture
def state(category_service, ledger, budget_service, report_service, data_service, clock):
    return AppState(
        category_service, ledger, budget_service, report_service, data_service, clock=clock
    )
