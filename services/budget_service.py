import logging

from database.budget_dao import BudgetDAO
from services.errors import PersistenceWriteError
from utils.constants import DEFAULT_MONTHLY_BUDGET

logger = logging.getLogger(__name__)


class BudgetService:
    """The single monthly budget figure. No history is kept."""

    def __init__(self, budget_dao: BudgetDAO):
        self._dao = budget_dao
        self._value: int | None = budget_dao.load()
        self.last_persist_error: PersistenceWriteError | None = None

    def get(self) -> int:
        if self._value is None or self._value <= 0:
            return DEFAULT_MONTHLY_BUDGET
        return self._value

    def set(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("Budget must be a whole number.")
        if value < 0:
            raise ValueError("Budget must be non-negative.")
        self._value = value
        try:
            self._dao.save(value)
        except PersistenceWriteError as e:
            self.last_persist_error = e
            logger.exception("Budget %d kept in memory only", value)
        else:
            self.last_persist_error = None
