import sqlite3

from database.db_manager import DatabaseManager
from services.errors import PersistenceWriteError

BUDGET_KEY = "monthly_budget"


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def load(self) -> int | None:
        """The persisted monthly budget, or None if never set or unreadable."""
        raw = self._db.get_setting(BUDGET_KEY, "")
        try:
            return int(raw)
        except ValueError:
            return None

    def save(self, value: int):
        try:
            self._db.set_setting(BUDGET_KEY, str(int(value)))
        except sqlite3.Error as e:
            raise PersistenceWriteError(f"Could not save budget: {e}") from e
