import logging
import sqlite3

from database.db_manager import DatabaseManager
from models.expense import Expense
from services.errors import PersistenceWriteError
from utils.date_helpers import parse_iso_datetime

logger = logging.getLogger(__name__)


class ExpenseDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Expense | None:
        date = parse_iso_datetime(row["date"])
        if date is None:
            logger.warning("Skipping expense %s with unreadable date %r", row["id"], row["date"])
            return None
        return Expense(
            id=row["id"],
            date=date,
            amount=int(row["amount"]),
            category_name=row["category_name"],
            note=row["note"],
        )

    def load_all(self) -> list[Expense]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM expenses ORDER BY rowid"
        ).fetchall()
        expenses = (self._row_to_model(r) for r in rows)
        return [e for e in expenses if e is not None]

    def save_all(self, expenses: list[Expense]):
        """Replace the whole collection in one transaction."""
        conn = self._db.get_connection()
        try:
            with conn:
                conn.execute("DELETE FROM expenses")
                conn.executemany(
                    """INSERT INTO expenses(id, date, amount, category_name, note)
                       VALUES (?, ?, ?, ?, ?)""",
                    [
                        (e.id, e.date.isoformat(timespec="seconds"), e.amount,
                         e.category_name, e.note)
                        for e in expenses
                    ],
                )
        except sqlite3.Error as e:
            raise PersistenceWriteError(f"Could not save expenses: {e}") from e
