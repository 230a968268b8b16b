import sqlite3

from database.db_manager import DatabaseManager
from models.category import Category, CategoryColor
from services.errors import PersistenceWriteError

SEEDED_FLAG = "categories_seeded"


class CategoryDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            start_hour=row["start_hour"],
            start_minute=row["start_minute"],
            end_hour=row["end_hour"],
            end_minute=row["end_minute"],
            color=CategoryColor.parse(row["color"]),
        )

    def load_all(self) -> list[Category]:
        """Categories in their stored (resolution) order."""
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM categories ORDER BY position, rowid"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def has_been_saved(self) -> bool:
        """False only before the very first save, so an emptied list stays empty."""
        return self._db.has_setting(SEEDED_FLAG)

    def save_all(self, categories: list[Category]):
        """Replace the whole collection in one transaction."""
        conn = self._db.get_connection()
        try:
            with conn:
                conn.execute("DELETE FROM categories")
                conn.executemany(
                    """INSERT INTO categories
                       (id, position, name, start_hour, start_minute, end_hour, end_minute, color)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    [
                        (c.id, pos, c.name, c.start_hour, c.start_minute,
                         c.end_hour, c.end_minute, CategoryColor.parse(c.color).value)
                        for pos, c in enumerate(categories)
                    ],
                )
                conn.execute(
                    "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, '1')",
                    (SEEDED_FLAG,),
                )
        except sqlite3.Error as e:
            raise PersistenceWriteError(f"Could not save categories: {e}") from e
