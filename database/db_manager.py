import logging
import os
import sqlite3

from utils.constants import DB_FILE, SCHEMA_VERSION

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema, migrate older layouts and seed default settings."""
        conn = self.get_connection()
        fresh = not self._table_exists(conn, "categories")
        self._create_schema(conn)
        if fresh:
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES ('schema_version', ?)",
                (str(SCHEMA_VERSION),),
            )
        self._migrate_schema(conn)
        self._seed_defaults(conn)
        conn.commit()

    @staticmethod
    def _table_exists(conn: sqlite3.Connection, name: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
        ).fetchone()
        return row is not None

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS categories (
                id           TEXT    PRIMARY KEY,
                position     INTEGER NOT NULL,
                name         TEXT    NOT NULL,
                start_hour   INTEGER NOT NULL CHECK(start_hour BETWEEN 0 AND 23),
                start_minute INTEGER NOT NULL CHECK(start_minute BETWEEN 0 AND 59),
                end_hour     INTEGER NOT NULL CHECK(end_hour BETWEEN 0 AND 23),
                end_minute   INTEGER NOT NULL CHECK(end_minute BETWEEN 0 AND 59),
                color        TEXT    NOT NULL DEFAULT 'gray'
            );

            CREATE TABLE IF NOT EXISTS expenses (
                id            TEXT    PRIMARY KEY,
                date          TEXT    NOT NULL,
                amount        INTEGER NOT NULL CHECK(amount > 0),
                category_name TEXT    NOT NULL,
                note          TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Idempotent ALTER TABLE for columns added after the first release.

        Version 1 stores had neither category colors nor expense notes.
        """
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = 'schema_version'"
        ).fetchone()
        version = int(row["value"]) if row else 1

        cat_cols = {r[1] for r in conn.execute("PRAGMA table_info(categories)").fetchall()}
        if "color" not in cat_cols:
            conn.execute(
                "ALTER TABLE categories ADD COLUMN color TEXT NOT NULL DEFAULT 'gray'"
            )
        exp_cols = {r[1] for r in conn.execute("PRAGMA table_info(expenses)").fetchall()}
        if "note" not in exp_cols:
            conn.execute("ALTER TABLE expenses ADD COLUMN note TEXT")

        if version != SCHEMA_VERSION:
            logger.info("Migrating ledger schema from v%s to v%s", version, SCHEMA_VERSION)
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES ('schema_version', ?)",
                (str(SCHEMA_VERSION),),
            )

    def _seed_defaults(self, conn: sqlite3.Connection):
        defaults = [
            ("appearance_mode", "system"),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def has_setting(self, key: str) -> bool:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT 1 FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row is not None

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (creating if needed) the ledger DB in db_folder or CWD."""
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        logger.info("Opened ledger database at %s", path)
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
