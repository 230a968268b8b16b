import logging
import os
import sys
import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.expense_dao import ExpenseDAO
from database.budget_dao import BudgetDAO

from services.app_state import AppState
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.data_service import DataService
from services.expense_ledger import ExpenseLedger
from services.gemini_client import GeminiClient
from services.query_service import QueryService
from services.report_service import ReportService

from ui.app_window import AppWindow
from utils.app_config import get_api_key, get_db_folder, get_log_level, get_model
from utils.constants import GEMINI_DEFAULT_MODEL

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def make_gemini_client() -> GeminiClient | None:
    """Re-read on every query so a key saved in Settings applies immediately."""
    api_key = get_api_key()
    if not api_key:
        return None
    return GeminiClient(api_key, model=get_model(GEMINI_DEFAULT_MODEL))


def build_state(db: DatabaseManager) -> AppState:
    category_svc = CategoryService(CategoryDAO(db))
    ledger = ExpenseLedger(ExpenseDAO(db))
    budget_svc = BudgetService(BudgetDAO(db))
    report_svc = ReportService(ledger, budget_svc, category_svc)
    data_svc = DataService(category_svc, ledger, budget_svc)
    return AppState(category_svc, ledger, budget_svc, report_svc, data_svc)


def main():
    configure_logging()

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=get_db_folder())

    # ── State & services ─────────────────────────────────────────────────────
    state = build_state(db)
    query_svc = QueryService(state.ledger, make_gemini_client)
    logger.info(
        "Loaded %d categories, %d expenses", len(state.categories), len(state.ledger)
    )

    # ── Appearance ───────────────────────────────────────────────────────────
    ctk.set_appearance_mode(db.get_setting("appearance_mode", "system"))
    ctk.set_default_color_theme("blue")

    # ── Launch UI ────────────────────────────────────────────────────────────
    app = AppWindow(state=state, query_service=query_svc, db=db)

    def on_close():
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()


if __name__ == "__main__":
    main()
