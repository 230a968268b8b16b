import customtkinter as ctk
from database.db_manager import DatabaseManager
from services.app_state import AppState
from services.query_service import QueryService
from ui.components.alert_banner import AlertBanner
from ui.tabs.dashboard_tab import DashboardTab
from ui.tabs.history_tab import HistoryTab
from ui.tabs.query_tab import QueryTab
from ui.tabs.categories_tab import CategoriesTab
from ui.tabs.settings_tab import SettingsTab
from utils.constants import APP_NAME, APP_WIDTH, APP_HEIGHT, STATUS_COLORS


_REFRESH_SCOPES: dict[str, set[str]] = {
    "expense":  {"dashboard", "history"},
    "budget":   {"dashboard"},
    "category": {"dashboard", "history", "categories"},
    "full":     {"dashboard", "history", "categories", "settings"},
}


class AppWindow(ctk.CTk):
    def __init__(
        self,
        state: AppState,
        query_service: QueryService,
        db: DatabaseManager,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._state = state
        self._query_svc = query_service
        self._db = db

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_banner_area()
        self._build_tabs()

        for scope in ("expense", "budget", "category", "full"):
            state.subscribe(scope, self.notify_tabs_refresh)

    def _build_banner_area(self):
        self._banner_frame = ctk.CTkFrame(self, fg_color="transparent", height=0)
        self._banner_frame.grid(row=0, column=0, sticky="ew", padx=8)

    def _build_tabs(self):
        self._tabview = ctk.CTkTabview(self)
        self._tabview.grid(row=1, column=0, sticky="nsew", padx=8, pady=(0, 8))

        for tab_name in ("Today", "History", "Ask AI", "Categories", "Settings"):
            self._tabview.add(tab_name)
            self._tabview.tab(tab_name).grid_columnconfigure(0, weight=1)
            self._tabview.tab(tab_name).grid_rowconfigure(0, weight=1)

        self._dashboard_tab = DashboardTab(self._tabview.tab("Today"), state=self._state)
        self._dashboard_tab.grid(row=0, column=0, sticky="nsew")

        self._history_tab = HistoryTab(self._tabview.tab("History"), state=self._state)
        self._history_tab.grid(row=0, column=0, sticky="nsew")

        self._query_tab = QueryTab(self._tabview.tab("Ask AI"), query_service=self._query_svc)
        self._query_tab.grid(row=0, column=0, sticky="nsew")

        self._categories_tab = CategoriesTab(self._tabview.tab("Categories"), state=self._state)
        self._categories_tab.grid(row=0, column=0, sticky="nsew")

        self._settings_tab = SettingsTab(self._tabview.tab("Settings"), state=self._state, db=self._db)
        self._settings_tab.grid(row=0, column=0, sticky="nsew")

    # ── Refresh ──────────────────────────────────────────────────────────────
    def notify_tabs_refresh(self, scope: str = "full"):
        tabs = _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"])
        if "dashboard"  in tabs: self._dashboard_tab.refresh()
        if "history"    in tabs: self._history_tab.refresh()
        if "categories" in tabs: self._categories_tab.refresh()
        if "settings"   in tabs: self._settings_tab.refresh()
        self._update_persist_banner()

    # ── Banners ──────────────────────────────────────────────────────────────
    def _update_persist_banner(self):
        for w in self._banner_frame.winfo_children():
            w.destroy()
        if not self._state.persist_failed:
            return
        banner = AlertBanner(
            self._banner_frame,
            message="Could not save to disk. Changes are kept until the app closes.",
            color=STATUS_COLORS["error"],
        )
        banner.pack(fill="x", pady=2)
