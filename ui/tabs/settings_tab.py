import json
import logging
import os
import customtkinter as ctk
from tkinter import filedialog, messagebox

from database.db_manager import DatabaseManager
from services.app_state import AppState
from utils.app_config import API_KEY_ENV, get_api_key, get_db_folder, set_api_key, set_db_folder
from utils.constants import STATUS_COLORS
from utils.currency import format_currency, parse_amount

logger = logging.getLogger(__name__)


class SettingsTab(ctk.CTkFrame):
    """Budget, API key, storage folder, backups and appearance."""

    def __init__(self, master, state: AppState, db: DatabaseManager, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._state = state
        self._db = db

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.grid(row=0, column=0, sticky="nsew")
        scroll.grid_columnconfigure(0, weight=1)

        self._build_budget_section(scroll)
        self._build_api_key_section(scroll)
        self._build_db_folder_section(scroll)
        self._build_export_import_section(scroll)
        self._build_app_settings_section(scroll)

    def refresh(self):
        """Re-read values that an import or another tab may have changed."""
        self._budget_var.set(str(self._state.budget))
        self._budget_hint.configure(
            text=f"Current: {format_currency(self._state.budget)}", text_color="gray60"
        )
        appearance = self._db.get_setting("appearance_mode", "system")
        self._appearance_var.set(appearance.title())

    # ── Section 1: Budget ─────────────────────────────────────────────────────

    def _build_budget_section(self, parent):
        section = self._make_section(parent, "Monthly Budget", row=0)

        self._budget_var = ctk.StringVar(value=str(self._state.budget))
        entry = ctk.CTkEntry(section, textvariable=self._budget_var, width=140)
        entry.grid(row=0, column=0, padx=(8, 4), pady=6, sticky="w")
        entry.bind("<Return>", lambda _e: self._save_budget())

        ctk.CTkButton(
            section, text="Save Budget", width=110,
            command=self._save_budget,
        ).grid(row=0, column=1, padx=4, pady=6)

        self._budget_hint = ctk.CTkLabel(
            section,
            text=f"Current: {format_currency(self._state.budget)}",
            text_color="gray60",
            font=ctk.CTkFont(size=11),
            anchor="w",
        )
        self._budget_hint.grid(row=1, column=0, columnspan=2, sticky="w", padx=8, pady=(0, 6))

    def _save_budget(self):
        try:
            value = parse_amount(self._budget_var.get(), allow_zero=True)
            self._state.set_budget(value)
        except ValueError as e:
            self._budget_hint.configure(text=str(e), text_color="#F44336")
            return
        # 0 clears the budget back to the default.
        self._budget_hint.configure(
            text=f"Saved: {format_currency(self._state.budget)}", text_color="#4CAF50"
        )

    # ── Section 2: API key ────────────────────────────────────────────────────

    def _build_api_key_section(self, parent):
        section = self._make_section(parent, "Gemini API Key", row=1)

        from_env = bool(os.environ.get(API_KEY_ENV))
        ctk.CTkLabel(
            section,
            text=(
                f"Using the {API_KEY_ENV} environment variable."
                if from_env else
                "Stored in your user config folder, never in the ledger database."
            ),
            text_color="gray60",
            font=ctk.CTkFont(size=11),
            anchor="w",
        ).grid(row=0, column=0, columnspan=3, sticky="w", padx=8, pady=(4, 6))

        self._key_var = ctk.StringVar(value=get_api_key() or "")
        ctk.CTkEntry(
            section, textvariable=self._key_var, show="•", width=340,
            state="disabled" if from_env else "normal",
        ).grid(row=1, column=0, padx=(8, 4), pady=4, sticky="ew")

        ctk.CTkButton(
            section, text="Save Key", width=90,
            command=self._save_api_key,
            state="disabled" if from_env else "normal",
        ).grid(row=1, column=1, padx=4)

        ctk.CTkButton(
            section, text="Clear", width=70,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._clear_api_key,
            state="disabled" if from_env else "normal",
        ).grid(row=1, column=2, padx=(4, 8))

        self._key_status_var = ctk.StringVar()
        ctk.CTkLabel(
            section,
            textvariable=self._key_status_var,
            text_color="#4CAF50",
            font=ctk.CTkFont(size=11),
            anchor="w",
        ).grid(row=2, column=0, columnspan=3, sticky="w", padx=8, pady=(0, 6))

    def _save_api_key(self):
        key = self._key_var.get().strip()
        try:
            set_api_key(key or None)
        except OSError as e:
            messagebox.showerror("Save Failed", str(e))
            return
        self._key_status_var.set("Key saved." if key else "Key cleared.")

    def _clear_api_key(self):
        self._key_var.set("")
        self._save_api_key()

    # ── Section 3: Storage ────────────────────────────────────────────────────

    def _build_db_folder_section(self, parent):
        section = self._make_section(parent, "Storage", row=2)

        self._db_folder_label = ctk.CTkLabel(
            section, text=self._folder_text(get_db_folder()), anchor="w",
        )
        self._db_folder_label.grid(row=0, column=0, sticky="ew", padx=8, pady=(4, 2))

        buttons = ctk.CTkFrame(section, fg_color="transparent")
        buttons.grid(row=0, column=1, padx=(4, 8))
        ctk.CTkButton(buttons, text="Move…", width=80, command=self._choose_folder).pack(side="left", padx=2)
        ctk.CTkButton(
            buttons, text="Default", width=80,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda: self._apply_folder(None),
        ).pack(side="left", padx=2)

        self._folder_notice = ctk.CTkLabel(
            section, text="", text_color=STATUS_COLORS["warning"],
            font=ctk.CTkFont(size=11), anchor="w",
        )
        self._folder_notice.grid(row=1, column=0, columnspan=2, sticky="w", padx=8, pady=(0, 6))

    @staticmethod
    def _folder_text(folder: str | None) -> str:
        return f"ledger.db lives in: {folder or 'the folder the app starts from'}"

    def _choose_folder(self):
        folder = filedialog.askdirectory(title="Choose a folder for ledger.db")
        if folder:
            self._apply_folder(folder)

    def _apply_folder(self, folder: str | None):
        try:
            set_db_folder(folder)
        except OSError as e:
            messagebox.showerror("Save Failed", str(e))
            return
        self._db_folder_label.configure(text=self._folder_text(folder))
        self._folder_notice.configure(text="Takes effect the next time the app starts.")

    # ── Section 4: Backup ─────────────────────────────────────────────────────

    def _build_export_import_section(self, parent):
        section = self._make_section(parent, "Backup", row=3)

        row = ctk.CTkFrame(section, fg_color="transparent")
        row.grid(row=0, column=0, sticky="w", padx=8, pady=6)
        for text, command in (
            ("Export JSON", self._export_json),
            ("Export CSV", self._export_csv),
        ):
            ctk.CTkButton(row, text=text, width=120, command=command).pack(side="left", padx=4)
        ctk.CTkButton(
            row, text="Import JSON…", width=120,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._import_json,
        ).pack(side="left", padx=4)

        self._io_status_var = ctk.StringVar()
        ctk.CTkLabel(
            section, textvariable=self._io_status_var,
            text_color=STATUS_COLORS["ok"], font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=1, column=0, sticky="w", padx=8, pady=(0, 6))

    def _save_text(self, title: str, ext: str, produce):
        path = filedialog.asksaveasfilename(
            title=title,
            defaultextension=ext,
            filetypes=[(f"{ext[1:].upper()} files", f"*{ext}"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                f.write(produce())
        except OSError as e:
            logger.exception("Export to %s failed", path)
            messagebox.showerror("Export Failed", str(e))
            return
        self._io_status_var.set(f"Exported to {path}")

    def _export_json(self):
        data = self._state.data_service
        self._save_text(
            "Export as JSON", ".json",
            lambda: json.dumps(data.export_json(), indent=2, ensure_ascii=False),
        )

    def _export_csv(self):
        self._save_text("Export as CSV", ".csv", self._state.data_service.export_csv)

    def _import_json(self):
        path = filedialog.askopenfilename(
            title="Import JSON",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            messagebox.showerror("Import Failed", f"Could not read file:\n{e}")
            return

        replace = messagebox.askyesnocancel(
            "Import Mode",
            "Replace everything with the backup?\n\n"
            "Yes: wipe and restore, budget included.\n"
            "No: merge, keeping what is already here.",
        )
        if replace is None:
            return
        try:
            stats = self._state.import_json(data, "replace" if replace else "merge")
        except ValueError as e:
            messagebox.showerror("Import Failed", str(e))
            return
        self._io_status_var.set(self._format_stats(stats))

    @staticmethod
    def _format_stats(stats: dict) -> str:
        parts = [f"{stats[k]} {k}" for k in ("categories", "expenses") if stats.get(k)]
        if stats.get("budget"):
            parts.append("monthly budget")
        if stats.get("skipped"):
            parts.append(f"{stats['skipped']} invalid records skipped")
        return "Imported: " + ", ".join(parts) if parts else "Nothing new imported."

    # ── Section 5: Appearance ─────────────────────────────────────────────────

    def _build_app_settings_section(self, parent):
        section = self._make_section(parent, "Appearance", row=4)
        appearance = self._db.get_setting("appearance_mode", "system")
        self._appearance_var = ctk.StringVar(value=appearance.title())
        ctk.CTkSegmentedButton(
            section,
            values=["System", "Light", "Dark"],
            variable=self._appearance_var,
            command=self._save_appearance,
        ).grid(row=0, column=0, padx=8, pady=6, sticky="w")

    def _save_appearance(self, display: str):
        key = display.lower()
        self._db.set_setting("appearance_mode", key)
        ctk.set_appearance_mode(key)

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _make_section(self, parent, title: str, row: int) -> ctk.CTkFrame:
        """Titled card; returns the inner frame to grid into."""
        card = ctk.CTkFrame(parent, corner_radius=8)
        card.grid(row=row, column=0, sticky="ew", padx=12, pady=8)
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            card, text=title, font=ctk.CTkFont(size=14, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))
        body = ctk.CTkFrame(card, fg_color="transparent")
        body.grid(row=1, column=0, sticky="ew", padx=4, pady=(0, 8))
        body.grid_columnconfigure(0, weight=1)
        return body
