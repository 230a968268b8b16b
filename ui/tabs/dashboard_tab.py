import customtkinter as ctk
from services.app_state import AppState
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.expense_form import ExpenseForm
from utils.constants import STATUS_COLORS
from utils.currency import format_currency, format_percent
from utils.date_helpers import format_time


class DashboardTab(ctk.CTkFrame):
    """Today at a glance: allowance cards, category tiles for quick entry, today's list."""

    def __init__(self, master, state: AppState, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._state = state

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_summary_cards()
        self._build_progress()
        self._build_tiles()
        self._build_today_list()
        self._load()

    def refresh(self):
        self._load()

    def _build_summary_cards(self):
        self._card_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._card_frame.grid(row=0, column=0, sticky="ew", padx=16, pady=(12, 4))
        self._card_frame.grid_columnconfigure((0, 1, 2), weight=1)

    def _build_progress(self):
        frame = ctk.CTkFrame(self, fg_color="transparent")
        frame.grid(row=1, column=0, sticky="ew", padx=22, pady=(4, 8))
        frame.grid_columnconfigure(0, weight=1)
        self._progress_label = ctk.CTkLabel(frame, text="", anchor="w", text_color="gray60")
        self._progress_label.grid(row=0, column=0, sticky="w")
        self._progress = ctk.CTkProgressBar(frame)
        self._progress.grid(row=1, column=0, sticky="ew", pady=(2, 0))

    def _build_tiles(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=2, column=0, sticky="ew", padx=16, pady=(0, 8))
        header = ctk.CTkFrame(bar, fg_color="transparent")
        header.pack(fill="x", padx=8, pady=(6, 0))
        ctk.CTkLabel(
            header, text="Add Expense",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=4)
        self._auto_label = ctk.CTkLabel(header, text="", text_color="gray60")
        self._auto_label.pack(side="left", padx=8)
        ctk.CTkButton(
            header, text="+ Quick Add", width=110,
            command=lambda: self._open_form(None),
        ).pack(side="right", padx=4)
        self._tile_frame = ctk.CTkFrame(bar, fg_color="transparent")
        self._tile_frame.pack(fill="x", padx=8, pady=(4, 8))

    def _build_today_list(self):
        outer = ctk.CTkFrame(self, fg_color="transparent")
        outer.grid(row=3, column=0, sticky="nsew", padx=16, pady=(0, 12))
        outer.grid_columnconfigure(0, weight=1)
        outer.grid_rowconfigure(1, weight=1)

        top = ctk.CTkFrame(outer, fg_color="transparent")
        top.grid(row=0, column=0, sticky="ew")
        ctk.CTkLabel(
            top, text="Today's Expenses",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=4)
        ctk.CTkButton(
            top, text="Delete All Today", width=130,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._on_delete_today,
        ).pack(side="right", padx=4, pady=4)

        self._list_frame = ctk.CTkScrollableFrame(outer, height=200)
        self._list_frame.grid(row=1, column=0, sticky="nsew")
        self._list_frame.grid_columnconfigure(1, weight=1)

    def _load(self):
        snap = self._state.snapshot()

        # Summary cards
        for w in self._card_frame.winfo_children():
            w.destroy()
        remaining_color = STATUS_COLORS["error"] if snap.is_over_budget else STATUS_COLORS["ok"]
        remaining_label = "Over Today's Allowance" if snap.is_over_budget else "Left for Today"
        cards = [
            (remaining_label, abs(snap.today_remaining), remaining_color),
            ("Spent Today", snap.today_spent, STATUS_COLORS["warning"]),
            ("Daily Allowance", snap.daily_allowance, STATUS_COLORS["info"]),
        ]
        for i, (label, value, color) in enumerate(cards):
            self._make_card(i, label, value, color)

        # Month progress
        pct = snap.percentage
        self._progress_label.configure(
            text=(
                f"This month: {format_currency(snap.month_spent)} of "
                f"{format_currency(snap.monthly_budget)} ({format_percent(pct)})"
            )
        )
        bar_color = "#4CAF50" if pct < 0.8 else ("#FF9800" if pct < 1.0 else "#F44336")
        self._progress.configure(progress_color=bar_color)
        self._progress.set(min(pct, 1.0))

        # Category tiles
        self._auto_label.configure(text=f"Now: {self._state.auto_category_name()}")
        for w in self._tile_frame.winfo_children():
            w.destroy()
        for idx, cat in enumerate(self._state.categories):
            ctk.CTkButton(
                self._tile_frame, text=cat.name, width=90, height=36,
                fg_color=cat.color.hex,
                command=lambda name=cat.name: self._open_form(name),
            ).grid(row=idx // 8, column=idx % 8, padx=4, pady=4)

        # Today's list
        for w in self._list_frame.winfo_children():
            w.destroy()
        todays = self._state.today_expenses()
        if not todays:
            ctk.CTkLabel(
                self._list_frame, text="Nothing logged today.", text_color="gray60",
            ).grid(row=0, column=0, columnspan=4, pady=20)
            return
        for idx, e in enumerate(todays):
            bg = ("gray90", "gray20") if idx % 2 == 0 else ("gray86", "gray24")
            row = ctk.CTkFrame(self._list_frame, fg_color=bg, corner_radius=4)
            row.grid(row=idx, column=0, columnspan=4, sticky="ew", pady=1)
            row.grid_columnconfigure(1, weight=1)
            ctk.CTkLabel(row, text=format_time(e.date), width=60, anchor="w").grid(
                row=0, column=0, padx=6, pady=3
            )
            text = e.category_name + (f"  ·  {e.note}" if e.note else "")
            ctk.CTkLabel(row, text=text, anchor="w").grid(row=0, column=1, padx=4, sticky="ew")
            ctk.CTkLabel(
                row, text=format_currency(e.amount), anchor="e", width=100,
                text_color=STATUS_COLORS["error"],
            ).grid(row=0, column=2, padx=6)
            ctk.CTkButton(
                row, text="✕", width=28, height=24,
                fg_color="transparent", text_color=("gray10", "gray90"),
                command=lambda i=e.id: self._state.delete_expense(i),
            ).grid(row=0, column=3, padx=(0, 6))

    def _make_card(self, col, label, value, color):
        card = ctk.CTkFrame(self._card_frame, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=0, column=col, padx=6, sticky="ew")
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            card, text=label, font=ctk.CTkFont(size=12), text_color="gray60",
        ).grid(row=0, column=0, pady=(12, 0), padx=16)
        ctk.CTkLabel(
            card, text=format_currency(value),
            font=ctk.CTkFont(size=22, weight="bold"), text_color=color,
        ).grid(row=1, column=0, pady=(4, 12), padx=16)

    def _open_form(self, category_name: str | None):
        form = ExpenseForm(self.winfo_toplevel(), self._state, category_name=category_name)
        self.wait_window(form)

    def _on_delete_today(self):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            title="Delete Today's Expenses",
            message="Delete every expense logged today? This cannot be undone.",
        )
        if dlg.result:
            self._state.delete_today()
