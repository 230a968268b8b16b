import customtkinter as ctk
import tkinter as tk
import logging
from tkinter import filedialog, messagebox
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from services.app_state import AppState
from utils.constants import STATUS_COLORS
from utils.currency import format_currency
from utils.date_helpers import format_datetime, friendly_month, next_month, prev_month, today

logger = logging.getLogger(__name__)


class HistoryTab(ctk.CTkFrame):
    def __init__(self, master, state: AppState, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._state = state
        d = today()
        self._year, self._month = d.year, d.month
        self._month_var = ctk.StringVar(value=friendly_month(self._year, self._month))

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_summary()
        self._build_body()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(bar, text="Month:").pack(side="left", padx=(12, 4), pady=8)
        ctk.CTkButton(bar, text="◀", width=28, command=self._prev_month).pack(side="left")
        ctk.CTkLabel(bar, textvariable=self._month_var, width=140, anchor="center").pack(side="left", padx=4)
        self._next_btn = ctk.CTkButton(bar, text="▶", width=28, command=self._next_month)
        self._next_btn.pack(side="left", padx=(0, 12))

        ctk.CTkButton(bar, text="Export CSV", command=self._export_csv).pack(side="right", padx=8)

    def _prev_month(self):
        self._year, self._month = prev_month(self._year, self._month)
        self._load()

    def _next_month(self):
        self._year, self._month = next_month(self._year, self._month)
        self._load()

    def _build_summary(self):
        self._summary_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._summary_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=10)
        self._summary_frame.grid_columnconfigure((0, 1), weight=1)

    def _build_body(self):
        body = ctk.CTkFrame(self, fg_color="transparent")
        body.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))
        body.grid_columnconfigure(0, weight=1)
        body.grid_columnconfigure(1, weight=2)
        body.grid_rowconfigure(0, weight=1)

        pie_outer = ctk.CTkFrame(body, fg_color=("gray90", "gray20"), corner_radius=8)
        pie_outer.grid(row=0, column=0, sticky="nsew", padx=(0, 8))
        ctk.CTkLabel(
            pie_outer, text="By Category",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._pie_fig = Figure(figsize=(3, 3), dpi=80, tight_layout=True)
        self._pie_ax = self._pie_fig.add_subplot(111)
        self._pie_mpl = FigureCanvasTkAgg(self._pie_fig, master=pie_outer)
        self._pie_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))
        self._legend_frame = ctk.CTkFrame(pie_outer, fg_color="transparent")
        self._legend_frame.pack(fill="x", padx=8, pady=(0, 8))

        self._list_frame = ctk.CTkScrollableFrame(body)
        self._list_frame.grid(row=0, column=1, sticky="nsew")
        self._list_frame.grid_columnconfigure(1, weight=1)

    def _style_ax(self, ax, fig):
        is_dark = ctk.get_appearance_mode() == "Dark"
        bg = "#2b2b2b" if is_dark else "#e4e4e4"
        fig.patch.set_facecolor(bg)
        ax.set_facecolor(bg)
        ax.axis("off")

    def _load(self):
        year, month = self._year, self._month
        self._month_var.set(friendly_month(year, month))
        d = today()
        self._next_btn.configure(state="disabled" if (year, month) >= (d.year, d.month) else "normal")

        reports = self._state.reports
        total = reports.month_total(year, month)
        expenses = reports.month_expenses(year, month)

        # Summary cards
        for w in self._summary_frame.winfo_children():
            w.destroy()
        for i, (label, value, color) in enumerate([
            ("Spent", format_currency(total), STATUS_COLORS["error"]),
            ("Entries", str(len(expenses)), STATUS_COLORS["info"]),
        ]):
            card = ctk.CTkFrame(
                self._summary_frame, fg_color=("gray90", "gray20"), corner_radius=10
            )
            card.grid(row=0, column=i, padx=6, sticky="ew")
            ctk.CTkLabel(card, text=label, text_color="gray60").pack(pady=(10, 0), padx=16)
            ctk.CTkLabel(
                card, text=value,
                font=ctk.CTkFont(size=18, weight="bold"),
                text_color=color,
            ).pack(pady=(4, 10), padx=16)

        # Pie chart
        breakdown = reports.month_breakdown(year, month)
        self.after(50, lambda b=breakdown: self._draw_pie_chart(b))
        for w in self._legend_frame.winfo_children():
            w.destroy()
        for item in breakdown[:8]:
            row = ctk.CTkFrame(self._legend_frame, fg_color="transparent")
            row.pack(fill="x", pady=1)
            tk.Label(row, bg=item["color_hex"], width=2).pack(side="left", padx=(0, 4))
            ctk.CTkLabel(
                row, text=f"{item['category']}: {format_currency(item['total'])}",
                anchor="w", font=ctk.CTkFont(size=11),
            ).pack(side="left")

        # Expense list
        for w in self._list_frame.winfo_children():
            w.destroy()
        if not expenses:
            ctk.CTkLabel(
                self._list_frame, text="No expenses this month.", text_color="gray60",
            ).grid(row=0, column=0, columnspan=4, pady=20)
            return
        for idx, e in enumerate(expenses):
            bg = ("gray90", "gray20") if idx % 2 == 0 else ("gray86", "gray24")
            row = ctk.CTkFrame(self._list_frame, fg_color=bg, corner_radius=4)
            row.grid(row=idx, column=0, columnspan=4, sticky="ew", pady=1)
            row.grid_columnconfigure(1, weight=1)
            ctk.CTkLabel(row, text=format_datetime(e.date), width=130, anchor="w").grid(
                row=0, column=0, padx=6, pady=3
            )
            text = e.category_name + (f"  ·  {e.note}" if e.note else "")
            ctk.CTkLabel(row, text=text, anchor="w").grid(row=0, column=1, padx=4, sticky="ew")
            ctk.CTkLabel(
                row, text=format_currency(e.amount), anchor="e", width=100,
            ).grid(row=0, column=2, padx=6)
            ctk.CTkButton(
                row, text="✕", width=28, height=24,
                fg_color="transparent", text_color=("gray10", "gray90"),
                command=lambda i=e.id: self._state.delete_expense(i),
            ).grid(row=0, column=3, padx=(0, 6))

    def _draw_pie_chart(self, breakdown):
        ax = self._pie_ax
        ax.clear()
        self._style_ax(ax, self._pie_fig)

        total = sum(d["total"] for d in breakdown) if breakdown else 0
        if not breakdown or total == 0:
            ax.text(0.5, 0.5, "No expense data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            self._pie_mpl.draw_idle()
            return

        ax.pie(
            [d["total"] for d in breakdown],
            colors=[d["color_hex"] for d in breakdown],
            startangle=90,
        )
        ax.set_aspect("equal")
        self._pie_mpl.draw_idle()

    def _export_csv(self):
        expenses = self._state.reports.month_expenses(self._year, self._month)
        path = filedialog.asksaveasfilename(
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv")],
            initialfile=f"expenses_{self._year}-{self._month:02d}.csv",
        )
        if not path:
            return
        text = self._state.data_service.export_csv(expenses)
        try:
            with open(path, "w", newline="", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.exception("CSV export to %s failed", path)
            messagebox.showerror("Export Failed", str(e))
