import customtkinter as ctk
from services.app_state import AppState
from ui.components.confirm_dialog import center_on_master
from ui.components.date_picker import DatePickerWidget
from utils.constants import QUICK_CATEGORY_OPTIONS
from utils.currency import parse_amount
from utils.date_helpers import today

AUTO_OPTION = "Auto (by time)"


class ExpenseForm(ctk.CTkToplevel):
    """Log one expense. Leaving the category on Auto lets the time rules decide."""

    def __init__(self, master, state: AppState, category_name: str | None = None, **kwargs):
        super().__init__(master, **kwargs)
        self._state = state
        self.saved = False

        self.title("Add Expense")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        self._label("Amount:", r)
        self._amount_var = ctk.StringVar()
        amount_entry = ctk.CTkEntry(self, textvariable=self._amount_var, width=220)
        amount_entry.grid(row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew")
        amount_entry.bind("<Return>", lambda _e: self._on_save())
        r += 1

        self._label("Category:", r)
        names = [AUTO_OPTION] + _unique(state.category_service.names() + QUICK_CATEGORY_OPTIONS)
        self._cat_var = ctk.StringVar(value=category_name or AUTO_OPTION)
        ctk.CTkComboBox(
            self, values=names, variable=self._cat_var, width=220,
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        ctk.CTkLabel(
            self,
            text=f"Auto would file this under “{state.auto_category_name()}”.",
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=r, column=1, padx=(0, 16), sticky="w")
        r += 1

        self._label("Date:", r)
        self._date_picker = DatePickerWidget(self)
        self._date_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        self._label("Note:", r)
        self._note_var = ctk.StringVar()
        ctk.CTkEntry(
            self, textvariable=self._note_var, width=220, placeholder_text="Optional"
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            buttons, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(buttons, text="Save", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        center_on_master(self)
        amount_entry.focus_set()

    def _label(self, text, row):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=(16 if row == 0 else 4, 4), sticky="e"
        )

    def _on_save(self):
        day = self._date_picker.get()
        if day is None:
            self._error_var.set("Pick today or an earlier date.")
            return
        category = self._cat_var.get().strip()
        if category == AUTO_OPTION:
            category = None
        try:
            amount = parse_amount(self._amount_var.get())
            if day == today():
                self._state.add_expense(amount, category, note=self._note_var.get())
            else:
                self._state.add_expense_on(day, amount, category, note=self._note_var.get())
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()


def _unique(names: list[str]) -> list[str]:
    return list(dict.fromkeys(n for n in names if n))
