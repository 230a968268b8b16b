import customtkinter as ctk
from models.category import Category, CategoryColor
from services.app_state import AppState
from ui.components.confirm_dialog import center_on_master

HOURS = [f"{h:02d}" for h in range(24)]
MINUTES = [f"{m:02d}" for m in range(60)]
COLORS = [c.value for c in CategoryColor]


class CategoryForm(ctk.CTkToplevel):
    """Add or edit a category's name, color and time window."""

    def __init__(self, master, state: AppState, category: Category | None = None, **kwargs):
        super().__init__(master, **kwargs)
        self._state = state
        self._category = category
        self.saved = False

        self.title("Edit Category" if category else "New Category")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        ctk.CTkLabel(self, text="Name:").grid(
            row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._name_var = ctk.StringVar(value=category.name if category else "")
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )
        r += 1

        ctk.CTkLabel(self, text="Color:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        color_row = ctk.CTkFrame(self, fg_color="transparent")
        color_row.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        current = category.color if category else CategoryColor.GRAY
        self._color_var = ctk.StringVar(value=current.value)
        ctk.CTkComboBox(
            color_row, values=COLORS, variable=self._color_var,
            width=140, state="readonly", command=self._sync_swatch,
        ).pack(side="left")
        self._swatch = ctk.CTkLabel(
            color_row, text="", width=32, height=24, corner_radius=4, fg_color=current.hex,
        )
        self._swatch.pack(side="left", padx=(8, 0))
        r += 1

        start = (category.start_hour, category.start_minute) if category else (0, 0)
        end = (category.end_hour, category.end_minute) if category else (23, 59)
        self._start_vars = self._time_row("Start:", r, start)
        r += 1
        self._end_vars = self._time_row("End:", r, end)
        r += 1

        ctk.CTkLabel(
            self,
            text="An end earlier than the start runs past midnight.",
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=r, column=1, padx=(0, 16), sticky="w")
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

    def _time_row(self, label: str, row: int, value: tuple[int, int]):
        ctk.CTkLabel(self, text=label).grid(
            row=row, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        frame = ctk.CTkFrame(self, fg_color="transparent")
        frame.grid(row=row, column=1, padx=(0, 16), pady=4, sticky="w")
        hour_var = ctk.StringVar(value=f"{value[0]:02d}")
        minute_var = ctk.StringVar(value=f"{value[1]:02d}")
        ctk.CTkComboBox(frame, values=HOURS, variable=hour_var, width=70, state="readonly").pack(side="left")
        ctk.CTkLabel(frame, text=":").pack(side="left", padx=4)
        ctk.CTkComboBox(frame, values=MINUTES, variable=minute_var, width=70, state="readonly").pack(side="left")
        return hour_var, minute_var

    def _sync_swatch(self, value: str):
        self._swatch.configure(fg_color=CategoryColor.parse(value).hex)

    def _on_save(self):
        start = (int(self._start_vars[0].get()), int(self._start_vars[1].get()))
        end = (int(self._end_vars[0].get()), int(self._end_vars[1].get()))
        color = CategoryColor.parse(self._color_var.get())
        try:
            if self._category:
                self._state.update_category(self._category.id, self._name_var.get(), start, end, color)
            else:
                self._state.add_category(self._name_var.get(), start, end, color)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()
