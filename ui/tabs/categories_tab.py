import customtkinter as ctk
from services.app_state import AppState
from ui.components.category_form import CategoryForm
from ui.components.confirm_dialog import ConfirmDialog
from utils.constants import OTHER_BUCKET


class CategoriesTab(ctk.CTkFrame):
    """Time-window categories, in match order. Earlier rows win overlaps."""

    def __init__(self, master, state: AppState, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._state = state

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(
            bar, text="Categories",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)

        ctk.CTkButton(
            bar, text="+ Add Category", command=self._open_add,
        ).pack(side="left", padx=4, pady=6)

        ctk.CTkButton(
            bar, text="Reset to Defaults", width=130,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._on_reset,
        ).pack(side="right", padx=8, pady=6)

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        categories = self._state.categories
        if not categories:
            ctk.CTkLabel(
                self._scroll,
                text="No categories. Every expense will be filed as unclassified.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        # Column headers
        hdr = ctk.CTkFrame(self._scroll, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=4, pady=(0, 2))
        hdr.grid_columnconfigure(1, weight=1)

        for col, (text, width, anchor) in enumerate(
            [("Color", 44, "center"), ("Name", 0, "w"), ("Active", 110, "center"), ("", 200, "center")]
        ):
            ctk.CTkLabel(
                hdr, text=text, width=width, anchor=anchor,
                text_color="gray60", font=ctk.CTkFont(size=11),
            ).grid(row=0, column=col, padx=8 if col == 1 else (4, 0), sticky="w" if col == 1 else "")

        last = len(categories) - 1
        for idx, cat in enumerate(categories):
            self._add_row(idx + 1, cat, first=idx == 0, last=idx == last)

    def _add_row(self, idx, cat, first, last):
        row = ctk.CTkFrame(
            self._scroll, fg_color=("gray90", "gray20"), corner_radius=8
        )
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=3)
        row.grid_columnconfigure(1, weight=1)

        swatch = ctk.CTkLabel(
            row, text="", width=28, height=28, corner_radius=4,
            fg_color=cat.color.hex,
        )
        swatch.grid(row=0, column=0, padx=(10, 0), pady=8)

        name_frame = ctk.CTkFrame(row, fg_color="transparent")
        name_frame.grid(row=0, column=1, padx=8, sticky="w")
        ctk.CTkLabel(
            name_frame, text=cat.name,
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).pack(side="left")
        if cat.wraps_midnight:
            ctk.CTkLabel(
                name_frame, text="overnight",
                text_color="gray60", font=ctk.CTkFont(size=10),
            ).pack(side="left", padx=(6, 0))

        ctk.CTkLabel(
            row, text=cat.time_range_label, width=110, anchor="center",
            font=ctk.CTkFont(size=12),
        ).grid(row=0, column=2, padx=4)

        btn_frame = ctk.CTkFrame(row, fg_color="transparent")
        btn_frame.grid(row=0, column=3, padx=(4, 10), pady=6)

        ctk.CTkButton(
            btn_frame, text="▲", width=28, height=26,
            state="disabled" if first else "normal",
            command=lambda c=cat: self._state.move_category(c.id, -1),
        ).pack(side="left", padx=(0, 2))
        ctk.CTkButton(
            btn_frame, text="▼", width=28, height=26,
            state="disabled" if last else "normal",
            command=lambda c=cat: self._state.move_category(c.id, 1),
        ).pack(side="left", padx=(0, 6))

        ctk.CTkButton(
            btn_frame, text="Edit", width=60, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda c=cat: self._open_edit(c),
        ).pack(side="left", padx=(0, 4))

        ctk.CTkButton(
            btn_frame, text="Delete", width=65, height=26,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda c=cat: self._on_delete(c),
        ).pack(side="left")

    def _open_add(self):
        form = CategoryForm(self.winfo_toplevel(), self._state)
        self.wait_window(form)

    def _open_edit(self, cat):
        form = CategoryForm(self.winfo_toplevel(), self._state, category=cat)
        self.wait_window(form)

    def _on_delete(self, cat):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            title="Delete Category",
            message=(
                f"Delete '{cat.name}'? Past expenses keep their category label "
                f"and show up under '{OTHER_BUCKET}' in monthly reports."
            ),
        )
        if dlg.result:
            self._state.delete_category(cat.id)

    def _on_reset(self):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            title="Reset Categories",
            message="Replace every category with the built-in defaults?",
            confirm_text="Reset",
        )
        if dlg.result:
            self._state.reset_categories()
