import asyncio
import logging
import threading
import customtkinter as ctk
from services.query_service import QueryService
from utils.constants import EXAMPLE_QUESTIONS, STATUS_COLORS

logger = logging.getLogger(__name__)


class QueryTab(ctk.CTkFrame):
    """Ask questions about the ledger in plain language.

    One request at a time: Ask is disabled until the answer arrives or the
    request is cancelled. The request runs on its own event loop in a worker
    thread so the Tk main loop never blocks.
    """

    def __init__(self, master, query_service: QueryService, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = query_service
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None
        self._request_id = 0
        self._in_flight = False
        self._cancel_requested = False

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_input()
        self._build_examples()
        self._build_answer()

    def refresh(self):
        pass

    @property
    def busy(self) -> bool:
        return self._in_flight

    def _build_input(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        bar.grid_columnconfigure(0, weight=1)

        self._question_var = ctk.StringVar()
        entry = ctk.CTkEntry(
            bar, textvariable=self._question_var,
            placeholder_text="e.g. How much did I spend on lunch this month?",
        )
        entry.grid(row=0, column=0, sticky="ew", padx=(12, 4), pady=8)
        entry.bind("<Return>", lambda _e: self._on_ask())

        self._ask_btn = ctk.CTkButton(bar, text="Ask", width=80, command=self._on_ask)
        self._ask_btn.grid(row=0, column=1, padx=4)
        self._cancel_btn = ctk.CTkButton(
            bar, text="Cancel", width=80,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            state="disabled",
            command=self._on_cancel,
        )
        self._cancel_btn.grid(row=0, column=2, padx=(4, 12))

    def _build_examples(self):
        frame = ctk.CTkFrame(self, fg_color="transparent")
        frame.grid(row=1, column=0, sticky="ew", padx=12, pady=6)
        ctk.CTkLabel(
            frame, text="Try:", text_color="gray60", font=ctk.CTkFont(size=11),
        ).pack(side="left", padx=(0, 6))
        for q in EXAMPLE_QUESTIONS:
            ctk.CTkButton(
                frame, text=q, height=24,
                fg_color="transparent", border_width=1,
                text_color=("gray10", "gray90"),
                font=ctk.CTkFont(size=11),
                command=lambda text=q: self._question_var.set(text),
            ).pack(side="left", padx=3)

    def _build_answer(self):
        outer = ctk.CTkFrame(self, fg_color=("gray90", "gray20"), corner_radius=8)
        outer.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))
        outer.grid_columnconfigure(0, weight=1)
        outer.grid_rowconfigure(1, weight=1)

        self._status_var = ctk.StringVar(value="Ask anything about your expenses.")
        self._status_label = ctk.CTkLabel(
            outer, textvariable=self._status_var,
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        )
        self._status_label.grid(row=0, column=0, sticky="ew", padx=12, pady=(8, 0))

        self._answer = ctk.CTkTextbox(outer, wrap="word", font=ctk.CTkFont(size=13))
        self._answer.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._answer.configure(state="disabled")

    # ── Request lifecycle ────────────────────────────────────────────────────

    def _on_ask(self):
        if self.busy:
            return
        question = self._question_var.get().strip()
        if not question:
            self._set_status("Please enter a question.", STATUS_COLORS["warning"])
            return

        self._request_id += 1
        request_id = self._request_id
        self._cancel_requested = False
        self._set_busy(True)
        self._set_status("Thinking…", STATUS_COLORS["info"])
        threading.Thread(
            target=self._run, args=(question, request_id), daemon=True
        ).start()

    def _run(self, question: str, request_id: int):
        async def runner():
            self._loop = asyncio.get_running_loop()
            self._task = asyncio.current_task()
            # Cancel may have been clicked before the loop existed.
            if self._cancel_requested:
                raise asyncio.CancelledError
            return await self._svc.ask(question)

        try:
            answer = asyncio.run(runner())
        except asyncio.CancelledError:
            self.after(0, self._finish_cancelled, request_id)
            return
        except ValueError as e:
            self.after(0, self._finish, request_id, None, str(e))
            return
        except Exception:
            logger.exception("AI query crashed")
            self.after(0, self._finish, request_id, None, "Something went wrong. Please try again.")
            return
        self.after(0, self._finish, request_id, answer, None)

    def _on_cancel(self):
        if not self._in_flight:
            return
        # Set the flag before reading the loop so the worker sees one or the other.
        self._cancel_requested = True
        loop, task = self._loop, self._task
        if loop is not None and task is not None:
            loop.call_soon_threadsafe(task.cancel)

    def _finish(self, request_id: int, answer: str | None, error: str | None):
        if request_id != self._request_id:
            return
        self._set_busy(False)
        if error:
            self._set_status(error, STATUS_COLORS["warning"])
            return
        self._set_status("Answer", "gray60")
        self._answer.configure(state="normal")
        self._answer.delete("1.0", "end")
        self._answer.insert("1.0", answer)
        self._answer.configure(state="disabled")

    def _finish_cancelled(self, request_id: int):
        if request_id != self._request_id:
            return
        self._set_busy(False)
        self._set_status("Cancelled.", "gray60")

    def _set_busy(self, busy: bool):
        self._in_flight = busy
        if not busy:
            self._loop = None
            self._task = None
        self._ask_btn.configure(state="disabled" if busy else "normal")
        self._cancel_btn.configure(state="normal" if busy else "disabled")

    def _set_status(self, text: str, color):
        self._status_var.set(text)
        self._status_label.configure(text_color=color)
