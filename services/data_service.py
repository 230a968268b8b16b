"""Export and import the ledger as CSV text or versioned JSON."""
import csv
import io
import logging
from datetime import datetime

from models.category import Category, CategoryColor
from models.expense import Expense
from utils.constants import EXPORT_VERSION
from utils.date_helpers import format_date, format_time, now, parse_iso_datetime

logger = logging.getLogger(__name__)

CSV_HEADER = ["date", "time", "category", "amount", "note"]


def sanitize_field(text: str | None) -> str:
    """Keep one record per line: commas become full-width, line breaks become spaces."""
    if not text:
        return ""
    text = text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return text.replace(",", "，")


class DataService:
    def __init__(self, category_service, ledger, budget_service, clock=now):
        self._categories = category_service
        self._ledger = ledger
        self._budget = budget_service
        self._clock = clock

    # ── Export ────────────────────────────────────────────────────────────────

    def export_csv(self, expenses: list[Expense] | None = None) -> str:
        """Return the ledger as CSV text, oldest first."""
        if expenses is None:
            expenses = self._ledger.list()
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for e in sorted(expenses, key=lambda x: x.date):
            writer.writerow([
                format_date(e.date),
                format_time(e.date),
                sanitize_field(e.category_name),
                e.amount,
                sanitize_field(e.note),
            ])
        return buf.getvalue()

    def export_json(self) -> dict:
        """Return a full export dict (caller writes to disk)."""
        return {
            "export_version": EXPORT_VERSION,
            "exported_at": self._clock().isoformat(timespec="seconds"),
            "budget": self._budget.get(),
            "categories": [
                {
                    "id": c.id,
                    "name": c.name,
                    "start": [c.start_hour, c.start_minute],
                    "end": [c.end_hour, c.end_minute],
                    "color": c.color.value,
                }
                for c in self._categories.get_all()
            ],
            "expenses": [
                {
                    "id": e.id,
                    "date": e.date.isoformat(timespec="seconds"),
                    "amount": e.amount,
                    "category_name": e.category_name,
                    "note": e.note,
                }
                for e in self._ledger.list()
            ],
        }

    # ── Import ────────────────────────────────────────────────────────────────

    def import_json(self, data: dict, mode: str) -> dict:
        """Import from a previously exported JSON dict.

        mode: 'merge' | 'replace'
        Returns stats dict with counts of created entities.
        """
        if mode not in ("merge", "replace"):
            raise ValueError(f"Unknown import mode: {mode!r}")
        if not isinstance(data, dict) or data.get("export_version") != EXPORT_VERSION:
            version = data.get("export_version") if isinstance(data, dict) else None
            raise ValueError(f"Unsupported export version: {version!r}")

        stats = {"categories": 0, "expenses": 0, "skipped": 0, "budget": 0}

        categories = [] if mode == "replace" else self._categories.get_all()
        known_names = {c.name for c in categories}
        known_category_ids = {c.id for c in categories}
        for raw in data.get("categories") or []:
            category = self._parse_category(raw)
            if category is None:
                stats["skipped"] += 1
                continue
            # A renamed category still carries its old id in older backups.
            if category.name in known_names or category.id in known_category_ids:
                continue
            categories.append(category)
            known_names.add(category.name)
            known_category_ids.add(category.id)
            stats["categories"] += 1

        expenses = [] if mode == "replace" else self._ledger.list()
        known_ids = {e.id for e in expenses}
        current = self._clock()
        for raw in data.get("expenses") or []:
            expense = self._parse_expense(raw, current)
            if expense is None:
                stats["skipped"] += 1
                continue
            if expense.id in known_ids:
                continue
            expenses.append(expense)
            known_ids.add(expense.id)
            stats["expenses"] += 1

        self._categories.replace_all(categories)
        self._ledger.replace_all(expenses)

        budget = data.get("budget")
        if mode == "replace" and isinstance(budget, int) and not isinstance(budget, bool) and budget >= 0:
            self._budget.set(budget)
            stats["budget"] = 1

        logger.info("Imported %s (%s mode)", stats, mode)
        return stats

    # ── Private parsers ───────────────────────────────────────────────────────

    @staticmethod
    def _parse_category(raw) -> Category | None:
        try:
            name = str(raw["name"]).strip()
            sh, sm = (int(v) for v in raw["start"])
            eh, em = (int(v) for v in raw["end"])
        except (KeyError, TypeError, ValueError):
            return None
        if not name or not (0 <= sh <= 23 and 0 <= eh <= 23 and 0 <= sm <= 59 and 0 <= em <= 59):
            return None
        kwargs = {"id": str(raw["id"])} if raw.get("id") else {}
        return Category(
            name=name, start_hour=sh, start_minute=sm, end_hour=eh, end_minute=em,
            color=CategoryColor.parse(raw.get("color")), **kwargs,
        )

    @staticmethod
    def _parse_expense(raw, current: datetime) -> Expense | None:
        if not isinstance(raw, dict):
            return None
        amount = raw.get("amount")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            return None
        date = parse_iso_datetime(str(raw.get("date") or ""))
        if date is None:
            return None
        if date.tzinfo is not None:
            date = date.astimezone().replace(tzinfo=None)
        if date > current:
            return None
        category_name = str(raw.get("category_name") or "").strip()
        if not category_name:
            return None
        note = str(raw.get("note") or "").strip() or None
        kwargs = {"id": str(raw["id"])} if raw.get("id") else {}
        return Expense(date=date, amount=amount, category_name=category_name, note=note, **kwargs)
