import logging
from datetime import datetime, time
from typing import Iterable, Optional

from database.category_dao import CategoryDAO
from models.category import Category, CategoryColor
from services.errors import PersistenceWriteError
from utils.constants import DEFAULT_CATEGORIES, UNCLASSIFIED_CATEGORY
from utils.date_helpers import now

logger = logging.getLogger(__name__)


def resolve_category(categories: Iterable[Category], at: time | datetime) -> Optional[Category]:
    """Return the first category, in stored order, whose interval contains ``at``.

    Overlaps are settled by declaration order alone, so narrow intervals must
    be placed before all-day ones.
    """
    return next((c for c in categories if c.contains(at)), None)


def default_categories() -> list[Category]:
    return [
        Category(
            name=d["name"],
            start_hour=d["start"][0],
            start_minute=d["start"][1],
            end_hour=d["end"][0],
            end_minute=d["end"][1],
            color=CategoryColor.parse(d["color"]),
        )
        for d in DEFAULT_CATEGORIES
    ]


def _validate_time(hour: int, minute: int, label: str):
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        raise ValueError(f"{label} hour must be between 0 and 23.")
    if isinstance(minute, bool) or not isinstance(minute, int) or not 0 <= minute <= 59:
        raise ValueError(f"{label} minute must be between 0 and 59.")


class CategoryService:
    def __init__(self, category_dao: CategoryDAO, clock=now):
        self._dao = category_dao
        self._clock = clock
        self.last_persist_error: Optional[PersistenceWriteError] = None
        self._categories: list[Category] = category_dao.load_all()
        if not self._categories and not category_dao.has_been_saved():
            logger.info("Seeding %d default categories", len(DEFAULT_CATEGORIES))
            self._categories = default_categories()
            self._persist()

    # ── Lookup ───────────────────────────────────────────────────────────────

    def get_all(self) -> list[Category]:
        return list(self._categories)

    def get_by_id(self, category_id: str) -> Optional[Category]:
        return next((c for c in self._categories if c.id == category_id), None)

    def names(self) -> list[str]:
        return [c.name for c in self._categories]

    def resolve(self, at: time | datetime | None = None) -> Optional[Category]:
        return resolve_category(self._categories, at if at is not None else self._clock())

    def resolve_name(self, at: time | datetime | None = None) -> str:
        match = self.resolve(at)
        return match.name if match else UNCLASSIFIED_CATEGORY

    # ── Mutations ────────────────────────────────────────────────────────────

    def create(
        self,
        name: str,
        start: tuple[int, int],
        end: tuple[int, int],
        color=CategoryColor.GRAY,
    ) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        _validate_time(*start, label="Start")
        _validate_time(*end, label="End")
        category = Category(
            name=name,
            start_hour=start[0], start_minute=start[1],
            end_hour=end[0], end_minute=end[1],
            color=CategoryColor.parse(color),
        )
        self._categories.append(category)
        self._persist()
        return category

    def update(
        self,
        category_id: str,
        name: str,
        start: tuple[int, int],
        end: tuple[int, int],
        color,
    ) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        category = self._require(category_id)
        _validate_time(*start, label="Start")
        _validate_time(*end, label="End")
        category.name = name
        category.start_hour, category.start_minute = start
        category.end_hour, category.end_minute = end
        category.color = CategoryColor.parse(color)
        self._persist()
        return category

    def update_time(
        self,
        category_id: str,
        start_hour: int,
        start_minute: int,
        end_hour: int,
        end_minute: int,
    ) -> Category:
        category = self._require(category_id)
        return self.update(
            category_id, category.name,
            (start_hour, start_minute), (end_hour, end_minute), category.color,
        )

    def delete(self, category_id: str):
        """Stored expenses keep the deleted category's name as plain text."""
        remaining = [c for c in self._categories if c.id != category_id]
        if len(remaining) == len(self._categories):
            return
        self._categories = remaining
        self._persist()

    def move(self, category_id: str, offset: int) -> int:
        """Shift a category by offset positions; returns its new index."""
        category = self._require(category_id)
        index = self._categories.index(category)
        target = max(0, min(len(self._categories) - 1, index + offset))
        if target != index:
            self._categories.pop(index)
            self._categories.insert(target, category)
            self._persist()
        return target

    def reset_defaults(self):
        self._categories = default_categories()
        self._persist()

    def replace_all(self, categories: list[Category]):
        self._categories = list(categories)
        self._persist()

    # ── Internals ────────────────────────────────────────────────────────────

    def _require(self, category_id: str) -> Category:
        category = self.get_by_id(category_id)
        if category is None:
            raise ValueError(f"No category with id '{category_id}'.")
        return category

    def _persist(self):
        try:
            self._dao.save_all(self._categories)
        except PersistenceWriteError as e:
            self.last_persist_error = e
            logger.exception("Category changes kept in memory only")
        else:
            self.last_persist_error = None
