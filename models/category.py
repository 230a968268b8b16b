import uuid
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum

from utils.date_helpers import as_time, format_hm, minutes_since_midnight


class CategoryColor(str, Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    PINK = "pink"
    GRAY = "gray"

    @classmethod
    def parse(cls, value) -> "CategoryColor":
        """Total lookup: anything unrecognised falls back to GRAY."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.GRAY

    @property
    def hex(self) -> str:
        return _COLOR_HEX[self]


_COLOR_HEX = {
    CategoryColor.RED:    "#F44336",
    CategoryColor.BLUE:   "#2196F3",
    CategoryColor.GREEN:  "#4CAF50",
    CategoryColor.YELLOW: "#FFC107",
    CategoryColor.PURPLE: "#9C27B0",
    CategoryColor.ORANGE: "#FF9800",
    CategoryColor.PINK:   "#E91E63",
    CategoryColor.GRAY:   "#888888",
}


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Category:
    name: str
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    color: CategoryColor = CategoryColor.GRAY
    id: str = field(default_factory=new_id)

    @property
    def start_minutes(self) -> int:
        return minutes_since_midnight(self.start_hour, self.start_minute)

    @property
    def end_minutes(self) -> int:
        return minutes_since_midnight(self.end_hour, self.end_minute)

    @property
    def wraps_midnight(self) -> bool:
        return self.start_minutes > self.end_minutes

    @property
    def time_range_label(self) -> str:
        return (
            f"{format_hm(self.start_hour, self.start_minute)} - "
            f"{format_hm(self.end_hour, self.end_minute)}"
        )

    def contains(self, at: time | datetime) -> bool:
        """Inclusive at both ends; an interval whose start is after its end wraps midnight."""
        t = as_time(at)
        current = minutes_since_midnight(t.hour, t.minute)
        if self.wraps_midnight:
            return current >= self.start_minutes or current <= self.end_minutes
        return self.start_minutes <= current <= self.end_minutes
