from datetime import date, datetime, time
import calendar
from utils.constants import DATE_FORMAT, DATETIME_FORMAT, MONTH_FORMAT, TIME_FORMAT


def now() -> datetime:
    return datetime.now()


def today() -> date:
    return date.today()


def minutes_since_midnight(hour: int, minute: int) -> int:
    return hour * 60 + minute


def as_time(value: time | datetime) -> time:
    """Accept a time or a datetime and return the wall-clock time."""
    if isinstance(value, datetime):
        return value.time()
    return value


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def remaining_days_in_month(d: date) -> int:
    """Days left in d's month, today included."""
    return days_in_month(d.year, d.month) - d.day + 1


def is_same_day(a: date, b: date) -> bool:
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_time(d: datetime | time) -> str:
    return d.strftime(TIME_FORMAT)


def format_datetime(d: datetime) -> str:
    return d.strftime(DATETIME_FORMAT)


def format_hm(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str.strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_iso_datetime(value: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def combine_with_clock(day: date, clock: datetime) -> datetime:
    """Backdated entries keep the wall-clock time they were entered at."""
    return datetime.combine(day, clock.time().replace(microsecond=0))


def prev_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def friendly_month(year: int, month: int) -> str:
    """e.g. 'February 2026'."""
    return date(year, month, 1).strftime("%B %Y")
