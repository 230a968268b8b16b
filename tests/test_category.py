"""Time-window containment and first-match resolution."""
from datetime import datetime, time

import pytest

from models.category import Category, CategoryColor
from services.category_service import default_categories, resolve_category


def _cat(name, start, end):
    return Category(name=name, start_hour=start[0], start_minute=start[1],
                    end_hour=end[0], end_minute=end[1])


def _every_minute():
    for h in range(24):
        for m in range(60):
            yield time(h, m)


def test_plain_interval_is_inclusive_at_both_ends():
    lunch = _cat("午餐", (11, 0), (13, 59))
    assert lunch.contains(time(11, 0))
    assert lunch.contains(time(13, 59))
    assert not lunch.contains(time(10, 59))
    assert not lunch.contains(time(14, 0))


def test_wrapping_interval_matches_both_sides_of_midnight():
    late = _cat("宵夜", (20, 30), (4, 59))
    assert late.wraps_midnight
    assert late.contains(time(20, 30))
    assert late.contains(time(23, 59))
    assert late.contains(time(0, 0))
    assert late.contains(time(4, 59))
    assert not late.contains(time(5, 0))
    assert not late.contains(time(20, 29))


def test_wrapping_interval_is_complement_of_its_gap():
    late = _cat("宵夜", (21, 0), (4, 59))
    gap = _cat("gap", (5, 0), (20, 59))
    for t in _every_minute():
        assert late.contains(t) != gap.contains(t)


def test_zero_width_interval_matches_exactly_one_minute():
    point = _cat("point", (7, 15), (7, 15))
    matches = [t for t in _every_minute() if point.contains(t)]
    assert matches == [time(7, 15)]


def test_full_day_interval_matches_every_minute():
    allday = _cat("交通", (0, 0), (23, 59))
    assert all(allday.contains(t) for t in _every_minute())


def test_contains_ignores_seconds_and_accepts_datetimes():
    lunch = _cat("午餐", (11, 0), (13, 59))
    assert lunch.contains(datetime(2024, 4, 10, 13, 59, 59))


@pytest.mark.parametrize(
    "at, expected",
    [
        (time(23, 50), "宵夜"),
        (time(2, 0), "宵夜"),
        (time(5, 0), None),
        (time(17, 0), "晚餐"),
    ],
)
def test_dinner_and_late_night_scenario(at, expected):
    categories = [_cat("晚餐", (16, 30), (20, 29)), _cat("宵夜", (20, 30), (4, 59))]
    match = resolve_category(categories, at)
    assert (match.name if match else None) == expected


def test_first_match_in_stored_order_wins():
    narrow = _cat("午餐", (11, 0), (13, 59))
    allday = _cat("交通", (0, 0), (23, 59))
    assert resolve_category([narrow, allday], time(12, 0)) is narrow
    assert resolve_category([allday, narrow], time(12, 0)) is allday


def test_resolution_is_none_for_empty_list():
    assert resolve_category([], time(12, 0)) is None


def test_default_set_covers_every_minute():
    defaults = default_categories()
    assert all(resolve_category(defaults, t) is not None for t in _every_minute())
    assert resolve_category(defaults, time(12, 0)).name == "午餐"
    assert resolve_category(defaults, time(1, 0)).name == "宵夜"


def test_color_parse_is_total():
    assert CategoryColor.parse("Blue") is CategoryColor.BLUE
    assert CategoryColor.parse("chartreuse") is CategoryColor.GRAY
    assert CategoryColor.parse(None) is CategoryColor.GRAY
    assert CategoryColor.RED.hex.startswith("#")


def test_time_range_label():
    assert _cat("x", (5, 0), (10, 59)).time_range_label == "05:00 - 10:59"
