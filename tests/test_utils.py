import json
from datetime import date, datetime

import pytest

from utils import app_config
from utils.currency import AmountFormatError, format_currency, parse_amount
from utils.date_helpers import combine_with_clock, next_month, prev_month, remaining_days_in_month


def test_format_currency():
    assert format_currency(1234) == "NT$ 1,234"
    assert format_currency(-50) == "-NT$ 50"


@pytest.mark.parametrize("text, value", [("120", 120), (" 1,200 ", 1200)])
def test_parse_amount(text, value):
    assert parse_amount(text) == value


@pytest.mark.parametrize("text", ["", "0", "-5", "12.5", "abc", "١٢"])
def test_parse_amount_rejects(text):
    with pytest.raises(AmountFormatError):
        parse_amount(text)


def test_parse_amount_allows_zero_when_asked():
    assert parse_amount("0", allow_zero=True) == 0
    with pytest.raises(AmountFormatError):
        parse_amount("-1", allow_zero=True)


def test_month_navigation_wraps_year():
    assert prev_month(2024, 1) == (2023, 12)
    assert next_month(2024, 12) == (2025, 1)


def test_remaining_days_includes_today():
    assert remaining_days_in_month(date(2024, 4, 10)) == 21
    assert remaining_days_in_month(date(2024, 4, 30)) == 1


def test_combine_with_clock_drops_microseconds():
    assert combine_with_clock(date(2024, 4, 1), datetime(2024, 4, 10, 9, 15, 7, 999)) == datetime(
        2024, 4, 1, 9, 15, 7
    )


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(app_config, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.delenv(app_config.API_KEY_ENV, raising=False)
    return tmp_path


def test_config_round_trip(config_dir):
    app_config.set_db_folder("/data/ledger")
    app_config.set_api_key("abc")
    assert app_config.get_db_folder() == "/data/ledger"
    assert app_config.get_api_key() == "abc"
    app_config.set_api_key(None)
    assert app_config.get_api_key() is None


def test_env_key_wins(config_dir, monkeypatch):
    app_config.set_api_key("stored")
    monkeypatch.setenv(app_config.API_KEY_ENV, "from-env")
    assert app_config.get_api_key() == "from-env"


def test_corrupt_config_reads_as_empty(config_dir):
    (config_dir / "config.json").write_text("{not json", encoding="utf-8")
    assert app_config.load_config() == {}
    assert app_config.get_db_folder() is None


def test_save_config_writes_json(config_dir):
    app_config.save_config({"log_level": "DEBUG"})
    assert json.loads((config_dir / "config.json").read_text(encoding="utf-8")) == {"log_level": "DEBUG"}
    assert app_config.get_log_level() == "DEBUG"
