"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores user preferences that must be known before opening the DB (db_folder,
log level) and the Gemini API key, which never goes into the ledger DB.
Config lives in ~/.smart_ledger/config.json.
"""
import json
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".smart_ledger"
CONFIG_FILE = CONFIG_DIR / "config.json"

API_KEY_ENV = "GEMINI_API_KEY"


def load_config() -> dict:
    """Returns {} on a missing or corrupt file; never raises."""
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates ~/.smart_ledger/ if needed; atomic write via .tmp + os.replace()."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    tmp = CONFIG_FILE.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, CONFIG_FILE)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def _set_key(key: str, value) -> None:
    config = load_config()
    if value in (None, ""):
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config)


def get_db_folder() -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config().get("db_folder")


def set_db_folder(path: str | None) -> None:
    _set_key("db_folder", path)


def get_api_key() -> str | None:
    """The environment variable wins over the config file."""
    return os.environ.get(API_KEY_ENV) or load_config().get("gemini_api_key") or None


def set_api_key(key: str | None) -> None:
    _set_key("gemini_api_key", key.strip() if key else None)


def get_model(default: str) -> str:
    return load_config().get("gemini_model") or default


def get_log_level() -> str:
    return str(load_config().get("log_level", "INFO")).upper()
