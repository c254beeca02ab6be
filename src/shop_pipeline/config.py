"""Application configuration: loads .env, then overrides from settings.json."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Find the project root (where .env lives)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# Runtime settings file for persisted overrides
_SETTINGS_FILE = _PROJECT_ROOT / "data" / "settings.json"


def _load_settings() -> dict:
    """Load saved runtime settings from JSON file."""
    if _SETTINGS_FILE.exists():
        try:
            return json.loads(_SETTINGS_FILE.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            pass
    return {}


def _save_settings(settings: dict):
    """Persist runtime settings to JSON file."""
    _SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    _SETTINGS_FILE.write_text(
        json.dumps(settings, indent=2), encoding="utf-8"
    )


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# Load saved settings once at import time
_runtime = _load_settings()


class Config:
    """Central configuration: .env defaults, settings.json overrides."""

    # Paths
    PROJECT_ROOT: Path = _PROJECT_ROOT
    DATABASE_PATH: Path = Path(
        os.getenv("DATABASE_PATH", str(_PROJECT_ROOT / "data" / "shop_pipeline.db"))
    )
    BACKUP_PATH: Path = Path(
        os.getenv("DATABASE_BACKUP_PATH", str(_PROJECT_ROOT / "data" / "backups"))
    )
    EXPORT_DIRECTORY: str = _runtime.get(
        "export_directory",
        os.getenv("EXPORT_DIRECTORY", str(_PROJECT_ROOT / "data" / "exports")),
    )

    # Record numbering
    WORK_ORDER_PREFIX: str = _runtime.get(
        "work_order_prefix",
        os.getenv("WORK_ORDER_PREFIX", "OT"),
    )
    QUOTE_PREFIX: str = _runtime.get(
        "quote_prefix",
        os.getenv("QUOTE_PREFIX", "COT"),
    )

    # Reconciliation
    SYSTEM_USER_LABEL: str = _runtime.get(
        "system_user_label",
        os.getenv("SYSTEM_USER_LABEL", "System"),
    )
    RECONCILE_SKIP_DELIVERED: bool = _as_bool(_runtime.get(
        "reconcile_skip_delivered",
        os.getenv("RECONCILE_SKIP_DELIVERED", "true"),
    ))
    RECONCILE_NOTIFY: bool = _as_bool(_runtime.get(
        "reconcile_notify",
        os.getenv("RECONCILE_NOTIFY", "true"),
    ))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def update_numbering(cls, work_order_prefix: str, quote_prefix: str):
        """Update record id prefixes and persist."""
        cls.WORK_ORDER_PREFIX = work_order_prefix
        cls.QUOTE_PREFIX = quote_prefix

        settings = _load_settings()
        settings["work_order_prefix"] = work_order_prefix
        settings["quote_prefix"] = quote_prefix
        _save_settings(settings)

    @classmethod
    def update_reconcile_settings(cls, skip_delivered: bool, notify: bool,
                                  system_user_label: str | None = None):
        """Update reconciliation behaviour and persist to disk."""
        cls.RECONCILE_SKIP_DELIVERED = skip_delivered
        cls.RECONCILE_NOTIFY = notify
        if system_user_label:
            cls.SYSTEM_USER_LABEL = system_user_label

        settings = _load_settings()
        settings["reconcile_skip_delivered"] = skip_delivered
        settings["reconcile_notify"] = notify
        settings["system_user_label"] = cls.SYSTEM_USER_LABEL
        _save_settings(settings)

    @classmethod
    def update_export_directory(cls, directory: str):
        """Update the default export directory and persist."""
        cls.EXPORT_DIRECTORY = directory
        settings = _load_settings()
        settings["export_directory"] = directory
        _save_settings(settings)
