"""Scentralizowane ustawienia ze zmiennych środowiskowych (+ opcjonalny .env).

- Jeden obiekt Settings dla całej aplikacji.
- Budowany leniwie przy pierwszym `get_settings()`; import modułów nie ma efektów ubocznych.
- Opcje CLI nadpisują pojedyncze pola przez `dataclasses.replace`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from studyplan.domain.enums import NotificationPermission

ENV_PREFIX = "STUDYPLAN"

STORAGE_BACKENDS = ("json", "sqlite", "memory")


def _k(suffix: str) -> str:
    """Buduje nazwę zmiennej środowiskowej z prefiksem projektu."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    sqlite_path: Path

    # ---- Reminders ----
    reminder_interval_seconds: float
    notification_permission: NotificationPermission

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "studyplan")
        log_level = _env(_k("LOG_LEVEL"), "WARNING").upper()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/studyplan"))
        log_dir = _env_path(_k("LOG_DIR"), data_dir)
        storage_backend = _env_choice(_k("STORAGE"), STORAGE_BACKENDS, "json")
        sqlite_path = _env_path(_k("SQLITE_PATH"), data_dir / "studyplan.sqlite3")

        # okres przebiegu przypomnień; nie dla użytkownika
        reminder_interval_seconds = max(1.0, _env_float(_k("REMINDER_INTERVAL"), 60.0))
        notification_permission = NotificationPermission(
            _env_choice(
                _k("NOTIFICATIONS"),
                tuple(p.value for p in NotificationPermission),
                NotificationPermission.DEFAULT.value,
            )
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            data_dir=data_dir,
            storage_backend=storage_backend,
            sqlite_path=sqlite_path,
            reminder_interval_seconds=reminder_interval_seconds,
            notification_permission=notification_permission,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
