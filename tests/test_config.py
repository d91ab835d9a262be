from pathlib import Path

from studyplan.adapters.jsonfile.storage import JsonFileStorage
from studyplan.adapters.memory.storage import InMemoryStorage
from studyplan.adapters.sql.storage import SqlStorage
from studyplan.bootstrap import build_planner, build_storage
from studyplan.config import Settings
from studyplan.domain.enums import NotificationPermission

from conftest import FakeNotifier


def test_settings_defaults(monkeypatch):
    for name in ["DATA_DIR", "LOG_DIR", "STORAGE", "SQLITE_PATH", "REMINDER_INTERVAL", "NOTIFICATIONS", "LOG_LEVEL"]:
        monkeypatch.delenv(f"STUDYPLAN_{name}", raising=False)

    settings = Settings.from_env()

    assert settings.storage_backend == "json"
    assert settings.data_dir == Path(".local/studyplan")
    assert settings.sqlite_path == Path(".local/studyplan/studyplan.sqlite3")
    assert settings.reminder_interval_seconds == 60.0
    assert settings.notification_permission is NotificationPermission.DEFAULT
    assert settings.log_level == "WARNING"


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STUDYPLAN_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STUDYPLAN_STORAGE", "SQLite")
    monkeypatch.setenv("STUDYPLAN_REMINDER_INTERVAL", "0.2")
    monkeypatch.setenv("STUDYPLAN_NOTIFICATIONS", "granted")
    monkeypatch.setenv("STUDYPLAN_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.storage_backend == "sqlite"
    assert settings.sqlite_path == tmp_path / "studyplan.sqlite3"
    assert settings.log_dir == tmp_path
    assert settings.reminder_interval_seconds == 1.0
    assert settings.notification_permission is NotificationPermission.GRANTED
    assert settings.log_level == "DEBUG"


def test_settings_fall_back_on_garbage(monkeypatch):
    monkeypatch.setenv("STUDYPLAN_STORAGE", "mongodb")
    monkeypatch.setenv("STUDYPLAN_REMINDER_INTERVAL", "soon")
    monkeypatch.setenv("STUDYPLAN_NOTIFICATIONS", "maybe")

    settings = Settings.from_env()

    assert settings.storage_backend == "json"
    assert settings.reminder_interval_seconds == 60.0
    assert settings.notification_permission is NotificationPermission.DEFAULT


def make_settings(tmp_path, backend: str) -> Settings:
    return Settings(
        app_name="studyplan",
        log_level="WARNING",
        log_dir=tmp_path,
        data_dir=tmp_path,
        storage_backend=backend,
        sqlite_path=tmp_path / "studyplan.sqlite3",
        reminder_interval_seconds=5.0,
        notification_permission=NotificationPermission.GRANTED,
    )


def test_build_storage_picks_backend(tmp_path):
    assert isinstance(build_storage(make_settings(tmp_path, "memory")), InMemoryStorage)
    assert isinstance(build_storage(make_settings(tmp_path, "json")), JsonFileStorage)
    sql = build_storage(make_settings(tmp_path, "sqlite"))
    assert isinstance(sql, SqlStorage)
    sql.close()


def test_build_planner_wires_services(tmp_path, clock, ids):
    # Arrange
    notifier = FakeNotifier()
    planner = build_planner(make_settings(tmp_path, "memory"), notifier=notifier, clock=clock, id_provider=ids)

    # Act
    planner.tasks.add_task("Read Ch.3", "Bio", "2025-03-11")
    planner.reminders.sweep()

    # Assert
    assert planner.reminders.interval_seconds == 5.0
    assert len(notifier.sent) == 1
    assert planner.storage.get("tasks") is not None
