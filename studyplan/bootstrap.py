"""
Composition root.

- wybiera backend storage na podstawie ustawień,
- wpina zegar, dostawcę ID i notifier w serwisy,
- zwraca jeden jawny kontekst StudyPlanner, którego właścicielem jest warstwa prezentacji.

Wszystko jest wstrzykiwalne, więc testy budują planer na fake'ach.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from studyplan.adapters.console.notifier import ConsoleNotifier
from studyplan.adapters.jsonfile.storage import JsonFileStorage
from studyplan.adapters.memory.storage import InMemoryStorage
from studyplan.adapters.sql.storage import SqlStorage
from studyplan.adapters.system.clock_system import SystemClock
from studyplan.adapters.system.id_provider_uuid import UuidIdProvider
from studyplan.config import Settings, get_settings
from studyplan.ports.clock import Clock
from studyplan.ports.id_provider import IdProvider
from studyplan.ports.notifier import Notifier
from studyplan.ports.storage import KeyValueStorage
from studyplan.services.goal_service import GoalService
from studyplan.services.reminder_scheduler import ReminderScheduler
from studyplan.services.task_service import TaskService

logger = logging.getLogger(__name__)


@dataclass
class StudyPlanner:
    settings: Settings
    storage: KeyValueStorage
    tasks: TaskService
    goals: GoalService
    reminders: ReminderScheduler


def build_storage(settings: Settings) -> KeyValueStorage:
    match settings.storage_backend:
        case "memory":
            return InMemoryStorage()
        case "sqlite":
            return SqlStorage(settings.sqlite_path)
        case _:
            return JsonFileStorage(settings.data_dir)


def build_planner(
    settings: Settings | None = None,
    *,
    storage: KeyValueStorage | None = None,
    notifier: Notifier | None = None,
    clock: Clock | None = None,
    id_provider: IdProvider | None = None,
) -> StudyPlanner:
    """
    Tworzy StudyPlanner z podanych ustawień.
    Gdy settings to None, używa get_settings().

    :raises StorageFault: Gdy zapisanych zadań lub celów nie da się odczytać.
    """
    if settings is None:
        settings = get_settings()

    storage = storage or build_storage(settings)
    clock = clock or SystemClock()
    id_provider = id_provider or UuidIdProvider()
    notifier = notifier or ConsoleNotifier(permission=settings.notification_permission)

    tasks = TaskService(storage, id_provider, clock)
    goals = GoalService(storage, id_provider, clock)
    reminders = ReminderScheduler(
        tasks,
        notifier,
        clock,
        interval_seconds=settings.reminder_interval_seconds,
    )
    logger.info(
        "Planner ready backend=%s tasks=%d goals=%d",
        settings.storage_backend,
        len(tasks.list_tasks()),
        len(goals.list_goals()),
    )
    return StudyPlanner(settings=settings, storage=storage, tasks=tasks, goals=goals, reminders=reminders)
