from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from studyplan.adapters.memory.storage import InMemoryStorage
from studyplan.domain.enums import NotificationPermission
from studyplan.domain.errors import StorageFault
from studyplan.services.goal_service import GoalService
from studyplan.services.task_service import TaskService


class FakeIdProvider:
    def __init__(self):
        self.counter = 0
    def new_id(self) -> str:
        self.counter += 1
        return f"id-{self.counter}"


class FakeClock:
    def __init__(self, fixed: datetime | None = None):
        # jeśli nie podamy fixed, zwróci zawsze ten sam „teraz”
        self.fixed = fixed or datetime(2025, 3, 10, 9, 0, 0, tzinfo=timezone.utc)
    def now(self) -> datetime:
        return self.fixed
    def advance(self, **kwargs) -> None:
        self.fixed = self.fixed + timedelta(**kwargs)


class FakeNotifier:
    """
    Zapisuje powiadomienia zamiast je pokazywać.

    `current` to zgoda przed pytaniem; `answer` to to, co "wybierze" użytkownik
    przy wywołaniu request_permission().
    """

    def __init__(
        self,
        current: NotificationPermission = NotificationPermission.GRANTED,
        answer: NotificationPermission = NotificationPermission.GRANTED,
    ) -> None:
        self.current = current
        self.answer = answer
        self.requests = 0
        self.sent: list[tuple[str, str]] = []

    def permission(self) -> NotificationPermission:
        return self.current

    def request_permission(self) -> NotificationPermission:
        self.requests += 1
        if self.current is NotificationPermission.DEFAULT:
            self.current = self.answer
        return self.current

    def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


class FailingStorage:
    """Nic nie czyta, każdy zapis kończy się błędem (np. przekroczony limit)."""

    def __init__(self) -> None:
        self.attempts = 0

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, blob: str) -> None:
        self.attempts += 1
        raise StorageFault(key, "quota exceeded")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ids() -> FakeIdProvider:
    return FakeIdProvider()


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture()
def tasks(storage, ids, clock) -> TaskService:
    return TaskService(storage, ids, clock)


@pytest.fixture()
def goals(storage, ids, clock) -> GoalService:
    return GoalService(storage, ids, clock)
