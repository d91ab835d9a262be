"""
Scheduler przypomnień.

Mała pętla odpytująca, która:
- szuka nieukończonych zadań z terminem między teraz a końcem jutra,
- powiadamia raz na zadanie przez wstrzyknięty port Notifier,
- ustawia zatrzask `reminded`, więc kolejne przebiegi pomijają zadanie.

Sposób pokazania powiadomienia (panel w terminalu, popup) należy do notifiera,
nie do schedulera.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta

from studyplan.domain.enums import NotificationPermission
from studyplan.domain.task import Task
from studyplan.domain.validation import parse_due_date
from studyplan.ports.clock import Clock
from studyplan.ports.notifier import Notifier
from studyplan.services.task_service import TaskService

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0
REMINDER_TITLE = "Study Reminder"


def reminder_window(now: datetime) -> tuple[datetime, datetime]:
    """Domknięte okno [teraz, koniec jutra] w strefie czasowej `now`."""
    tomorrow = now.date() + timedelta(days=1)
    end = datetime.combine(tomorrow, time.max, tzinfo=now.tzinfo)
    return now, end


def is_due_soon(task: Task, now: datetime) -> bool:
    """
    True dla nieukończonego zadania, którego termin (liczony jako koniec tego dnia)
    wpada w `reminder_window(now)`. Nieparsowalne daty nigdy nie są "wkrótce".
    """
    if task.completed:
        return False
    due = parse_due_date(task.due_date)
    if due is None:
        return False
    due_at = datetime.combine(due, time.max, tzinfo=now.tzinfo)
    start, end = reminder_window(now)
    return start <= due_at <= end


def reminder_body(task: Task) -> str:
    return f"{task.title} is due soon! Subject: {task.subject}"


class ReminderScheduler:
    """
    Maszyna stanów per zadanie: nie-wkrótce -> wkrótce/bez-przypomnienia -> przypomniane.

    `sweep()` jest idempotentny: zatrzask `reminded` gwarantuje co najwyżej jedno
    powiadomienie na zadanie, niezależnie od liczby przebiegów.
    """

    def __init__(
        self,
        tasks: TaskService,
        notifier: Notifier,
        clock: Clock,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self.tasks = tasks
        self.notifier = notifier
        self.clock = clock
        self.interval_seconds = max(0.01, float(interval_seconds))

    def prime_permission(self) -> NotificationPermission:
        """Pyta z góry o zgodę na powiadomienia, gdy jest jeszcze nieustalona."""
        permission = self.notifier.permission()
        if permission is NotificationPermission.DEFAULT:
            permission = self.notifier.request_permission()
        return permission

    def deliver(self, task: Task) -> bool:
        """
        Pokazuje przypomnienie dla `task` zgodnie ze zgodą notifiera:
        - granted  -> notify
        - default  -> zapytaj o zgodę, notify tylko po jej udzieleniu
        - denied   -> pomiń po cichu

        Zwraca True, gdy powiadomienie zostało pokazane.
        """
        permission = self.notifier.permission()
        if permission is NotificationPermission.DEFAULT:
            permission = self.notifier.request_permission()
        if permission is not NotificationPermission.GRANTED:
            logger.debug("Reminder for task %s not shown (permission=%s)", task.task_id, permission)
            return False
        self.notifier.notify(REMINDER_TITLE, reminder_body(task))
        return True

    def sweep(self) -> list[Task]:
        """
        Jeden przebieg po wszystkich zadaniach. Zwraca zadania zatrzaśnięte w tym przebiegu.

        Zatrzask jest ustawiany niezależnie od tego, czy notifier cokolwiek pokazał.
        """
        now = self.clock.now()
        reminded: list[Task] = []
        for task in self.tasks.list_tasks():
            if task.reminded or not is_due_soon(task, now):
                continue
            shown = self.deliver(task)
            reminded.append(self.tasks.mark_reminded(task.task_id))
            logger.info("Reminder task=%s due=%s shown=%s", task.task_id, task.due_date, shown)
        return reminded

    async def run_forever(self) -> None:
        """
        Jeden przebieg od razu, potem co `interval_seconds`.

        Zatrzymanie: anuluj korutynę/task.
        """
        self.prime_permission()
        while True:
            try:
                self.sweep()
            except Exception:
                logger.exception("Reminder sweep failed")
            await asyncio.sleep(self.interval_seconds)
