from typing import NewType
from datetime import datetime
from dataclasses import dataclass

from studyplan.domain.enums import Priority

TaskId = NewType("TaskId", str)


@dataclass(frozen=True)
class Task():
    """
    Model domenowy pojedynczego zadania nauki; niemutowalny; priorytet z zamkniętego zestawu wartości.
    `due_date` to napis daty ISO w postaci, w jakiej go wpisano, więc nawet
    nieparsowalna wartość przechodzi przez storage bez zmian. Czas dostarcza serwis.
    """
    task_id: TaskId
    title: str
    subject: str
    due_date: str
    created_at: datetime
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    reminded: bool = False


### COMMENTS
# ======================================
# Cykl życia
# ======================================
# - `task_id` i `created_at` nadaje raz TaskService.add_task; potem się nie zmieniają.
# - `completed` zmienia się wyłącznie przez TaskService.toggle_complete.
# - `reminded` to jednokierunkowy zatrzask ustawiany przez scheduler przypomnień; edycja go nie resetuje.
# - Każda zmiana to nowa instancja (dataclasses.replace), którą serwis
#   podmienia w swojej kolekcji.
