import json
import logging
from datetime import datetime

from studyplan.domain.enums import Priority
from studyplan.domain.errors import StorageFault
from studyplan.domain.goal import Goal, GoalId
from studyplan.domain.task import Task, TaskId
from studyplan.domain.validation import (
    clean_text,
    coerce_current,
    coerce_target,
    validate_priority,
)

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
GOALS_KEY = "goals"


### COMMENTS
# ==========================================================
# Kodek rekordów (domain/codec.py).
# ==========================================================
# - Każda kolekcja leży pod jednym stałym kluczem jako tablica JSON.
# - Nazwy pól w camelCase (dueDate, createdAt, ...), zgodne z danymi starszego frontendu.
# - Dekodowanie stosuje te same koercje co serwisy: zapisanym danym nie ufamy.
# - Rekord, którego nie da się odczytać, NIE znika: wraca do zapisu w surowej postaci.


def _encode_dt(dt: datetime) -> str:
    return dt.isoformat()


def _decode_dt(raw, fallback: datetime | None = None) -> datetime:
    """Parsuje znacznik ISO8601; końcowe 'Z' = UTC, wartość bez strefy = czas lokalny.
    Brak lub błędna wartość -> `fallback` (jeśli podany), w przeciwnym razie ValueError.
    """
    parsed = None
    if isinstance(raw, str) and raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
    if parsed is None:
        if fallback is None:
            raise ValueError(f"createdAt is not an ISO8601 timestamp: {raw!r}")
        logger.warning("createdAt %r unreadable, using %s", raw, fallback.isoformat())
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def encode_task(task: Task) -> dict:
    return {
        "id": str(task.task_id),
        "title": task.title,
        "subject": task.subject,
        "description": task.description or "",
        "dueDate": task.due_date,
        "priority": task.priority.value if isinstance(task.priority, Priority) else str(task.priority),
        "completed": task.completed,
        "createdAt": _encode_dt(task.created_at),
        "reminded": task.reminded,
    }


def decode_task(record: dict, created_fallback: datetime | None = None) -> Task:
    return Task(
        task_id=TaskId(str(record["id"])),
        title=str(record.get("title") or "").strip(),
        subject=str(record.get("subject") or "").strip(),
        due_date=str(record.get("dueDate") or ""),
        created_at=_decode_dt(record.get("createdAt"), created_fallback),
        description=clean_text(record.get("description")),
        priority=validate_priority(record.get("priority")),
        completed=bool(record.get("completed", False)),
        reminded=bool(record.get("reminded", False)),
    )


def encode_goal(goal: Goal) -> dict:
    return {
        "id": str(goal.goal_id),
        "title": goal.title,
        "description": goal.description or "",
        "target": goal.target,
        "current": goal.current,
        "deadline": goal.deadline or "",
        "createdAt": _encode_dt(goal.created_at),
    }


def decode_goal(record: dict, created_fallback: datetime | None = None) -> Goal:
    target = coerce_target(record.get("target"))
    return Goal(
        goal_id=GoalId(str(record["id"])),
        title=str(record.get("title") or "").strip(),
        target=target,
        current=coerce_current(record.get("current"), target),
        created_at=_decode_dt(record.get("createdAt"), created_fallback),
        description=clean_text(record.get("description")),
        deadline=clean_text(record.get("deadline")),
    )


def dumps_records(records: list) -> str:
    return json.dumps(records, ensure_ascii=False)


def loads_records(key: str, blob: str | None) -> list:
    """
    Parsuje tablicę JSON zapisaną pod kluczem `key`.

    - Brak danych -> pusta lista (pierwsze uruchomienie).
    - Nie-JSON albo nie-tablica -> StorageFault (nie startujemy na uszkodzonych danych).
    - Elementy tablicy zwracane bez zmian; ich odczyt to zadanie `decode_all`.
    """
    if blob is None or not blob.strip():
        return []
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise StorageFault(key, f"invalid JSON: {e}")
    if not isinstance(data, list):
        raise StorageFault(key, f"expected a JSON array, got {type(data).__name__}")
    return data


def decode_all(key: str, records: list, decode) -> tuple[list, list]:
    """
    Dekoduje każdy rekord funkcją `decode`.

    :return: (obiekty domenowe, surowe wpisy nie do odczytania).
        Drugą listę serwis dopisuje przy każdym zapisie, więc uszkodzony albo
        zduplikowany wpis nigdy nie jest po cichu kasowany.
    """
    items = []
    unreadable = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("Keeping %s[%d] as-is: not an object", key, index)
            unreadable.append(record)
            continue
        try:
            item = decode(record)
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Keeping %s[%d] as-is: %s", key, index, e)
            unreadable.append(record)
            continue
        item_id = str(record["id"])
        if item_id in seen:
            logger.warning("Keeping %s[%d] as-is: duplicate id '%s'", key, index, item_id)
            unreadable.append(record)
            continue
        seen.add(item_id)
        items.append(item)
    return items, unreadable
