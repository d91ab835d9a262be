import locale
import logging
import unicodedata
from dataclasses import replace
from datetime import date, datetime
from functools import partial

from studyplan.domain.codec import TASKS_KEY, decode_all, decode_task, dumps_records, encode_task, loads_records
from studyplan.domain.enums import SortKey
from studyplan.domain.errors import StorageFault, TaskNotFoundError, TaskValidationError
from studyplan.domain.task import Task, TaskId
from studyplan.domain.validation import clean_text, parse_due_date, validate_priority
from studyplan.ports.clock import Clock
from studyplan.ports.id_provider import IdProvider
from studyplan.ports.storage import KeyValueStorage

logger = logging.getLogger(__name__)

ALL_SUBJECTS = "all"


### COMMENTS
# ==========================================================
# Warstwa serwisowa (services/task_service.py) - przypadki użycia zadań.
# ==========================================================
# Rola:
# - Właściciel kolekcji zadań (dict w kolejności wstawiania, klucz TaskId).
# - Koercja wejścia przez domain/validation.py; żadne pole nie jest odrzucane.
# - Po każdej mutacji cała kolekcja trafia do storage pod kluczem "tasks".
# - Widoki pochodne (filtr/sort, grupy osi czasu, przedmioty) to czyste odczyty.
#
# Zasady:
# - Brak rekordu przy update/toggle/mark_reminded -> TaskNotFoundError.
# - delete_task dla nieznanego ID nic nie zmienia.
# - Zapis "best effort": StorageFault przy zapisie trafia do logu, zmiana w pamięci zostaje.
# - Wpisy storage nie do odczytania są przechowywane i zapisywane z powrotem bez zmian.
# - Modele są niemutowalne (frozen=True) - zmiana = nowa instancja podmieniona w dict.


def _due_sort_key(task: Task) -> tuple[bool, date]:
    # nieparsowalne daty na koniec
    parsed = parse_due_date(task.due_date)
    return (parsed is None, parsed or date.min)


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _subject_sort_key(task: Task) -> tuple[str, str, str, str]:
    """
    Klucz porównania przedmiotów bliski `localeCompare`:
    - najpierw litery bazowe bez akcentów i wielkości liter ("Éclair" obok "eclair"),
    - potem wersja bez akcentu przed akcentowaną,
    - na końcu małe litery przed wielkimi ("bio" < "Bio").
    `locale.strxfrm` działa według LC_COLLATE ustawionego przez CLI (w locale "C" to tożsamość).
    """
    base = _strip_accents(task.subject).casefold()
    return (locale.strxfrm(base), base, task.subject.casefold(), task.subject.swapcase())


def is_overdue(task: Task, today: date) -> bool:
    """Nieukończone zadanie z terminem przed `today`."""
    due = parse_due_date(task.due_date)
    return not task.completed and due is not None and due < today


def _format_due_date(due_date) -> str:
    if isinstance(due_date, datetime):
        return due_date.date().isoformat()
    if isinstance(due_date, date):
        return due_date.isoformat()
    return str(due_date or "").strip()


class TaskService:
    """
    Serwis przypadków użycia dla zadań nauki.

    :param storage: Implementacja portu KeyValueStorage z kluczem "tasks".
    :param id_provider: Źródło identyfikatorów nowych zadań.
    :param clock: Źródło `created_at` (także dla zapisanych rekordów bez poprawnego createdAt).
    :raises StorageFault: Gdy zapisanej kolekcji nie da się odczytać lub nie jest tablicą JSON.
    """
    def __init__(self, storage: KeyValueStorage, id_provider: IdProvider, clock: Clock) -> None:
        self.storage = storage
        self.id_provider = id_provider
        self.clock = clock

        records = loads_records(TASKS_KEY, storage.get(TASKS_KEY))
        decode = partial(decode_task, created_fallback=clock.now())
        loaded, self._unreadable = decode_all(TASKS_KEY, records, decode)
        self._tasks: dict[TaskId, Task] = {t.task_id: t for t in loaded}
        logger.debug("TaskService ready tasks=%d unreadable=%d", len(self._tasks), len(self._unreadable))

    def _persist(self) -> None:
        blob = dumps_records([encode_task(t) for t in self._tasks.values()] + self._unreadable)
        try:
            self.storage.set(TASKS_KEY, blob)
        except StorageFault as e:
            logger.warning("Tasks not saved, keeping in-memory state: %s", e)

    def _require(self, task_id: TaskId) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _new_id(self) -> TaskId:
        task_id = TaskId(self.id_provider.new_id())
        while task_id in self._tasks:
            task_id = TaskId(self.id_provider.new_id())
        return task_id

    def add_task(self, title, subject, due_date, description=None, priority=None) -> Task:
        """
            Tworzy nowe zadanie i dopisuje je do kolekcji.

            - Brak błędów walidacji: pusty tytuł zostaje pustym napisem.
            - Priorytet spoza low/medium/high (lub brak) -> "medium".
            - `task_id` z IdProvider, `created_at` z Clock.
            - Start: completed=False, reminded=False.

            :param title: Tytuł (przycinany).
            :param subject: Dowolny tekst, używany do filtrowania i grupowania.
            :param due_date: Data (`date`, `datetime` albo napis ISO "YYYY-MM-DD").
            :param description: Opis (opcjonalnie).
            :param priority: "low" / "medium" / "high" (reszta jest koercjowana).
            :return: Utworzony obiekt `Task`.
        """
        task = Task(
            task_id=self._new_id(),
            title=clean_text(title) or "",
            subject=str(subject or "").strip(),
            due_date=_format_due_date(due_date),
            created_at=self.clock.now(),
            description=clean_text(description),
            priority=validate_priority(priority),
        )
        self._tasks[task.task_id] = task
        self._persist()
        logger.debug("Task added id=%s subject=%s due=%s", task.task_id, task.subject, task.due_date)
        return task

    def update_task(self, task_id: TaskId, title, subject, due_date, description=None, priority=None) -> Task:
        """
            Podmienia wszystkie edytowalne pola istniejącego zadania.

            - `task_id`, `created_at`, `completed` i `reminded` przechodzą bez zmian.
            - Tytuł i priorytet są koercjowane tak samo jak w `add_task`.

            :raises TaskNotFoundError: Gdy zadanie o podanym ID nie istnieje.
            :return: Zaktualizowany `Task`.
        """
        current = self._require(task_id)
        updated = replace(
            current,
            title=clean_text(title) or "",
            subject=str(subject or "").strip(),
            due_date=_format_due_date(due_date),
            description=clean_text(description),
            priority=validate_priority(priority),
        )
        self._tasks[task_id] = updated
        self._persist()
        logger.debug("Task updated id=%s", task_id)
        return updated

    def delete_task(self, task_id: TaskId) -> bool:
        """
            Usuwa zadanie. Nieznane ID to nie błąd.

            :return: True, gdy coś usunięto; False dla nieznanego ID.
        """
        removed = self._tasks.pop(task_id, None) is not None
        self._persist()
        logger.debug("Task delete id=%s removed=%s", task_id, removed)
        return removed

    def toggle_complete(self, task_id: TaskId) -> Task:
        """
            Odwraca `completed` istniejącego zadania.

            :raises TaskNotFoundError: Gdy zadanie o podanym ID nie istnieje.
            :return: Zaktualizowany `Task`.
        """
        task = self._require(task_id)
        toggled = replace(task, completed=not task.completed)
        self._tasks[task_id] = toggled
        self._persist()
        logger.debug("Task toggled id=%s completed=%s", task_id, toggled.completed)
        return toggled

    def mark_reminded(self, task_id: TaskId) -> Task:
        """
            Ustawia zatrzask `reminded=True`. Nic go nie resetuje.

            :raises TaskNotFoundError: Gdy zadanie o podanym ID nie istnieje.
        """
        task = self._require(task_id)
        if task.reminded:
            return task
        latched = replace(task, reminded=True)
        self._tasks[task_id] = latched
        self._persist()
        return latched

    def get_task(self, task_id: TaskId) -> Task:
        """
            :raises TaskNotFoundError: Gdy zadanie o podanym ID nie istnieje.
        """
        return self._require(task_id)

    def list_tasks(self) -> list[Task]:
        """Wszystkie zadania w kolejności wstawiania."""
        return list(self._tasks.values())

    def list_filtered(self, subject_filter: str = ALL_SUBJECTS, sort_key: SortKey | str = SortKey.DATE) -> list[Task]:
        """
        Zwraca zadania jednego przedmiotu posortowane według `sort_key`.

        - `subject_filter` inny niż "all" zostawia dokładne (wrażliwe na wielkość liter) dopasowania.
        - "date": termin rosnąco; nieparsowalne daty na końcu.
        - "priority": high -> medium -> low.
        - "subject": rosnąco, bez rozróżniania wielkości liter i akcentów (patrz `_subject_sort_key`).
        Każde sortowanie jest stabilne - remisy zachowują kolejność wstawiania.

        :raises TaskValidationError: Dla nieznanego klucza sortowania.
        """
        try:
            key = SortKey(sort_key)
        except ValueError:
            raise TaskValidationError("sort_key", f"nieobsługiwany klucz sortowania: {sort_key}")

        tasks = self.list_tasks()
        if subject_filter != ALL_SUBJECTS:
            tasks = [t for t in tasks if t.subject == subject_filter]

        match key:
            case SortKey.DATE:
                tasks.sort(key=_due_sort_key)
            case SortKey.PRIORITY:
                tasks.sort(key=lambda t: t.priority.rank, reverse=True)
            case SortKey.SUBJECT:
                tasks.sort(key=_subject_sort_key)
        return tasks

    def upcoming_grouped(self) -> dict[str, list[Task]]:
        """
        Nieukończone zadania pogrupowane po napisie terminu, daty rosnąco.

        Klucze w kolejności pierwszego zadania po sortowaniu; żaden klucz nie ma pustej listy.
        """
        pending = sorted((t for t in self._tasks.values() if not t.completed), key=_due_sort_key)
        groups: dict[str, list[Task]] = {}
        for task in pending:
            groups.setdefault(task.due_date, []).append(task)
        return groups

    def distinct_subjects(self) -> list[str]:
        """Przedmioty wszystkich zadań, bez duplikatów, rosnąco."""
        return sorted({t.subject for t in self._tasks.values()})
