import logging
import math
from dataclasses import replace
from functools import partial

from studyplan.domain.codec import GOALS_KEY, decode_all, decode_goal, dumps_records, encode_goal, loads_records
from studyplan.domain.errors import GoalNotFoundError, StorageFault
from studyplan.domain.goal import Goal, GoalId
from studyplan.domain.validation import clean_text, coerce_current, coerce_target
from studyplan.ports.clock import Clock
from studyplan.ports.id_provider import IdProvider
from studyplan.ports.storage import KeyValueStorage

logger = logging.getLogger(__name__)


def progress_percent(goal) -> int:
    """Postęp w pełnych procentach, zaokrąglony w górę od połowy, max 100; 0 gdy target <= 0."""
    if goal.target <= 0:
        return 0
    percent = math.floor(goal.current / goal.target * 100 + 0.5)
    return max(0, min(percent, 100))


class GoalService:
    """
    Serwis przypadków użycia dla liczbowych celów nauki.

    Każdy zapis (add, update, set_progress) ponownie stosuje clampy
    target >= 1 oraz 0 <= current <= target, po czym zapisuje kolekcję do storage
    pod kluczem "goals". Błędy storage przy zapisie trafiają do logu, nie wyżej.
    """
    def __init__(self, storage: KeyValueStorage, id_provider: IdProvider, clock: Clock) -> None:
        self.storage = storage
        self.id_provider = id_provider
        self.clock = clock

        records = loads_records(GOALS_KEY, storage.get(GOALS_KEY))
        decode = partial(decode_goal, created_fallback=clock.now())
        loaded, self._unreadable = decode_all(GOALS_KEY, records, decode)
        self._goals: dict[GoalId, Goal] = {g.goal_id: g for g in loaded}
        logger.debug("GoalService ready goals=%d unreadable=%d", len(self._goals), len(self._unreadable))

    def _persist(self) -> None:
        blob = dumps_records([encode_goal(g) for g in self._goals.values()] + self._unreadable)
        try:
            self.storage.set(GOALS_KEY, blob)
        except StorageFault as e:
            logger.warning("Goals not saved, keeping in-memory state: %s", e)

    def _require(self, goal_id: GoalId) -> Goal:
        goal = self._goals.get(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        return goal

    def _new_id(self) -> GoalId:
        goal_id = GoalId(self.id_provider.new_id())
        while goal_id in self._goals:
            goal_id = GoalId(self.id_provider.new_id())
        return goal_id

    def add_goal(self, title, target, current=0, description=None, deadline=None) -> Goal:
        """
            Tworzy cel.

            - `title`: przycinany; pusty zostaje pustym napisem.
            - `target`: nienumeryczny lub < 1 -> 1.
            - `current`: nienumeryczny -> 0, potem clamp do [0, target].

            :return: Utworzony `Goal`.
        """
        clamped_target = coerce_target(target)
        goal = Goal(
            goal_id=self._new_id(),
            title=clean_text(title) or "",
            target=clamped_target,
            current=coerce_current(current, clamped_target),
            created_at=self.clock.now(),
            description=clean_text(description),
            deadline=clean_text(deadline),
        )
        self._goals[goal.goal_id] = goal
        self._persist()
        logger.debug("Goal added id=%s target=%d current=%d", goal.goal_id, goal.target, goal.current)
        return goal

    def update_goal(self, goal_id: GoalId, title, target, current, description=None, deadline=None) -> Goal:
        """
            Podmienia edytowalne pola celu z tymi samymi koercjami co `add_goal`.
            `goal_id` i `created_at` zostają.

            :raises GoalNotFoundError: Gdy cel o podanym ID nie istnieje.
        """
        existing = self._require(goal_id)
        clamped_target = coerce_target(target)
        updated = replace(
            existing,
            title=clean_text(title) or "",
            target=clamped_target,
            current=coerce_current(current, clamped_target),
            description=clean_text(description),
            deadline=clean_text(deadline),
        )
        self._goals[goal_id] = updated
        self._persist()
        logger.debug("Goal updated id=%s", goal_id)
        return updated

    def delete_goal(self, goal_id: GoalId) -> bool:
        """Usuwa cel; nieznane ID nic nie zmienia. Zwraca, czy coś usunięto."""
        removed = self._goals.pop(goal_id, None) is not None
        self._persist()
        logger.debug("Goal delete id=%s removed=%s", goal_id, removed)
        return removed

    def set_progress(self, goal_id: GoalId, new_current) -> Goal:
        """
            Ustawia `current` na `new_current` po clampie do [0, target].

            :raises GoalNotFoundError: Gdy cel o podanym ID nie istnieje.
        """
        goal = self._require(goal_id)
        updated = replace(goal, current=coerce_current(new_current, goal.target))
        self._goals[goal_id] = updated
        self._persist()
        logger.debug("Goal progress id=%s current=%d/%d", goal_id, updated.current, updated.target)
        return updated

    def get_goal(self, goal_id: GoalId) -> Goal:
        return self._require(goal_id)

    def list_goals(self) -> list[Goal]:
        return list(self._goals.values())

    @staticmethod
    def progress_percent(goal: Goal) -> int:
        return progress_percent(goal)
