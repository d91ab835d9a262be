from typing import NewType
from datetime import datetime
from dataclasses import dataclass

GoalId = NewType("GoalId", str)


@dataclass(frozen=True)
class Goal():
    """
    Liczbowy cel nauki (np. "przeczytać 20 rozdziałów").
    Niezmiennik pilnowany przez GoalService przy każdym zapisie: 1 <= target oraz 0 <= current <= target.
    """
    goal_id: GoalId
    title: str
    target: int
    current: int
    created_at: datetime
    description: str | None = None
    deadline: str | None = None
