from enum import Enum


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Stała waga używana przy sortowaniu po priorytecie (high=3 ... low=1)."""
        return _PRIORITY_RANK[self]

    def __str__(self):
        return self.value


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class SortKey(str, Enum):
    DATE = "date"
    PRIORITY = "priority"
    SUBJECT = "subject"

    def __str__(self):
        return self.value


class NotificationPermission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"

    def __str__(self):
        return self.value
