from enum import Enum

from studyplan.domain.enums import Priority


class PriorityColor(Enum):
    HIGH = "[red]"
    MEDIUM = "[yellow]"
    LOW = "[green]"
    DONE = "[dim]"
    RESET = "[/]"

    def __str__(self):
        return self.value


def color_priority(priority: Priority) -> str:
    """Zwraca etykietę priorytetu w Rich-markup z kolorem."""
    match priority:
        case Priority.HIGH:
            return f"{PriorityColor.HIGH}HIGH{PriorityColor.RESET}"
        case Priority.MEDIUM:
            return f"{PriorityColor.MEDIUM}MEDIUM{PriorityColor.RESET}"
        case Priority.LOW:
            return f"{PriorityColor.LOW}LOW{PriorityColor.RESET}"
        case _:
            return str(priority)
