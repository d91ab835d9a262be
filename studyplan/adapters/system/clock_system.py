from studyplan.ports.clock import Clock
from datetime import datetime

class SystemClock(Clock):
    """Adapter systemowy zwracający bieżący czas lokalny."""

    def now(self) -> datetime:
        """Zwraca bieżący czas jako datetime ze strefą lokalną."""
        return datetime.now().astimezone()
