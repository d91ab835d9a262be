from typing import Protocol
from datetime import datetime

class Clock(Protocol):
    """Źródło czasu. Zwraca datetime ze strefą (lokalna strefa użytkownika)."""
    def now(self) -> datetime:
        pass
