from typing import Protocol

class IdProvider(Protocol):
    """Port generujący identyfikatory unikalne (co najmniej) w obrębie jednej sesji."""
    def new_id(self) -> str:
        pass
