from typing import Mapping


class InMemoryStorage:
    """
        Storage klucz-wartość trzymany w zwykłym dict.
        Używany przez testy i `--backend memory`; nic nie przeżywa procesu.
        :param initial: Opcjonalne dane startowe klucz -> tekst JSON.
    """
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        self._data[key] = blob
