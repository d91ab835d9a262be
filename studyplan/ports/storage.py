from typing import Protocol


### COMMENTS
# ==========================================================
# Kontrakt storage klucz-wartość (ports/storage.py).
# ==========================================================
# - Wartości to nieprzezroczysty tekst JSON; adapter go nie parsuje.
# - Planer używa dwóch stałych kluczy ("tasks", "goals"); każdy trzyma całą
#   kolekcję, nadpisywaną przy każdej mutacji.
# - Adaptery mapują błędy techniczne na StorageFault.


class KeyValueStorage(Protocol):
    """Minimalny trwały magazyn klucz/wartość z tekstem JSON."""

    def get(self, key: str) -> str | None:
        """Zwraca tekst JSON zapisany pod `key` albo None, gdy nic jeszcze nie zapisano.

        Wyjątki domenowe:
            StorageFault: nie udało się odczytać backendu.
        """

    def set(self, key: str, blob: str) -> None:
        """Podmienia wartość pod `key` na `blob`.

        Wyjątki domenowe:
            StorageFault: zapis się nie powiódł (limit, uprawnienia, błąd bazy).

        Uwagi:
            Zapis powinien być atomowy: po błędzie poprzednia wartość nadal jest czytelna.
        """
