### COMMENTS
# ============================================
# Konwencja użycia błędów domenowych w projekcie
# ============================================
# - Adaptery storage:
#     * mapują błędy techniczne (OSError, SQLAlchemyError, uszkodzony JSON) na StorageFault
#
# - Serwisy:
#     * brak rekordu przy update/toggle/progress -> TaskNotFoundError / GoalNotFoundError
#     * niepoprawne pola (tytuł, priorytet, target, current) są koercjowane, nigdy odrzucane
#     * nieznany klucz sortowania -> TaskValidationError (błąd wywołującego, nie danych)
#     * StorageFault przy zapisie -> ostrzeżenie w logu; zmiana w pamięci zostaje
#
# - UI (CLI):
#     * łapie DomainError (lub konkretne klasy) i wyświetla przyjazny komunikat
#     * wszystko inne traktuje jako błąd techniczny


class DomainError(Exception):
    """Bazowa klasa dla błędów domenowych.
    Wspólny typ nadrzędny dla wszystkich wyjątków biznesowych planera, dzięki któremu
    UI odróżnia błędy domeny od technicznych (I/O, bugi).
    Nie powinna być rzucana bezpośrednio - używaj klas pochodnych.
    """


class TaskValidationError(DomainError):
    """Rzucany, gdy wywołujący prosi o nieobsługiwaną opcję widoku zadań
    (np. nieznany klucz sortowania).
    Zawiera nazwę pola (`field`), co ułatwia prezentację w UI.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())

    def __str__(self):
        return f"Błąd walidacji pola '{self.field}': {self.message}"


class TaskNotFoundError(DomainError):
    """Rzucany, gdy operacja wymaga istniejącego zadania
    (`update_task`, `toggle_complete`, `mark_reminded`, `get_task`), a ID jest nieznane.
    """
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(self.__str__())

    def __str__(self):
        return f"Zadanie o ID {self.task_id} nie istnieje."


class GoalNotFoundError(DomainError):
    """Rzucany, gdy operacja wymaga istniejącego celu
    (`update_goal`, `set_progress`, `get_goal`), a ID jest nieznane.
    """
    def __init__(self, goal_id: str):
        self.goal_id = goal_id
        super().__init__(self.__str__())

    def __str__(self):
        return f"Cel o ID {self.goal_id} nie istnieje."


class StorageFault(DomainError):
    """Rzucany przez adaptery storage, gdy odczyt lub zapis klucza się nie powiedzie
    (pełny dysk, uprawnienia, błąd bazy, uszkodzony JSON).
    """
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(self.__str__())

    def __str__(self):
        return f"Błąd storage dla klucza '{self.key}': {self.reason}"
