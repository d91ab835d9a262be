from typing import Protocol

from studyplan.domain.enums import NotificationPermission


class Notifier(Protocol):
    """Port powiadomień o przypomnieniach (popup na pulpicie, panel w terminalu, ...)."""

    def permission(self) -> NotificationPermission:
        """Obecny stan zgody, bez pytania użytkownika."""

    def request_permission(self) -> NotificationPermission:
        """Pyta użytkownika o zgodę (gdy jeszcze nieustalona) i zwraca wynik."""

    def notify(self, title: str, body: str) -> None:
        """Pokazuje jedno powiadomienie. Wołane tylko przy udzielonej zgodzie."""
