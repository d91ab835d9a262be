import logging

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from studyplan.domain.enums import NotificationPermission
from studyplan.ports.notifier import Notifier

logger = logging.getLogger(__name__)


class ConsoleNotifier(Notifier):
    """
    Adapter powiadomień terminalowych: drukuje panel Rich i dzwoni dzwonkiem.

    Zgoda działa jak w przeglądarce: `granted` pokazuje, `denied` milczy,
    `default` pyta raz (tylko gdy `interactive`) i pamięta odpowiedź przez
    cały czas życia notifiera.
    """

    def __init__(
        self,
        console: Console | None = None,
        permission: NotificationPermission = NotificationPermission.DEFAULT,
        interactive: bool = True,
    ) -> None:
        self.console = console or Console(stderr=True)
        self._permission = NotificationPermission(permission)
        self.interactive = interactive

    def permission(self) -> NotificationPermission:
        return self._permission

    def request_permission(self) -> NotificationPermission:
        if self._permission is not NotificationPermission.DEFAULT:
            return self._permission
        if not self.interactive:
            return self._permission

        allowed = Confirm.ask("Show study reminders in this terminal?", console=self.console, default=True)
        self._permission = NotificationPermission.GRANTED if allowed else NotificationPermission.DENIED
        logger.info("Notification permission %s", self._permission)
        return self._permission

    def notify(self, title: str, body: str) -> None:
        self.console.print(Panel.fit(f"📚 {body}", title=title, border_style="magenta"))
        self.console.bell()
