from io import StringIO

from rich.console import Console

from studyplan.adapters.console.notifier import ConsoleNotifier
from studyplan.domain.enums import NotificationPermission


def make_console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=100, force_terminal=False), buffer


def test_notify_prints_panel():
    console, buffer = make_console()
    notifier = ConsoleNotifier(console, NotificationPermission.GRANTED)

    notifier.notify("Study Reminder", "Read Ch.3 is due soon! Subject: Bio")

    out = buffer.getvalue()
    assert "Study Reminder" in out
    assert "Read Ch.3 is due soon! Subject: Bio" in out


def test_decided_permission_is_not_asked_again():
    console, _ = make_console()
    notifier = ConsoleNotifier(console, NotificationPermission.DENIED)
    assert notifier.request_permission() is NotificationPermission.DENIED


def test_non_interactive_default_stays_default():
    console, _ = make_console()
    notifier = ConsoleNotifier(console, NotificationPermission.DEFAULT, interactive=False)
    assert notifier.request_permission() is NotificationPermission.DEFAULT


def test_interactive_default_asks_once(monkeypatch):
    console, _ = make_console()
    notifier = ConsoleNotifier(console, "default")
    answers = iter(["y"])
    monkeypatch.setattr(console, "input", lambda *args, **kwargs: next(answers))

    assert notifier.request_permission() is NotificationPermission.GRANTED
    assert notifier.request_permission() is NotificationPermission.GRANTED
    assert notifier.permission() is NotificationPermission.GRANTED
