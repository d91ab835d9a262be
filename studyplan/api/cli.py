from studyplan.domain.errors import DomainError, GoalNotFoundError, StorageFault, TaskNotFoundError
from studyplan.domain.enums import SortKey
from studyplan.domain.goal import Goal, GoalId
from studyplan.domain.task import Task, TaskId
from studyplan.bootstrap import StudyPlanner, build_planner
from studyplan.config import STORAGE_BACKENDS, get_settings
from studyplan.logging_setup import setup_logging
from studyplan.services.goal_service import progress_percent
from studyplan.services.task_service import ALL_SUBJECTS, is_overdue
from studyplan.api.colors import PriorityColor, color_priority
from typer import Argument, BadParameter, Exit, Option, Typer, confirm
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Iterable, Optional
import asyncio
import locale
import logging


### COMMENTS
# ==========================================================
# CLI (Typer + Rich) - warstwa prezentacji planera.
# ==========================================================
# Rola:
# - Mapuje komendy na serwisy StudyPlanner (zadania, cele, przypomnienia).
# - Wyświetla wyniki jako tabele/panele; pyta o potwierdzenie przed usunięciem.
# - Łapie DomainError i drukuje przyjazne komunikaty.
#
# Zasady:
# - Zero logiki biznesowej - deleguj do serwisów.
# - Jednorazowy bootstrap planera na proces, w callbacku Typer.
# - Każdy tekst od użytkownika (tytuł, przedmiot, opis, daty) idzie do Rich przez `escape`.


app = Typer(help="Study planner: tasks, goals and deadline reminders")
goal_app = Typer(help="Numeric study goals")
app.add_typer(goal_app, name="goal")
console = Console()
logger = logging.getLogger(__name__)

planner: StudyPlanner | None = None  # ustawiany w callbacku


@app.callback()
def main(
    backend: Optional[str] = Option(None, "--backend", "-b", help="Storage backend: json, sqlite or memory"),
    data_dir: Optional[Path] = Option(None, "--data-dir", help="Directory for data files and logs"),
    log_level: Optional[str] = Option(None, "--log-level", help="Console log level (DEBUG, INFO, WARNING...)"),
) -> None:
    """Bootstrap ustawień, logowania i planera na starcie procesu CLI."""
    global planner
    settings = get_settings()

    if backend is not None:
        if backend not in STORAGE_BACKENDS:
            raise BadParameter(f"choose one of: {', '.join(STORAGE_BACKENDS)}", param_hint="--backend")
        settings = replace(settings, storage_backend=backend)
    if data_dir is not None:
        settings = replace(
            settings,
            data_dir=data_dir,
            log_dir=data_dir,
            sqlite_path=data_dir / "studyplan.sqlite3",
        )
    if log_level is not None:
        settings = replace(settings, log_level=log_level.upper())

    setup_logging(log_dir=settings.log_dir, console_level=settings.log_level)
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug("LC_COLLATE from environment unavailable, keeping C collation: %s", e)
    try:
        planner = build_planner(settings)
    except StorageFault as e:
        error_panel(e, "Storage error")
        raise Exit(code=1)


def short_id(item_id: str, n: int = 8) -> str:
    """Skrócone ID do wyświetlenia (pierwsze 8 znaków)."""
    return item_id[:n]


def resolve_id(raw: str, known: Iterable[str]) -> str:
    """Rozwija jednoznaczny prefiks ID do pełnego ID; w przeciwnym razie zwraca `raw` bez zmian."""
    matches = [i for i in known if i.startswith(raw)]
    return matches[0] if len(matches) == 1 else raw


def error_panel(e: Exception, title: str = "Domain error", hint: str | None = None) -> None:
    body = f"❌ {escape(str(e))}" + (f"\n[dim]{escape(hint)}[/]" if hint else "")
    console.print(Panel.fit(body, title=title, border_style="red"))


def format_due(task: Task) -> str:
    if is_overdue(task, date.today()):
        return f"[bold red]{escape(task.due_date)} (overdue)[/]"
    return escape(task.due_date) if task.due_date else "[dim]none[/]"


def format_status(task: Task) -> str:
    return f"{PriorityColor.DONE}Completed{PriorityColor.RESET}" if task.completed else "Open"


def render_tasks(items: list[Task]) -> None:
    """Tabela Rich z kolumnami: ID, Title, Subject, Priority, Due, Status."""
    if not items:
        console.print(Panel.fit("No tasks yet\n[dim]Use 'studyplan add' to create your first study task[/]"))
        return

    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Subject")
    table.add_column("Priority", no_wrap=True)
    table.add_column("Due", no_wrap=True)
    table.add_column("Status", no_wrap=True)

    for t in items:
        table.add_row(
            escape(short_id(t.task_id)),
            escape(t.title),
            escape(t.subject),
            color_priority(t.priority),
            format_due(t),
            format_status(t),
        )
    console.print(table)
    console.print(f"[dim]Total: {len(items)}[/dim]")


def render_goals(items: list[Goal]) -> None:
    if not items:
        console.print(Panel.fit("No study goals yet\n[dim]Use 'studyplan goal add' to set your first goal[/]"))
        return

    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Progress", no_wrap=True)
    table.add_column("", min_width=20)
    table.add_column("%", justify="right", no_wrap=True)
    table.add_column("Deadline", no_wrap=True)

    for g in items:
        percent = progress_percent(g)
        table.add_row(
            escape(short_id(g.goal_id)),
            escape(g.title),
            f"{g.current} / {g.target}",
            ProgressBar(total=100, completed=percent, width=20),
            f"{percent}%",
            escape(g.deadline) if g.deadline else "[dim]No deadline[/]",
        )
    console.print(table)


def task_panel(task: Task, title: str, border_style: str = "green") -> None:
    lines = [
        f"[cyan]ID:[/cyan] {escape(task.task_id)}",
        f"[dim]Title:[/dim] {escape(task.title)}",
        f"[dim]Subject:[/dim] {escape(task.subject)}",
        f"[dim]Due:[/dim] {format_due(task)}",
        f"[dim]Priority:[/dim] {color_priority(task.priority)}",
        f"[dim]Status:[/dim] {format_status(task)}",
    ]
    if task.description:
        lines.append(f"[dim]Description:[/dim] {escape(task.description)}")
    console.print(Panel.fit("\n".join(lines), title=title, border_style=border_style))


def _task_id(raw: str) -> TaskId:
    return TaskId(resolve_id(raw, (t.task_id for t in planner.tasks.list_tasks())))


def _goal_id(raw: str) -> GoalId:
    return GoalId(resolve_id(raw, (g.goal_id for g in planner.goals.list_goals())))


@app.command("add")
def add(
    title: str,
    subject: str = Option(..., "--subject", "-s"),
    due: str = Option(..., "--due", help="Due date, YYYY-MM-DD"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
    priority: str = Option("medium", "--priority", "-p", help="low, medium or high"),
) -> None:
    """Dodaje zadanie nauki. Nieznany priorytet zapisuje się jako medium."""
    try:
        task = planner.tasks.add_task(title, subject, due, description=desc, priority=priority)
        task_panel(task, "✅ Task added")
    except DomainError as e:
        error_panel(e, hint="Example: studyplan add 'Read Ch.3' -s Bio --due 2025-06-01 -p high")


@app.command("edit")
def edit(
    task_id: str,
    title: Optional[str] = Option(None, "--title", "-t"),
    subject: Optional[str] = Option(None, "--subject", "-s"),
    due: Optional[str] = Option(None, "--due"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
    priority: Optional[str] = Option(None, "--priority", "-p"),
) -> None:
    """Edytuje zadanie; pominięte opcje zachowują obecną wartość."""
    try:
        current = planner.tasks.get_task(_task_id(task_id))
        task = planner.tasks.update_task(
            current.task_id,
            title if title is not None else current.title,
            subject if subject is not None else current.subject,
            due if due is not None else current.due_date,
            description=desc if desc is not None else current.description,
            priority=priority if priority is not None else current.priority,
        )
        task_panel(task, "✏️ Task updated")
    except TaskNotFoundError as e:
        error_panel(e, "Not found", hint="Use 'studyplan list' to find the right ID")
    except DomainError as e:
        error_panel(e)


@app.command("list")
def list_cmd(
    subject: str = Option(ALL_SUBJECTS, "--subject", "-s", help="Subject to show, or 'all'"),
    sort: SortKey = Option(SortKey.DATE, "--sort", "-o", help="date, priority or subject"),
) -> None:
    """Listuje zadania, opcjonalnie filtrowane po przedmiocie i posortowane."""
    try:
        render_tasks(planner.tasks.list_filtered(subject, sort))
    except DomainError as e:
        error_panel(e)


@app.command("show")
def show(task_id: str) -> None:
    """Pokazuje szczegóły jednego zadania."""
    try:
        task_panel(planner.tasks.get_task(_task_id(task_id)), "Task details", "cyan")
    except TaskNotFoundError as e:
        error_panel(e, "Not found", hint="Use 'studyplan list' to find the right ID")


@app.command("done")
def done(task_id: str) -> None:
    """Przełącza zadanie między otwartym a ukończonym."""
    try:
        task = planner.tasks.toggle_complete(_task_id(task_id))
        task_panel(task, "✅ Completed" if task.completed else "↩️ Reopened")
    except TaskNotFoundError as e:
        error_panel(e, "Not found", hint="Use 'studyplan list' to find the right ID")


@app.command("rm")
def rm(task_id: str, yes: bool = Option(False, "--yes", "-y", help="Do not ask for confirmation")) -> None:
    """Usuwa zadanie po potwierdzeniu. Nieznane ID niczego nie zmienia."""
    resolved = _task_id(task_id)
    if not yes and not confirm("Are you sure you want to delete this task?"):
        console.print("[dim]Cancelled[/]")
        return
    removed = planner.tasks.delete_task(resolved)
    if removed:
        console.print(Panel.fit(f"🟡 Task deleted\nID: {escape(short_id(resolved))}", title="Deleted", border_style="yellow"))
    else:
        console.print(f"[dim]No task with ID {escape(task_id)}; nothing to delete[/]")


@app.command("timeline")
def timeline() -> None:
    """Nadchodzące (nieukończone) zadania pogrupowane po terminie."""
    groups = planner.tasks.upcoming_grouped()
    if not groups:
        console.print(Panel.fit("No upcoming deadlines\n[dim]All tasks are completed or no tasks scheduled[/]"))
        return
    for due_date, tasks in groups.items():
        lines = [f"[bold]{escape(t.title)}[/]  [dim]{escape(t.subject)} - {color_priority(t.priority)} priority[/]" for t in tasks]
        console.print(Panel("\n".join(lines), title=escape(due_date) if due_date else "no date", title_align="left", border_style="cyan"))


@app.command("subjects")
def subjects() -> None:
    """Listuje przedmioty używane w zadaniach."""
    names = planner.tasks.distinct_subjects()
    if not names:
        console.print("[dim]No subjects yet[/]")
        return
    for name in names:
        console.print(f"• {escape(name)}")


@app.command("remind")
def remind() -> None:
    """Jeden przebieg przypomnień dla zadań z terminem do końca jutra."""
    reminded = planner.reminders.sweep()
    console.print(f"[dim]Reminders sent: {len(reminded)}[/]")


@app.command("watch")
def watch() -> None:
    """Działa w pętli i co skonfigurowany interwał sprawdza zbliżające się terminy. Ctrl+C kończy."""
    console.print(f"[dim]Watching for deadlines every {planner.reminders.interval_seconds:g}s (Ctrl+C to stop)[/]")
    try:
        asyncio.run(planner.reminders.run_forever())
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/]")


@goal_app.command("add")
def goal_add(
    title: str,
    target: str = Option("1", "--target", "-t", help="Target amount (>= 1)"),
    current: str = Option("0", "--current", "-c"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
    deadline: Optional[str] = Option(None, "--deadline", help="YYYY-MM-DD"),
) -> None:
    """Dodaje cel nauki. Target poniżej 1 staje się 1; current jest przycinany do targetu."""
    try:
        goal = planner.goals.add_goal(title, target, current, description=desc, deadline=deadline)
        console.print(Panel.fit(
            f"✅ Goal added\n[cyan]ID:[/cyan] {escape(goal.goal_id)}\n"
            f"[dim]Progress:[/dim] {goal.current} / {goal.target} ({progress_percent(goal)}%)",
            title="Success",
            border_style="green",
        ))
    except DomainError as e:
        error_panel(e)


@goal_app.command("edit")
def goal_edit(
    goal_id: str,
    title: Optional[str] = Option(None, "--title"),
    target: Optional[str] = Option(None, "--target", "-t"),
    current: Optional[str] = Option(None, "--current", "-c"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
    deadline: Optional[str] = Option(None, "--deadline"),
) -> None:
    """Edytuje cel; pominięte opcje zachowują obecną wartość."""
    try:
        existing = planner.goals.get_goal(_goal_id(goal_id))
        goal = planner.goals.update_goal(
            existing.goal_id,
            title if title is not None else existing.title,
            target if target is not None else existing.target,
            current if current is not None else existing.current,
            description=desc if desc is not None else existing.description,
            deadline=deadline if deadline is not None else existing.deadline,
        )
        render_goals([goal])
    except GoalNotFoundError as e:
        error_panel(e, "Not found", hint="Use 'studyplan goal list' to find the right ID")
    except DomainError as e:
        error_panel(e)


@goal_app.command("list")
def goal_list() -> None:
    """Listuje cele wraz z postępem."""
    render_goals(planner.goals.list_goals())


@goal_app.command("progress")
def goal_progress(goal_id: str, value: str = Argument(..., help="New current amount")) -> None:
    """Ustawia bieżący postęp celu (clamp do 0..target)."""
    try:
        goal = planner.goals.set_progress(_goal_id(goal_id), value)
        render_goals([goal])
    except GoalNotFoundError as e:
        error_panel(e, "Not found", hint="Use 'studyplan goal list' to find the right ID")


@goal_app.command("rm")
def goal_rm(goal_id: str, yes: bool = Option(False, "--yes", "-y")) -> None:
    """Usuwa cel po potwierdzeniu."""
    resolved = _goal_id(goal_id)
    if not yes and not confirm("Are you sure you want to delete this goal?"):
        console.print("[dim]Cancelled[/]")
        return
    if planner.goals.delete_goal(resolved):
        console.print(Panel.fit(f"🟡 Goal deleted\nID: {escape(short_id(resolved))}", title="Deleted", border_style="yellow"))
    else:
        console.print(f"[dim]No goal with ID {escape(goal_id)}; nothing to delete[/]")


if __name__ == "__main__":
    app()
