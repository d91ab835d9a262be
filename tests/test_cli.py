import json
from datetime import date

import pytest
from typer.testing import CliRunner

from studyplan.api import cli
from studyplan.config import Settings
from studyplan.domain.enums import NotificationPermission

runner = CliRunner()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        app_name="studyplan",
        log_level="WARNING",
        log_dir=tmp_path,
        data_dir=tmp_path,
        storage_backend="json",
        sqlite_path=tmp_path / "studyplan.sqlite3",
        reminder_interval_seconds=60.0,
        notification_permission=NotificationPermission.GRANTED,
    )


@pytest.fixture
def invoke(settings, monkeypatch):
    monkeypatch.setattr(cli, "get_settings", lambda: settings)

    def _invoke(*args: str, input: str | None = None):
        return runner.invoke(cli.app, list(args), input=input)

    return _invoke


def stored(settings, key: str) -> list[dict]:
    return json.loads((settings.data_dir / f"{key}.json").read_text("utf-8"))


def test_add_and_list(invoke, settings):
    result = invoke("add", "Read Ch.3", "--subject", "Bio", "--due", "2030-01-15", "--priority", "urgent")
    assert result.exit_code == 0, result.output

    [record] = stored(settings, "tasks")
    assert record["priority"] == "medium"

    listing = invoke("list", "--sort", "priority")
    assert listing.exit_code == 0, listing.output
    assert "Read Ch.3" in listing.output
    assert "Total: 1" in listing.output


def test_done_accepts_id_prefix(invoke, settings):
    invoke("add", "Essay", "-s", "History", "--due", "2030-02-01")
    task_id = stored(settings, "tasks")[0]["id"]

    result = invoke("done", task_id[:8])

    assert result.exit_code == 0, result.output
    assert stored(settings, "tasks")[0]["completed"] is True


def test_done_unknown_id_reports_not_found(invoke):
    result = invoke("done", "nope")
    assert result.exit_code == 0
    assert "nie istnieje" in result.output


def test_rm_asks_for_confirmation(invoke, settings):
    invoke("add", "Essay", "-s", "History", "--due", "2030-02-01")
    task_id = stored(settings, "tasks")[0]["id"]

    declined = invoke("rm", task_id, input="n\n")
    assert "Cancelled" in declined.output
    assert len(stored(settings, "tasks")) == 1

    accepted = invoke("rm", task_id, input="y\n")
    assert accepted.exit_code == 0, accepted.output
    assert stored(settings, "tasks") == []


def test_rm_unknown_id_is_noop(invoke):
    result = invoke("rm", "nope", "--yes")
    assert result.exit_code == 0
    assert "nothing to delete" in result.output


def test_timeline_and_subjects(invoke):
    invoke("add", "A", "-s", "Math", "--due", "2030-01-02")
    invoke("add", "B", "-s", "Bio", "--due", "2030-01-01")

    timeline = invoke("timeline")
    subjects = invoke("subjects")

    assert timeline.output.index("2030-01-01") < timeline.output.index("2030-01-02")
    assert subjects.output.index("Bio") < subjects.output.index("Math")


def test_goal_add_clamps_and_progress(invoke, settings):
    result = invoke("goal", "add", "Chapters", "--target", "-5", "--current", "10")
    assert result.exit_code == 0, result.output
    [goal] = stored(settings, "goals")
    assert (goal["target"], goal["current"]) == (1, 1)

    invoke("goal", "edit", goal["id"], "--target", "20", "--current", "5")
    progress = invoke("goal", "progress", goal["id"][:8], "30")

    assert progress.exit_code == 0, progress.output
    assert stored(settings, "goals")[0]["current"] == 20
    assert "100%" in progress.output


def test_remind_sweeps_once(invoke, settings):
    invoke("add", "Read Ch.3", "-s", "Bio", "--due", date.today().isoformat())

    first = invoke("remind")
    second = invoke("remind")

    assert "Reminders sent: 1" in first.output
    assert "Reminders sent: 0" in second.output
    assert stored(settings, "tasks")[0]["reminded"] is True


def test_bad_backend_is_rejected(invoke):
    result = invoke("--backend", "mongodb", "list")
    assert result.exit_code != 0


def test_corrupt_data_exits_with_error(invoke, settings):
    (settings.data_dir / "tasks.json").write_text("{broken", encoding="utf-8")
    result = invoke("list")
    assert result.exit_code == 1


def test_bracketed_text_is_printed_literally(invoke, settings):
    added = invoke("add", "Notes [/b] recap", "-s", "[bold]Bio", "--due", "2030-01-01", "-d", "see [link]")
    assert added.exit_code == 0, added.output
    task_id = stored(settings, "tasks")[0]["id"]

    for result in (added, invoke("list"), invoke("show", task_id), invoke("timeline"), invoke("subjects")):
        assert result.exit_code == 0, result.output
        assert result.exception is None
        assert "[/b]" in result.output or "[bold]Bio" in result.output

    assert "see [link]" in invoke("show", task_id).output
