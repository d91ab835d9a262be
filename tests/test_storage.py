import json
import os

import pytest

from studyplan.adapters.jsonfile.storage import JsonFileStorage
from studyplan.adapters.memory.storage import InMemoryStorage
from studyplan.adapters.sql.storage import SqlStorage
from studyplan.domain.errors import StorageFault
from studyplan.services.goal_service import GoalService
from studyplan.services.task_service import TaskService


@pytest.fixture
def json_storage(tmp_path):
    """Storage over a fresh temporary directory."""
    return JsonFileStorage(tmp_path / "data")


@pytest.fixture
def sql_storage(tmp_path):
    """Storage over a fresh temporary database."""
    storage = SqlStorage(tmp_path / "studyplan.db")
    yield storage
    storage.close()


@pytest.fixture(params=["memory", "json", "sql"])
def any_storage(request, tmp_path):
    match request.param:
        case "memory":
            yield InMemoryStorage()
        case "json":
            yield JsonFileStorage(tmp_path / "data")
        case "sql":
            storage = SqlStorage(tmp_path / "studyplan.db")
            yield storage
            storage.close()


def test_missing_key_returns_none(any_storage):
    assert any_storage.get("tasks") is None


def test_set_then_get_overwrites(any_storage):
    any_storage.set("tasks", "[1]")
    any_storage.set("tasks", "[1, 2]")
    any_storage.set("goals", "[]")

    assert any_storage.get("tasks") == "[1, 2]"
    assert any_storage.get("goals") == "[]"


def test_json_storage_writes_one_file_per_key(json_storage):
    json_storage.set("tasks", '[{"id": "1"}]')

    files = sorted(os.listdir(json_storage.directory))
    assert files == ["tasks.json"]
    assert json.loads((json_storage.directory / "tasks.json").read_text("utf-8")) == [{"id": "1"}]


def test_json_storage_survives_new_instance(tmp_path):
    JsonFileStorage(tmp_path).set("goals", "[]")
    assert JsonFileStorage(tmp_path).get("goals") == "[]"


def test_json_storage_rejects_path_like_keys(json_storage):
    with pytest.raises(StorageFault):
        json_storage.set("../escape", "[]")


def test_json_storage_maps_os_errors(tmp_path):
    storage = JsonFileStorage(tmp_path / "data")
    (storage.directory / "tasks.json").mkdir()

    with pytest.raises(StorageFault):
        storage.get("tasks")


def test_sql_storage_survives_new_instance(tmp_path):
    path = tmp_path / "studyplan.db"
    first = SqlStorage(path)
    first.set("tasks", "[]")
    first.close()

    second = SqlStorage(path)
    assert second.get("tasks") == "[]"
    second.close()


def test_services_round_trip_through_storage(any_storage, ids, clock):
    # Arrange
    tasks = TaskService(any_storage, ids, clock)
    goals = GoalService(any_storage, ids, clock)
    task = tasks.add_task("Read Ch.3", "Bio", "2025-03-11", priority="high")
    goal = goals.add_goal("Chapters", 20, 5, deadline="2025-06-01")

    # Act
    tasks_again = TaskService(any_storage, ids, clock)
    goals_again = GoalService(any_storage, ids, clock)

    # Assert
    assert tasks_again.list_tasks() == [task]
    assert goals_again.list_goals() == [goal]
