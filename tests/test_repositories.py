import json
import sqlite3
from datetime import date

import pytest

from taskboard import local_store
from taskboard.db import SQLiteRepository
from taskboard.errors import StorageError
from taskboard.local_store import STORAGE_KEY, JsonFileRepository
from taskboard.repositories import InMemoryRepository

from .helpers import make_task


@pytest.fixture(params=["memory", "sqlite", "json"])
def any_repo(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "data" / "tasks.db"))
    if request.param == "json":
        return JsonFileRepository(str(tmp_path / "data" / "tasks.json"))
    return InMemoryRepository()


class TestRepositoryContract:
    def test_insert_then_find_by_id(self, any_repo):
        task = make_task("Report", id="t1", due_date="2025-06-01", priority="high", time_cost=90)
        any_repo.insert(task)
        assert any_repo.find_by_id("t1") == task
        assert any_repo.find_by_id("nope") is None

    def test_find_all_for_user_is_scoped_and_newest_first(self, any_repo):
        any_repo.insert(make_task("old", id="a", created_offset=0))
        any_repo.insert(make_task("new", id="b", created_offset=5))
        any_repo.insert(make_task("bob", id="c", user_id="bob"))
        assert [t["id"] for t in any_repo.find_all_for_user("alice")] == ["b", "a"]
        assert [t["id"] for t in any_repo.find_all_for_user("bob")] == ["c"]
        assert any_repo.find_all_for_user("nobody") == []

    def test_update_fields_sets_and_clears(self, any_repo):
        any_repo.insert(make_task("x", id="t1", due_date="2025-06-01", priority="low", time_cost=15))
        updated = any_repo.update_fields("t1", {"completed": True, "priority": None, "time_cost": 60})
        assert updated["completed"] is True
        assert updated["priority"] is None
        assert updated["time_cost"] == 60
        assert updated["due_date"] == date(2025, 6, 1)
        assert any_repo.find_by_id("t1") == updated

    def test_update_fields_ignores_immutable_keys(self, any_repo):
        original = make_task("x", id="t1")
        any_repo.insert(original)
        updated = any_repo.update_fields("t1", {"user_id": "mallory", "id": "t2", "title": "y"})
        assert updated["user_id"] == "alice"
        assert updated["id"] == "t1"
        assert updated["created_at"] == original["created_at"]
        assert updated["title"] == "y"

    def test_update_missing_returns_none(self, any_repo):
        assert any_repo.update_fields("nope", {"title": "x"}) is None

    def test_delete(self, any_repo):
        any_repo.insert(make_task("x", id="t1"))
        assert any_repo.delete("t1") is True
        assert any_repo.delete("t1") is False
        assert any_repo.find_by_id("t1") is None

    def test_returned_copies_are_detached(self, any_repo):
        any_repo.insert(make_task("x", id="t1"))
        fetched = any_repo.find_by_id("t1")
        fetched["title"] = "tampered"
        assert any_repo.find_by_id("t1")["title"] == "x"


class TestSQLite:
    def test_data_survives_reopen(self, tmp_path):
        path = str(tmp_path / "tasks.db")
        SQLiteRepository(path).insert(make_task("persist", id="p1", time_cost=30))
        assert SQLiteRepository(path).find_by_id("p1")["title"] == "persist"

    def test_sqlite_errors_become_storage_errors(self, tmp_path):
        path = str(tmp_path / "tasks.db")
        repo = SQLiteRepository(path)
        with sqlite3.connect(path) as conn:
            conn.execute("DROP TABLE tasks")
        with pytest.raises(StorageError):
            repo.find_all_for_user("alice")


class TestJsonFile:
    def test_document_layout(self, tmp_path):
        path = tmp_path / "tasks.json"
        JsonFileRepository(str(path)).insert(make_task("x", id="t1", due_date="2025-06-01"))
        document = json.loads(path.read_text(encoding="utf-8"))
        [raw] = document[STORAGE_KEY]
        assert raw["id"] == "t1"
        assert raw["userId"] == "alice"
        assert raw["dueDate"] == "2025-06-01"
        assert raw["timeCost"] is None

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileRepository(str(tmp_path / "absent.json")).find_all_for_user("alice") == []

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileRepository(str(path)).find_all_for_user("alice")

    def test_malformed_record_raises_storage_error(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps({STORAGE_KEY: [{"title": "no id"}]}), encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileRepository(str(path)).find_by_id("x")

    def test_failed_write_leaves_no_temp_files(self, tmp_path, monkeypatch):
        repo = JsonFileRepository(str(tmp_path / "tasks.json"))
        repo.insert(make_task("kept", id="t1"))

        def disk_full(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(local_store.json, "dump", disk_full)
        with pytest.raises(StorageError):
            repo.insert(make_task("lost", id="t2"))
        monkeypatch.undo()

        assert sorted(p.name for p in tmp_path.iterdir()) == ["tasks.json"]
        assert [t["id"] for t in repo.find_all_for_user("alice")] == ["t1"]

    @pytest.mark.parametrize(
        "field,value",
        [
            ("completed", "false"),
            ("completed", 0),
            ("timeCost", "90"),
            ("timeCost", 90.5),
            ("timeCost", True),
        ],
    )
    def test_mistyped_fields_raise_storage_error(self, tmp_path, field, value):
        path = tmp_path / "tasks.json"
        JsonFileRepository(str(path)).insert(make_task("x", id="t1", due_date="2025-06-01"))
        document = json.loads(path.read_text(encoding="utf-8"))
        document[STORAGE_KEY][0][field] = value
        path.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileRepository(str(path)).find_all_for_user("alice")
