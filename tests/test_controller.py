from datetime import date

import pytest

from taskboard.controller import WELCOME_TASKS, TaskListController
from taskboard.errors import ValidationError
from taskboard.repositories import get_repository
from taskboard.service import TaskService
from taskboard.settings import get_settings

from .helpers import StepClock

TODAY = date(2025, 6, 15)


@pytest.fixture()
def controller(repo):
    ctl = TaskListController(TaskService(repo, "alice", clock=StepClock()), today=lambda: TODAY)
    ctl.load()
    return ctl


class TestLifecycle:
    def test_load_reads_store(self, repo):
        TaskService(repo, "alice").create("already there")
        ctl = TaskListController(TaskService(repo, "alice"))
        assert ctl.loaded is False
        assert [t["title"] for t in ctl.load()] == ["already there"]
        assert ctl.loaded is True

    def test_seeds_welcome_tasks_into_empty_store(self, repo):
        ctl = TaskListController(TaskService(repo, "alice", clock=StepClock()), seed_welcome=True)
        tasks = ctl.load()
        assert {t["title"] for t in tasks} == {title for title, _ in WELCOME_TASKS}
        assert sum(t["completed"] for t in tasks) == 1
        # a second load does not seed again
        assert len(ctl.load()) == len(WELCOME_TASKS)

    def test_starts_on_current_month(self, controller):
        assert (controller.year, controller.month) == (2025, 6)


class TestMutationsRefreshViews:
    def test_add_toggle_remove(self, controller):
        task = controller.add("Write", due_date="2025-06-20", time_cost=60)
        assert [t["id"] for t in controller.tasks] == [task["id"]]
        assert controller.calendar[date(2025, 6, 20)].total_minutes == 60

        controller.toggle(task["id"])
        assert controller.tasks[0]["completed"] is True
        assert controller.calendar == {}

        controller.remove(task["id"])
        assert controller.tasks == []

    def test_field_setters(self, controller):
        task = controller.add("Edit me")
        controller.set_priority(task["id"], "high")
        controller.set_due_date(task["id"], "2025-06-02")
        controller.set_time_cost(task["id"], 90)
        [stored] = controller.tasks
        assert (stored["priority"], stored["due_date"], stored["time_cost"]) == ("high", date(2025, 6, 2), 90)
        controller.set_due_date(task["id"], None)
        assert controller.tasks[0]["due_date"] is None

    def test_failed_mutation_leaves_collection_untouched(self, controller):
        controller.add("Keep")
        before = controller.tasks
        with pytest.raises(ValidationError):
            controller.add("   ")
        assert controller.tasks == before

    def test_tasks_property_is_a_snapshot(self, controller):
        controller.add("one")
        snapshot = controller.tasks
        snapshot.clear()
        assert len(controller.tasks) == 1


class TestViewState:
    def test_selecting_a_date_filters_visible(self, controller):
        controller.add("June 2", due_date="2025-06-02")
        controller.add("Undated")
        assert len(controller.visible) == 2
        controller.select_date(date(2025, 6, 2))
        assert [t["title"] for t in controller.visible] == ["June 2"]
        # selecting the same date again clears it
        assert controller.select_date(date(2025, 6, 2)) is None
        assert len(controller.visible) == 2

    def test_clear_selection(self, controller):
        controller.select_date(date(2025, 6, 2))
        controller.clear_selection()
        assert controller.selected_date is None

    def test_sort_and_search(self, controller):
        controller.add("low", priority="low")
        controller.add("high", priority="high")
        controller.add("other")
        controller.set_sort("priority", "desc")
        assert [t["title"] for t in controller.visible] == ["high", "low", "other"]
        controller.set_search("o")
        assert [t["title"] for t in controller.visible] == ["low", "other"]
        controller.set_search("")
        assert len(controller.visible) == 3

    def test_month_navigation(self, controller):
        controller.add("July", due_date="2025-07-04")
        assert controller.calendar == {}
        assert controller.next_month() == (2025, 7)
        assert list(controller.calendar) == [date(2025, 7, 4)]
        controller.previous_month()
        assert controller.previous_month() == (2025, 5)

    def test_grid_flags_today_and_selection(self, controller):
        controller.select_date(date(2025, 6, 3))
        grid = controller.grid()
        assert grid.days[14].is_today is True
        assert grid.days[2].is_selected is True


def test_for_user_uses_configured_repository(monkeypatch):
    monkeypatch.setenv("SEED_WELCOME_TASKS", "true")
    get_repository.cache_clear()
    try:
        ctl = TaskListController.for_user("carol", get_settings())
        assert len(ctl.load()) == len(WELCOME_TASKS)
    finally:
        get_repository.cache_clear()
