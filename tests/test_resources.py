"""Unit tests for project/task resources and task aggregation."""

from typing import Any
from unittest.mock import Mock

import pytest

from ticktick_mcp.errors import ApiError, RateLimitError
from ticktick_mcp.resources import ProjectResource, TaskAttributes, TaskResource


class TestTaskAttributes:
    def test_minimal_body(self) -> None:
        attrs = TaskAttributes(project_id="proj_001", title="Buy milk")
        assert attrs.to_request_body() == {"title": "Buy milk", "projectId": "proj_001"}

    def test_converts_keys_to_camel_case(self) -> None:
        attrs = TaskAttributes(
            project_id="proj_001",
            title="Meeting",
            is_all_day=False,
            start_date="2026-02-20T09:00:00+0000",
            due_date="2026-02-20T10:00:00+0000",
            time_zone="America/Los_Angeles",
            repeat_flag="RRULE:FREQ=DAILY;INTERVAL=1",
            sort_order=0,
        )
        body = attrs.to_request_body()

        # False and 0 are real values and must survive
        assert body["isAllDay"] is False
        assert body["sortOrder"] == 0
        assert body["startDate"] == "2026-02-20T09:00:00+0000"
        assert body["dueDate"] == "2026-02-20T10:00:00+0000"
        assert body["timeZone"] == "America/Los_Angeles"
        assert body["repeatFlag"] == "RRULE:FREQ=DAILY;INTERVAL=1"

    def test_omits_unset_fields(self) -> None:
        body = TaskAttributes(project_id="proj_001", title="Task", content=None).to_request_body()
        assert "content" not in body
        assert "desc" not in body
        assert "items" not in body

    def test_subtask_items_are_converted(self) -> None:
        attrs = TaskAttributes(
            project_id="proj_001",
            title="Trip",
            items=[{"title": "Pack", "is_all_day": True, "sort_order": 1, "status": None}],
        )
        assert attrs.to_request_body()["items"] == [
            {"title": "Pack", "isAllDay": True, "sortOrder": 1}
        ]

    def test_title_optional_for_updates(self) -> None:
        body = TaskAttributes(project_id="proj_001", priority=5).to_request_body()
        assert body == {"projectId": "proj_001", "priority": 5}


class TestProjectResource:
    @pytest.fixture
    def connection(self) -> Mock:
        return Mock()

    def test_list(self, connection: Mock) -> None:
        connection.get.return_value = [{"id": "p1"}]
        assert ProjectResource(connection).list() == [{"id": "p1"}]
        connection.get.assert_called_once_with("project")

    def test_get_and_get_data(self, connection: Mock) -> None:
        projects = ProjectResource(connection)
        projects.get("p1")
        projects.get_data("p1")
        assert [c.args[0] for c in connection.get.call_args_list] == ["project/p1", "project/p1/data"]

    def test_create_with_options(self, connection: Mock) -> None:
        ProjectResource(connection).create("Work", color="#F18181", view_mode="kanban", sort_order=0)
        connection.post_json.assert_called_once_with(
            "project", {"name": "Work", "color": "#F18181", "sortOrder": 0, "viewMode": "kanban"}
        )

    def test_update_sends_only_provided_fields(self, connection: Mock) -> None:
        ProjectResource(connection).update("p1", name="Renamed")
        connection.post_json.assert_called_once_with("project/p1", {"name": "Renamed"})

    def test_delete(self, connection: Mock) -> None:
        connection.delete.return_value = None
        assert ProjectResource(connection).delete("p1") is None
        connection.delete.assert_called_once_with("project/p1")


class TestTaskResourceEndpoints:
    @pytest.fixture
    def connection(self) -> Mock:
        return Mock()

    @pytest.fixture
    def tasks(self, connection: Mock) -> TaskResource:
        return TaskResource(connection, ProjectResource(connection))

    def test_create(self, tasks: TaskResource, connection: Mock) -> None:
        tasks.create(TaskAttributes(project_id="p1", title="Buy milk"))
        connection.post_json.assert_called_once_with("task", {"title": "Buy milk", "projectId": "p1"})

    def test_update_includes_task_id(self, tasks: TaskResource, connection: Mock) -> None:
        tasks.update("t1", TaskAttributes(project_id="p1", title="Updated"))
        connection.post_json.assert_called_once_with(
            "task/t1", {"id": "t1", "title": "Updated", "projectId": "p1"}
        )

    def test_get(self, tasks: TaskResource, connection: Mock) -> None:
        tasks.get("p1", "t1")
        connection.get.assert_called_once_with("project/p1/task/t1")

    def test_complete(self, tasks: TaskResource, connection: Mock) -> None:
        tasks.complete("p1", "t1")
        connection.post.assert_called_once_with("project/p1/task/t1/complete")

    def test_delete(self, tasks: TaskResource, connection: Mock) -> None:
        tasks.delete("p1", "t1")
        connection.delete.assert_called_once_with("project/p1/task/t1")


class TestListAll:
    """Fan-out over projects with per-project failure tolerance."""

    PROJECTS = [
        {"id": "p1", "name": "Work"},
        {"id": "p2", "name": "X"},
        {"id": "p3", "name": "Personal"},
    ]

    def make_tasks(self, project_data: dict[str, Any]) -> TaskResource:
        projects = Mock(spec=ProjectResource)
        projects.list.return_value = [dict(p) for p in self.PROJECTS]

        def get_data(project_id: str) -> Any:
            outcome = project_data[project_id]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        projects.get_data.side_effect = get_data
        return TaskResource(Mock(), projects)

    def test_skips_project_with_api_error(self) -> None:
        tasks = self.make_tasks(
            {
                "p1": {"tasks": [{"id": "t1", "title": "Fix bug"}]},
                "p2": ApiError(status=500, body="error"),
                "p3": {"tasks": [{"id": "t3", "title": "Buy groceries"}]},
            }
        )

        assert tasks.list_all() == [
            {"id": "t1", "title": "Fix bug", "project_name": "Work"},
            {"id": "t3", "title": "Buy groceries", "project_name": "Personal"},
        ]

    def test_skips_rate_limited_project(self) -> None:
        tasks = self.make_tasks(
            {
                "p1": RateLimitError(status=500, body='{"errorCode":"exceed_query_limit"}'),
                "p2": {"tasks": [{"id": "t2"}]},
                "p3": {"tasks": []},
            }
        )

        assert tasks.list_all() == [{"id": "t2", "project_name": "X"}]

    def test_preserves_project_then_task_order(self) -> None:
        tasks = self.make_tasks(
            {
                "p1": {"tasks": [{"id": "a"}, {"id": "b"}]},
                "p2": {"tasks": [{"id": "c"}]},
                "p3": {"tasks": [{"id": "d"}, {"id": "e"}]},
            }
        )

        assert [t["id"] for t in tasks.list_all()] == ["a", "b", "c", "d", "e"]

    def test_missing_tasks_field_counts_as_empty(self) -> None:
        tasks = self.make_tasks(
            {
                "p1": {"columns": []},
                "p2": {"tasks": None},
                "p3": {"tasks": [{"id": "t3"}]},
            }
        )

        assert tasks.list_all() == [{"id": "t3", "project_name": "Personal"}]

    def test_project_listing_failure_propagates(self) -> None:
        projects = Mock(spec=ProjectResource)
        projects.list.side_effect = ApiError(status=401, body="Unauthorized")
        tasks = TaskResource(Mock(), projects)

        with pytest.raises(ApiError):
            tasks.list_all()

        projects.get_data.assert_not_called()

    def test_unexpected_error_aborts(self) -> None:
        tasks = self.make_tasks(
            {
                "p1": {"tasks": [{"id": "t1"}]},
                "p2": KeyError("boom"),
                "p3": {"tasks": [{"id": "t3"}]},
            }
        )

        with pytest.raises(KeyError):
            tasks.list_all()

    def test_empty_project_list(self) -> None:
        projects = Mock(spec=ProjectResource)
        projects.list.return_value = []
        assert TaskResource(Mock(), projects).list_all() == []
