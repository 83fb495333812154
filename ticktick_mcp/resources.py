import logging
from dataclasses import dataclass
from typing import Any

from .errors import ApiError
from .http_connection import TickTickConnection

logger = logging.getLogger(__name__)

SUBTASK_KEYS = {
    "title": "title",
    "status": "status",
    "start_date": "startDate",
    "is_all_day": "isAllDay",
    "sort_order": "sortOrder",
    "time_zone": "timeZone",
    "completed_time": "completedTime",
}


def _subtask_body(item: dict[str, Any]) -> dict[str, Any]:
    # Unknown keys are passed through so camelCase input keeps working
    return {SUBTASK_KEYS.get(key, key): value for key, value in item.items() if value is not None}


@dataclass
class TaskAttributes:
    """Task fields as accepted by the TickTick task endpoints."""

    project_id: str
    title: str | None = None
    content: str | None = None
    desc: str | None = None
    is_all_day: bool | None = None
    start_date: str | None = None
    due_date: str | None = None
    time_zone: str | None = None
    reminders: list[str] | None = None
    repeat_flag: str | None = None
    priority: int | None = None
    sort_order: int | None = None
    items: list[dict[str, Any]] | None = None

    def to_request_body(self) -> dict[str, Any]:
        body = {
            "title": self.title,
            "projectId": self.project_id,
            "content": self.content,
            "desc": self.desc,
            "isAllDay": self.is_all_day,
            "startDate": self.start_date,
            "dueDate": self.due_date,
            "timeZone": self.time_zone,
            "reminders": self.reminders,
            "repeatFlag": self.repeat_flag,
            "priority": self.priority,
            "sortOrder": self.sort_order,
            "items": [_subtask_body(item) for item in self.items] if self.items is not None else None,
        }
        return {key: value for key, value in body.items() if value is not None}


class ProjectResource:
    def __init__(self, connection: TickTickConnection):
        self.connection = connection

    def list(self) -> Any:
        return self.connection.get("project")

    def get(self, project_id: str) -> Any:
        return self.connection.get(f"project/{project_id}")

    def get_data(self, project_id: str) -> Any:
        """Project detail including its tasks and columns."""
        return self.connection.get(f"project/{project_id}/data")

    def create(
        self,
        name: str,
        color: str | None = None,
        sort_order: int | None = None,
        view_mode: str | None = None,
        kind: str | None = None,
    ) -> Any:
        data: dict[str, Any] = {"name": name}
        if color is not None:
            data["color"] = color
        if sort_order is not None:
            data["sortOrder"] = sort_order
        if view_mode is not None:
            data["viewMode"] = view_mode
        if kind is not None:
            data["kind"] = kind
        return self.connection.post_json("project", data)

    def update(
        self,
        project_id: str,
        name: str | None = None,
        color: str | None = None,
        sort_order: int | None = None,
        view_mode: str | None = None,
        kind: str | None = None,
    ) -> Any:
        data: dict[str, Any] = {}
        if name is not None:
            data["name"] = name
        if color is not None:
            data["color"] = color
        if sort_order is not None:
            data["sortOrder"] = sort_order
        if view_mode is not None:
            data["viewMode"] = view_mode
        if kind is not None:
            data["kind"] = kind
        return self.connection.post_json(f"project/{project_id}", data)

    def delete(self, project_id: str) -> Any:
        return self.connection.delete(f"project/{project_id}")


class TaskResource:
    def __init__(self, connection: TickTickConnection, projects: ProjectResource):
        self.connection = connection
        self.projects = projects

    def create(self, attributes: TaskAttributes) -> Any:
        return self.connection.post_json("task", attributes.to_request_body())

    def get(self, project_id: str, task_id: str) -> Any:
        return self.connection.get(f"project/{project_id}/task/{task_id}")

    def update(self, task_id: str, attributes: TaskAttributes) -> Any:
        data = {"id": task_id}
        data.update(attributes.to_request_body())
        return self.connection.post_json(f"task/{task_id}", data)

    def complete(self, project_id: str, task_id: str) -> Any:
        return self.connection.post(f"project/{project_id}/task/{task_id}/complete")

    def delete(self, project_id: str, task_id: str) -> Any:
        return self.connection.delete(f"project/{project_id}/task/{task_id}")

    def list_all(self) -> list[dict[str, Any]]:
        """Collect the tasks of every project into one list.

        A failure to list projects propagates. A project whose detail fetch
        fails with an ``ApiError`` (rate limiting included) is skipped; any
        other exception aborts the whole pass.

        Each task gains a ``project_name`` key. Order follows the project
        listing, then the order of each project's tasks.
        """
        all_tasks: list[dict[str, Any]] = []
        for project in self.projects.list() or []:
            try:
                data = self.projects.get_data(project["id"])
            except ApiError as e:
                logger.warning(f"Skipping project {project.get('id')}: {e}")
                continue

            for task in (data or {}).get("tasks") or []:
                task["project_name"] = project.get("name")
                all_tasks.append(task)

        logger.info(f"Collected {len(all_tasks)} tasks")
        return all_tasks
