from typing import Any

import requests

from .http_connection import API_BASE, TickTickConnection
from .resources import ProjectResource, TaskAttributes, TaskResource


class TickTickClient:
    """TickTick Open API client.

    The access token is passed in explicitly; this class never reads the
    environment. Construction fails with ``AuthenticationError`` when the
    token is empty, before any request is made.
    """

    def __init__(
        self,
        token: str | None,
        base_url: str = API_BASE,
        session: requests.Session | None = None,
    ):
        self.connection = TickTickConnection(token, base_url=base_url, session=session)
        self.projects = ProjectResource(self.connection)
        self.tasks = TaskResource(self.connection, self.projects)

    def list_projects(self) -> Any:
        return self.projects.list()

    def get_project(self, project_id: str) -> Any:
        return self.projects.get(project_id)

    def get_project_data(self, project_id: str) -> Any:
        return self.projects.get_data(project_id)

    def create_project(
        self,
        name: str,
        color: str | None = None,
        sort_order: int | None = None,
        view_mode: str | None = None,
        kind: str | None = None,
    ) -> Any:
        return self.projects.create(
            name, color=color, sort_order=sort_order, view_mode=view_mode, kind=kind
        )

    def update_project(
        self,
        project_id: str,
        name: str | None = None,
        color: str | None = None,
        sort_order: int | None = None,
        view_mode: str | None = None,
        kind: str | None = None,
    ) -> Any:
        return self.projects.update(
            project_id, name=name, color=color, sort_order=sort_order, view_mode=view_mode, kind=kind
        )

    def delete_project(self, project_id: str) -> None:
        self.projects.delete(project_id)

    def create_task(self, title: str, project_id: str, **fields: Any) -> Any:
        return self.tasks.create(TaskAttributes(project_id=project_id, title=title, **fields))

    def get_task(self, project_id: str, task_id: str) -> Any:
        return self.tasks.get(project_id, task_id)

    def update_task(self, task_id: str, project_id: str, **fields: Any) -> Any:
        return self.tasks.update(task_id, TaskAttributes(project_id=project_id, **fields))

    def complete_task(self, project_id: str, task_id: str) -> None:
        self.tasks.complete(project_id, task_id)

    def delete_task(self, project_id: str, task_id: str) -> None:
        self.tasks.delete(project_id, task_id)

    def list_all_tasks(self) -> list[dict[str, Any]]:
        return self.tasks.list_all()
