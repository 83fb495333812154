import json
import logging
from collections.abc import Callable
from typing import Any

from mcp.server.fastmcp.server import FastMCP

from .client import TickTickClient
from .errors import TickTickError, describe_error
from .http_connection import API_BASE

logger = logging.getLogger(__name__)


def run_tool(
    name: str,
    action: Callable[[TickTickClient], Any],
    access_token: str | None,
    base_url: str = API_BASE,
) -> str:
    """Run one tool call against a fresh client and render the outcome as JSON text.

    Args:
        name: Tool name, used for logging
        action: Receives the client and returns the payload to serialize
        access_token: Token injected at server construction (may be missing)
        base_url: TickTick API root

    Returns:
        The JSON payload, or ``{"error": ...}`` with a human-readable message
    """
    logger.info(f"=== {name} called ===")
    try:
        client = TickTickClient(access_token, base_url=base_url)
        result = action(client)
    except Exception as e:
        # Classified errors are expected; anything else gets a traceback
        logger.error(f"Exception in {name}: {e}", exc_info=not isinstance(e, TickTickError))
        return json.dumps({"error": describe_error(e)})

    return json.dumps(result, ensure_ascii=False)


def create_mcp_server(
    access_token: str | None,
    base_url: str = API_BASE,
    host: str = "127.0.0.1",
    port: int = 8001,
) -> FastMCP:
    """
    Create the TickTick MCP server.

    The token is captured here and handed to every tool call. A missing token
    does not prevent startup; each tool then reports authentication missing.
    """
    app = FastMCP(
        name="TickTick MCP Server",
        instructions="Manage TickTick projects and tasks",
        host=host,
        port=port,
    )

    def call(name: str, action: Callable[[TickTickClient], Any]) -> str:
        return run_tool(name, action, access_token, base_url=base_url)

    @app.tool()
    async def list_projects() -> str:
        """List all projects from TickTick."""
        return call("list_projects", lambda client: client.list_projects())

    @app.tool()
    async def get_project(project_id: str) -> str:
        """
        Get a TickTick project by ID.

        Args:
            project_id: The ID of the project to retrieve
        """
        return call("get_project", lambda client: client.get_project(project_id))

    @app.tool()
    async def get_project_data(project_id: str) -> str:
        """
        Get project data including tasks and columns from TickTick.

        Args:
            project_id: The ID of the project to retrieve data for
        """
        return call("get_project_data", lambda client: client.get_project_data(project_id))

    @app.tool()
    async def create_project(
        name: str,
        color: str | None = None,
        sort_order: int | None = None,
        view_mode: str | None = None,
        kind: str | None = None,
    ) -> str:
        """
        Create a new TickTick project.

        Args:
            name: Name of the project (required)
            color: Color of the project, e.g. "#F18181"
            sort_order: Sort order value of the project
            view_mode: View mode - one of "list", "kanban", "timeline"
            kind: Project kind - "TASK" or "NOTE"
        """
        return call(
            "create_project",
            lambda client: client.create_project(
                name, color=color, sort_order=sort_order, view_mode=view_mode, kind=kind
            ),
        )

    @app.tool()
    async def update_project(
        project_id: str,
        name: str | None = None,
        color: str | None = None,
        sort_order: int | None = None,
        view_mode: str | None = None,
        kind: str | None = None,
    ) -> str:
        """
        Update an existing TickTick project's metadata.

        Args:
            project_id: The ID of the project to update (required)
            name: New name of the project
            color: New color of the project, e.g. "#F18181"
            sort_order: Sort order value of the project
            view_mode: View mode - one of "list", "kanban", "timeline"
            kind: Project kind - "TASK" or "NOTE"
        """
        return call(
            "update_project",
            lambda client: client.update_project(
                project_id,
                name=name,
                color=color,
                sort_order=sort_order,
                view_mode=view_mode,
                kind=kind,
            ),
        )

    @app.tool()
    async def delete_project(project_id: str) -> str:
        """
        Delete a TickTick project.

        Args:
            project_id: The ID of the project to delete
        """

        def action(client: TickTickClient) -> dict[str, Any]:
            client.delete_project(project_id)
            return {"id": project_id, "status": "deleted"}

        return call("delete_project", action)

    @app.tool()
    async def create_task(
        title: str,
        project_id: str,
        content: str | None = None,
        desc: str | None = None,
        is_all_day: bool | None = None,
        start_date: str | None = None,
        due_date: str | None = None,
        time_zone: str | None = None,
        reminders: list[str] | None = None,
        repeat_flag: str | None = None,
        priority: int | None = None,
        sort_order: int | None = None,
        items: list[dict[str, Any]] | None = None,
    ) -> str:
        """
        Create a new task in TickTick.

        Args:
            title: Task title (required)
            project_id: Project ID to add the task to (required)
            content: Task content
            desc: Description of checklist
            is_all_day: All day task
            start_date: Start date in "yyyy-MM-dd'T'HH:mm:ssZ" format, e.g. "2019-11-13T03:00:00+0000"
            due_date: Due date in "yyyy-MM-dd'T'HH:mm:ssZ" format
            time_zone: Time zone, e.g. "America/Los_Angeles"
            reminders: List of reminders, e.g. ["TRIGGER:P0DT9H0M0S"]
            repeat_flag: Recurring rule, e.g. "RRULE:FREQ=DAILY;INTERVAL=1"
            priority: Priority (0: none, 1: low, 3: medium, 5: high)
            sort_order: Sort order of the task
            items: Subtasks, objects with title, start_date, is_all_day, sort_order, time_zone, status
        """
        return call(
            "create_task",
            lambda client: client.create_task(
                title,
                project_id,
                content=content,
                desc=desc,
                is_all_day=is_all_day,
                start_date=start_date,
                due_date=due_date,
                time_zone=time_zone,
                reminders=reminders,
                repeat_flag=repeat_flag,
                priority=priority,
                sort_order=sort_order,
                items=items,
            ),
        )

    @app.tool()
    async def get_task(project_id: str, task_id: str) -> str:
        """
        Get a single task.

        Args:
            project_id: Project ID the task belongs to (required)
            task_id: Task ID (required)
        """
        return call("get_task", lambda client: client.get_task(project_id, task_id))

    @app.tool()
    async def update_task(
        task_id: str,
        project_id: str,
        title: str | None = None,
        content: str | None = None,
        desc: str | None = None,
        is_all_day: bool | None = None,
        start_date: str | None = None,
        due_date: str | None = None,
        time_zone: str | None = None,
        reminders: list[str] | None = None,
        repeat_flag: str | None = None,
        priority: int | None = None,
        sort_order: int | None = None,
        items: list[dict[str, Any]] | None = None,
    ) -> str:
        """
        Update an existing task in TickTick. Only the provided fields change.

        Args:
            task_id: Task ID to update (required)
            project_id: Project ID the task belongs to (required)
            title: Task title
            content: Task content
            desc: Description of checklist
            is_all_day: All day task
            start_date: Start date in "yyyy-MM-dd'T'HH:mm:ssZ" format
            due_date: Due date in "yyyy-MM-dd'T'HH:mm:ssZ" format
            time_zone: Time zone, e.g. "America/Los_Angeles"
            reminders: List of reminders, e.g. ["TRIGGER:P0DT9H0M0S"]
            repeat_flag: Recurring rule, e.g. "RRULE:FREQ=DAILY;INTERVAL=1"
            priority: Priority (0: none, 1: low, 3: medium, 5: high)
            sort_order: Sort order of the task
            items: List of subtasks
        """
        return call(
            "update_task",
            lambda client: client.update_task(
                task_id,
                project_id,
                title=title,
                content=content,
                desc=desc,
                is_all_day=is_all_day,
                start_date=start_date,
                due_date=due_date,
                time_zone=time_zone,
                reminders=reminders,
                repeat_flag=repeat_flag,
                priority=priority,
                sort_order=sort_order,
                items=items,
            ),
        )

    @app.tool()
    async def complete_task(project_id: str, task_id: str) -> str:
        """
        Mark a task as complete in TickTick.

        Args:
            project_id: Project ID the task belongs to (required)
            task_id: Task ID to complete (required)
        """

        def action(client: TickTickClient) -> dict[str, Any]:
            client.complete_task(project_id, task_id)
            return {"id": task_id, "status": "completed"}

        return call("complete_task", action)

    @app.tool()
    async def delete_task(project_id: str, task_id: str) -> str:
        """
        Delete a task in TickTick.

        Args:
            project_id: Project ID the task belongs to (required)
            task_id: Task ID to delete (required)
        """

        def action(client: TickTickClient) -> dict[str, Any]:
            client.delete_task(project_id, task_id)
            return {"id": task_id, "status": "deleted"}

        return call("delete_task", action)

    @app.tool()
    async def list_all_tasks() -> str:
        """
        List all tasks across all projects from TickTick.

        Each task carries a "project_name" field. Projects whose data cannot
        be fetched are left out.
        """
        return call("list_all_tasks", lambda client: client.list_all_tasks())

    return app
