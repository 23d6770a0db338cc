"""Fixed smoke-test scenario chaining IDs from earlier responses."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter, ValidationError

from api_smoke.models.resources import Resource
from api_smoke.runner import EndpointRunner

log = logging.getLogger(__name__)

SEARCH_QUERY = "test"
FEED_LIMIT = 20
NOTIFICATION_PAGE_SIZE = 20

_resource_list = TypeAdapter(list[Resource])


_TASK_CALLS: Sequence[tuple[str, str, str]] = (
    ("Get Task Details", "", "Get specific task details"),
    ("Get Visible Assignee", "/visible-assignee", "Get resolved assignee"),
    ("Get Task Assignments", "/assignments", "Get assignment chain"),
    ("Get Task Activity", "/activity", "Get task activity timeline"),
)

_GROUP_CALLS: Sequence[tuple[str, str, str]] = (
    ("Get Group Details", "", "Get specific group"),
    ("Get Group Messages", "/messages", "List all messages in group"),
    ("Get Group Assets", "/assets", "List all assets in group"),
)

_FEED_CALLS: Sequence[tuple[str, str, str]] = (
    ("Get Assigned To Me Feed", "assigned-to-me", "Tasks assigned to current user"),
    ("Get Assigned By Me Feed", "assigned-by-me", "Tasks created by current user"),
    ("Get Watching Feed", "watching", "Tasks user is watching"),
    ("Get Recent Feed", "recent", "Recently viewed tasks"),
    (
        "Search Tasks Feed",
        f"search?q={SEARCH_QUERY}",
        "Search tasks across all projects",
    ),
)


def first_id(body: Any) -> str | None:
    """Return the ``id`` of the first item of a list response.

    None when the body is not a list, is empty, or its first item carries
    no ``id``: the dependent stage is then skipped.
    """
    if not isinstance(body, list) or not body:
        return None
    try:
        items = _resource_list.validate_python(body[:1])
    except ValidationError:
        log.warning("First item has no usable id, skipping dependent calls")
        return None
    return str(items[0].id)


def first_field_id(body: Any, field: str) -> str | None:
    """Return the ``id`` of the first item of a list nested under ``field``.

    Used for keyed listings such as ``{"blueprints": [...]}``.
    """
    if not isinstance(body, dict):
        return None
    return first_id(body.get(field))


def first_blueprint_id(body: Any) -> str | None:
    """Return the ``id`` of the first blueprint of a blueprint listing."""
    return first_field_id(body, "blueprints")


def resource_id(body: Any) -> str | None:
    """Return the ``id`` of a single-object response, e.g. a created entity."""
    if not isinstance(body, dict):
        return None
    return first_id([body])


def log_section(title: str) -> None:
    log.info("=" * 80)
    log.info(title)
    log.info("-" * 80)


@dataclass(frozen=True, kw_only=True)
class ScenarioDriver:
    """Runs the endpoint stages strictly one after another."""

    runner: EndpointRunner

    async def run(self) -> None:
        """Run every stage in order.

        Project-scoped stages only run when at least one project is visible.
        """
        await self.check_identity()
        await self.check_users()

        project_id = await self.check_projects()
        if project_id is not None:
            await self.check_project(project_id)
            await self.check_tasks(project_id)
            await self.check_blueprints(project_id)
            await self.check_project_groups(project_id)

        await self.check_feeds()
        await self.check_notifications()
        await self.check_user_groups()

    async def check_identity(self) -> None:
        log_section("AUTH SERVICE")
        await self.runner.invoke(
            "Get Current User",
            "GET",
            "/auth/me",
            description="Get authenticated user details",
        )

    async def check_users(self) -> None:
        log_section("USER SERVICE")
        await self.runner.invoke(
            "Get Me (User Service)",
            "GET",
            "/auth/me",
            description="Alternative user endpoint",
        )
        await self.runner.invoke(
            "Search Users",
            "GET",
            f"/users/search?query={SEARCH_QUERY}",
            description="Search for users by query",
        )
        await self.runner.invoke(
            "Get Avatar Download URL",
            "GET",
            "/users/me/avatar/download",
            description="Get current user avatar URL",
        )

    async def check_projects(self) -> str | None:
        """List projects and return the first project's id, if any."""
        log_section("PROJECT SERVICE")
        projects = await self.runner.invoke(
            "Get Projects",
            "GET",
            "/projects",
            description="List all accessible projects",
        )
        project_id = first_id(projects)
        if project_id is not None:
            log.info("Using project ID: %s for subsequent tests", project_id)
        return project_id

    async def check_project(self, project_id: str) -> None:
        await self.runner.invoke(
            "Get Project Details",
            "GET",
            f"/projects/{project_id}",
            description="Get specific project details",
        )
        await self.runner.invoke(
            "Get Project Members",
            "GET",
            f"/projects/{project_id}/members",
            description="List project members",
        )

    async def check_tasks(self, project_id: str) -> None:
        log_section("TASK SERVICE")
        tasks = await self.runner.invoke(
            "Get Tasks",
            "GET",
            f"/projects/{project_id}/tasks",
            description="List all tasks in project",
        )
        task_id = first_id(tasks)
        if task_id is None:
            return
        log.info("Using task ID: %s for subsequent tests", task_id)

        task_path = f"/projects/{project_id}/tasks/{task_id}"
        for name, suffix, description in _TASK_CALLS:
            await self.runner.invoke(
                name, "GET", f"{task_path}{suffix}", description=description
            )

        await self.check_comments(task_path)

    async def check_comments(self, task_path: str) -> None:
        log_section("COMMENT SERVICE")
        comments = await self.runner.invoke(
            "Get Comments",
            "GET",
            f"{task_path}/comments",
            description="List all comments on task",
        )
        comment_id = first_id(comments)
        if comment_id is None:
            return
        log.info("Using comment ID: %s for subsequent tests", comment_id)

        await self.runner.invoke(
            "Get Comment Details",
            "GET",
            f"{task_path}/comments/{comment_id}",
            description="Get specific comment",
        )
        await self.runner.invoke(
            "Get Comment Thread",
            "GET",
            f"{task_path}/comments/threads/{comment_id}",
            description="Get comment with nested replies",
        )
        await self.runner.invoke(
            "Get Comment Replies",
            "GET",
            f"{task_path}/comments/{comment_id}/replies",
            description="Get direct replies to comment",
        )

    async def check_blueprints(self, project_id: str) -> None:
        log_section("BLUEPRINT SERVICE")
        listing = await self.runner.invoke(
            "List Blueprints",
            "GET",
            f"/projects/{project_id}/blueprints",
            description="List all blueprints in project",
        )
        blueprint_id = first_blueprint_id(listing)
        if blueprint_id is None:
            return
        log.info("Using blueprint ID: %s for subsequent tests", blueprint_id)

        await self.runner.invoke(
            "Get Blueprint Details",
            "GET",
            f"/projects/{project_id}/blueprints/{blueprint_id}",
            description="Get specific blueprint",
        )
        await self.runner.invoke(
            "Get Blueprint Download URL",
            "GET",
            f"/blueprints/{blueprint_id}/download",
            description="Get signed download URL",
        )
        await self.runner.invoke(
            "List Blueprint Markers",
            "GET",
            f"/blueprints/{blueprint_id}/markers",
            description="List all markers on blueprint",
        )

    async def check_project_groups(self, project_id: str) -> None:
        log_section("GROUP SERVICE")
        groups = await self.runner.invoke(
            "Get Project Groups",
            "GET",
            f"/projects/{project_id}/groups",
            description="List all groups in project",
        )
        group_id = first_id(groups)
        if group_id is None:
            return
        log.info("Using group ID: %s for subsequent tests", group_id)

        for name, suffix, description in _GROUP_CALLS:
            await self.runner.invoke(
                name, "GET", f"/groups/{group_id}{suffix}", description=description
            )

    async def check_feeds(self) -> None:
        log_section("FEED SERVICE")
        for name, feed, description in _FEED_CALLS:
            separator = "&" if "?" in feed else "?"
            await self.runner.invoke(
                name,
                "GET",
                f"/feeds/{feed}{separator}limit={FEED_LIMIT}",
                description=description,
            )

    async def check_notifications(self) -> None:
        log_section("NOTIFICATION SERVICE")
        await self.runner.invoke(
            "Get Notifications",
            "GET",
            f"/notifications?page=0&size={NOTIFICATION_PAGE_SIZE}",
            description="List notifications with pagination",
        )
        await self.runner.invoke(
            "Get Unread Count",
            "GET",
            "/notifications/unread-count",
            description="Get count of unread notifications",
        )

    async def check_user_groups(self) -> None:
        log_section("GROUP SERVICE (USER LEVEL)")
        await self.runner.invoke(
            "Get User Groups",
            "GET",
            "/groups/user",
            description="List all groups for current user",
        )
