"""Write-path scenario: creates its own test data, chains on it, cleans up."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from api_smoke.models.result import CreatedResources
from api_smoke.runner import EndpointRunner
from api_smoke.scenario import (
    FEED_LIMIT,
    NOTIFICATION_PAGE_SIZE,
    SEARCH_QUERY,
    first_field_id,
    first_id,
    log_section,
    resource_id,
)

log = logging.getLogger(__name__)

CURSOR_PAGE_LIMIT = 5
BLUEPRINT_PAGE_LIMIT = 10
INVALID_INVITE_TOKEN = "invalid-token-test"

_TASK_READS: Sequence[tuple[str, str, str]] = (
    ("Get Task Activity", "/activity", "Get task activity timeline"),
    ("Get Visible Assignee", "/visible-assignee", "Get resolved assignee"),
    ("Get Task Assignments", "/assignments", "Get assignment chain"),
)

_FEED_CALLS: Sequence[tuple[str, str, str]] = (
    (
        "Assigned To Me Feed",
        f"assigned-to-me?limit={FEED_LIMIT}",
        "Tasks assigned to me",
    ),
    (
        "Assigned To Me with Cursor",
        f"assigned-to-me?limit={CURSOR_PAGE_LIMIT}",
        "Tasks assigned to me with cursor pagination",
    ),
    (
        "Assigned By Me Feed",
        f"assigned-by-me?limit={FEED_LIMIT}",
        "Tasks created by me",
    ),
    ("Watching Feed", f"watching?limit={FEED_LIMIT}", "Tasks I am watching"),
    ("Recent Feed", f"recent?limit={FEED_LIMIT}", "Recently viewed tasks"),
    (
        "Search Tasks",
        f"search?q={SEARCH_QUERY}&limit={FEED_LIMIT}",
        "Search across all tasks",
    ),
)


@dataclass(frozen=True, kw_only=True)
class ComprehensiveScenarioDriver:
    """Runs read and write endpoints on data the run creates itself.

    Ids of created entities are tracked in ``created``. Everything scoped to
    a project only runs when the test project could be created. Cleanup runs
    last, deletes in reverse creation order and only what was created.
    """

    runner: EndpointRunner
    created: CreatedResources
    clock: Callable[[], float] = time.time

    async def run(self) -> None:
        """Run every stage in order, cleanup last."""
        user_id = await self.check_users()

        existing_project_id = await self.check_projects()
        if self.created.project_id is not None:
            # Scoped stages target the first listed project when there is one.
            project_id = existing_project_id or self.created.project_id
            await self.check_tasks(project_id, user_id)
            await self.check_blueprints(project_id)
            await self.check_groups(project_id, user_id)

        await self.check_feeds(existing_project_id)
        await self.check_notifications()
        await self.check_invites()
        await self.cleanup(existing_project_id)

    def _stamp(self) -> int:
        return int(self.clock() * 1000)

    async def check_users(self) -> str | None:
        """Read and update the current user, returning its id."""
        log_section("USER SERVICE")
        current_user = await self.runner.invoke(
            "Get Current User",
            "GET",
            "/auth/me",
            description="Get authenticated user details",
        )
        await self.runner.invoke(
            "Search Users",
            "GET",
            f"/users/search?query={SEARCH_QUERY}",
            description="Search for users",
        )
        await self.runner.invoke(
            "Update User Profile",
            "PATCH",
            "/users/me",
            {"companyName": "Test Company Updated"},
            description="Update current user profile",
        )
        await self.runner.invoke(
            "Get Avatar URL",
            "GET",
            "/users/me/avatar/download",
            description="Get avatar download URL (may fail if no avatar)",
        )
        return resource_id(current_user)

    async def check_projects(self) -> str | None:
        """List projects, create the test project and return the first listed id."""
        log_section("PROJECT SERVICE")
        projects = await self.runner.invoke(
            "List Projects", "GET", "/projects", description="Get all projects"
        )
        new_project = await self.runner.invoke(
            "Create Project",
            "POST",
            "/projects",
            {
                "name": f"Test Project {self._stamp()}",
                "description": "Created by comprehensive API test",
            },
            description="Create a new test project",
        )

        project_id = resource_id(new_project)
        if project_id is not None:
            self.created.project_id = project_id
            project_path = f"/projects/{project_id}"
            await self.runner.invoke(
                "Get Project Details",
                "GET",
                project_path,
                description="Get specific project details",
            )
            await self.runner.invoke(
                "Update Project",
                "PATCH",
                project_path,
                {"description": "Updated description from API test"},
                description="Update project details",
            )
            await self.runner.invoke(
                "Get Project Members",
                "GET",
                f"{project_path}/members",
                description="List project members",
            )

        return first_id(projects)

    async def check_tasks(self, project_id: str, user_id: str | None) -> None:
        log_section("TASK SERVICE")
        tasks_path = f"/projects/{project_id}/tasks"
        new_task = await self.runner.invoke(
            "Create Task",
            "POST",
            tasks_path,
            {
                "title": f"Test Task {self._stamp()}",
                "description": "Created by API test",
                "category": "CONSTRUCTION",
                "priority": 5,
                "status": "TODO",
            },
            description="Create a new task",
        )
        task_id = resource_id(new_task)
        if task_id is None:
            return
        self.created.task_id = task_id

        task_path = f"{tasks_path}/{task_id}"
        await self.runner.invoke(
            "Get Task Details", "GET", task_path, description="Get specific task"
        )
        await self.runner.invoke(
            "Update Task",
            "PATCH",
            task_path,
            {"description": "Updated description", "priority": 8},
            description="Update task details",
        )
        await self.runner.invoke(
            "Update Task Status",
            "PATCH",
            task_path,
            {"status": "IN_PROGRESS"},
            description="Change task status",
        )
        for name, suffix, description in _TASK_READS:
            await self.runner.invoke(
                name, "GET", f"{task_path}{suffix}", description=description
            )

        if user_id is not None:
            await self.runner.invoke(
                "Assign Task",
                "POST",
                f"{task_path}/assign",
                {"assigneeId": user_id},
                description="Assign task to user",
            )
        await self.runner.invoke(
            "Watch Task",
            "POST",
            f"{task_path}/watch",
            description="Watch task for updates",
        )
        await self.runner.invoke(
            "Unwatch Task", "DELETE", f"{task_path}/watch", description="Unwatch task"
        )

        await self.check_comments(task_path)

        await self.runner.invoke(
            "Filter Tasks",
            "POST",
            f"{tasks_path}/filter",
            {
                "statuses": ["TODO", "IN_PROGRESS"],
                "sortBy": "priority",
                "sortOrder": "DESC",
            },
            description="Filter tasks with criteria",
        )

    async def check_comments(self, task_path: str) -> None:
        log_section("COMMENT SERVICE")
        comments_path = f"{task_path}/comments"
        new_comment = await self.runner.invoke(
            "Create Comment",
            "POST",
            comments_path,
            {"body": "This is a test comment from API test"},
            description="Add comment to task",
        )
        await self.runner.invoke(
            "Get Comments", "GET", comments_path, description="List all comments"
        )
        comment_id = resource_id(new_comment)
        if comment_id is None:
            return
        self.created.comment_id = comment_id

        comment_path = f"{comments_path}/{comment_id}"
        await self.runner.invoke(
            "Get Comment Details",
            "GET",
            comment_path,
            description="Get specific comment",
        )
        await self.runner.invoke(
            "Update Comment",
            "PATCH",
            comment_path,
            {"body": "Updated comment text"},
            description="Update comment content",
        )
        reply = await self.runner.invoke(
            "Create Reply Comment",
            "POST",
            comments_path,
            {"body": "This is a reply to the comment", "replyToCommentId": comment_id},
            description="Reply to a comment",
        )
        await self.runner.invoke(
            "Get Comment Thread",
            "GET",
            f"{comments_path}/threads/{comment_id}",
            description="Get comment with nested replies",
        )
        await self.runner.invoke(
            "Get Comment Replies",
            "GET",
            f"{comment_path}/replies",
            description="Get direct replies to comment",
        )

        reply_id = resource_id(reply)
        if reply_id is not None:
            await self.runner.invoke(
                "Delete Reply Comment",
                "DELETE",
                f"{comments_path}/{reply_id}",
                description="Delete the reply comment",
            )
        await self.runner.invoke(
            "Delete Comment", "DELETE", comment_path, description="Delete the comment"
        )

    async def check_blueprints(self, project_id: str) -> None:
        log_section("BLUEPRINT SERVICE")
        blueprints_path = f"/projects/{project_id}/blueprints"
        await self.runner.invoke(
            "List Blueprints", "GET", blueprints_path, description="List all blueprints"
        )
        await self.runner.invoke(
            "List Blueprints with Pagination",
            "GET",
            f"{blueprints_path}?page=0&limit={BLUEPRINT_PAGE_LIMIT}",
            description="List blueprints with pagination",
        )
        await self.runner.invoke(
            "Search Blueprints",
            "GET",
            f"{blueprints_path}?search={SEARCH_QUERY}",
            description="Search blueprints by name",
        )

    async def check_groups(self, project_id: str, user_id: str | None) -> None:
        log_section("GROUP SERVICE")
        new_group = await self.runner.invoke(
            "Create Group",
            "POST",
            "/groups",
            {"name": f"Test Group {self._stamp()}", "projectId": project_id},
            description="Create a new group",
        )
        await self.runner.invoke(
            "Get User Groups", "GET", "/groups/user", description="List all user groups"
        )
        await self.runner.invoke(
            "Get Project Groups",
            "GET",
            f"/projects/{project_id}/groups",
            description="List project groups",
        )
        group_id = resource_id(new_group)
        if group_id is None:
            return
        self.created.group_id = group_id

        group_path = f"/groups/{group_id}"
        await self.runner.invoke(
            "Get Group Details",
            "GET",
            group_path,
            description="Get specific group details",
        )
        message = await self.runner.invoke(
            "Send Text Message",
            "POST",
            f"{group_path}/messages",
            {"content": "Test message from API test", "messageType": "TEXT"},
            description="Send a text message to group",
        )
        await self.runner.invoke(
            "Get Group Messages",
            "GET",
            f"{group_path}/messages",
            description="List all messages in group",
        )

        message_id = resource_id(message)
        if message_id is not None and user_id is not None:
            await self.check_message_replies(group_path, message_id)

        await self.runner.invoke(
            "Get Group Assets",
            "GET",
            f"{group_path}/assets",
            description="List all assets in group",
        )
        if user_id is not None:
            await self.runner.invoke(
                "Add Group Member",
                "POST",
                f"{group_path}/members",
                {"userId": user_id},
                description="Add member to group (may fail if already member)",
            )

    async def check_message_replies(self, group_path: str, message_id: str) -> None:
        await self.runner.invoke(
            "Send Reply Message",
            "POST",
            f"{group_path}/messages",
            {
                "content": "Reply to previous message",
                "messageType": "TEXT",
                "replyToMessageId": message_id,
            },
            description="Reply to a message",
        )
        await self.runner.invoke(
            "React to Message",
            "POST",
            f"{group_path}/messages/{message_id}/reactions",
            {"emoji": "👍"},
            description="Add reaction to message",
        )

    async def check_feeds(self, project_id: str | None) -> None:
        log_section("FEED SERVICE")
        for name, feed, description in _FEED_CALLS:
            await self.runner.invoke(
                name, "GET", f"/feeds/{feed}", description=description
            )
        if project_id is not None:
            await self.runner.invoke(
                "Project Feed",
                "GET",
                f"/feeds/projects/{project_id}/general?limit={FEED_LIMIT}",
                description="Project general feed",
            )

    async def check_notifications(self) -> None:
        log_section("NOTIFICATION SERVICE")
        notifications = await self.runner.invoke(
            "Get Notifications",
            "GET",
            f"/notifications?page=0&size={NOTIFICATION_PAGE_SIZE}",
            description="List notifications with pagination",
        )
        await self.runner.invoke(
            "Get Unread Count",
            "GET",
            "/notifications/unread-count",
            description="Get unread notification count",
        )

        notification_id = first_field_id(notifications, "content")
        if notification_id is not None:
            await self.runner.invoke(
                "Mark Notification as Read",
                "PATCH",
                f"/notifications/{notification_id}/read",
                description="Mark specific notification as read",
            )
        await self.runner.invoke(
            "Mark All Notifications as Read",
            "PATCH",
            "/notifications/read-all",
            description="Mark all notifications as read",
        )

    async def check_invites(self) -> None:
        log_section("INVITE SERVICE")
        await self.runner.invoke(
            "Preview Invite (Invalid Token)",
            "GET",
            f"/invites/{INVALID_INVITE_TOKEN}",
            description="Preview invite with invalid token (expected to fail)",
        )

    async def cleanup(self, existing_project_id: str | None) -> None:
        """Delete what the run created, newest first."""
        log_section("CLEANUP")
        project_id = self.created.project_id
        if project_id is None:
            log.info("Nothing was created, skipping cleanup")
            return

        if self.created.task_id is not None:
            task_project_id = existing_project_id or project_id
            await self.runner.invoke(
                "Delete Test Task",
                "DELETE",
                f"/projects/{task_project_id}/tasks/{self.created.task_id}",
                description="Clean up test task",
            )
        await self.runner.invoke(
            "Delete Test Project",
            "DELETE",
            f"/projects/{project_id}",
            description="Clean up test project",
        )
