"""Module tests running the smoke-test CLI end to end."""

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from subprocess import CompletedProcess
from typing import Any

import pytest
from wiremock.client import (
    HttpMethods,
    Mapping,
    MappingRequest,
    MappingResponse,
    Mappings,
)

from api_smoke.testing.payloads import (
    blueprint_page,
    current_user,
    group,
    notification_page,
    project,
    task,
)

TOKEN = "module-test-token-0123456789abcdefghijklmnopqrstuvwxyz"

RunCli = Callable[[Sequence[str]], CompletedProcess[str]]


def stub(url: str, json_body: Any, status: int = 200) -> None:
    """Stub a GET that only matches with the expected bearer token."""
    Mappings.create_mapping(
        Mapping(
            request=MappingRequest(
                method=HttpMethods.GET,
                url=f"/api{url}",
                headers={
                    "Authorization": {"equalTo": f"Bearer {TOKEN}"},
                    "Content-Type": {"contains": "application/json"},
                },
            ),
            response=MappingResponse(
                status=status,
                headers={"Content-Type": "application/json"},
                json_body=json_body,
            ),
        )
    )


def test_full_run_against_wiremock(
    api_base_url: str, run_cli: RunCli, tmp_path: Path
) -> None:
    """CLI walks the endpoint tree and writes a complete report."""
    Mappings.delete_all_mappings()

    stub("/auth/me", current_user())
    stub("/users/search?query=test", [current_user()])
    stub("/users/me/avatar/download", {"url": "https://cdn.test/avatar.png"})
    stub("/projects", [project(project_id="p1"), project(project_id="p2")])
    stub("/projects/p1", project(project_id="p1"))
    stub("/projects/p1/members", [current_user()])
    stub("/projects/p1/tasks", [task(task_id="t1")])
    stub("/projects/p1/tasks/t1", task(task_id="t1"))
    stub("/projects/p1/tasks/t1/visible-assignee", current_user())
    stub("/projects/p1/tasks/t1/assignments", [])
    stub("/projects/p1/tasks/t1/activity", [])
    stub("/projects/p1/tasks/t1/comments", [])
    stub("/projects/p1/blueprints", blueprint_page([]))
    stub("/projects/p1/groups", [group(group_id="g1")])
    stub("/groups/g1", group(group_id="g1"))
    stub("/groups/g1/messages", [])
    stub("/groups/g1/assets", [])
    for feed in ("assigned-to-me", "assigned-by-me", "watching", "recent"):
        stub(f"/feeds/{feed}?limit=20", [])
    stub("/feeds/search?q=test&limit=20", [])
    stub("/notifications?page=0&size=20", notification_page(1))
    stub("/notifications/unread-count", 1)
    stub("/groups/user", [group(group_id="g1")])

    report_path = tmp_path / "api-test-results.json"
    result = run_cli(
        [
            "--base-url",
            api_base_url,
            "--token",
            TOKEN,
            "--report-path",
            str(report_path),
            "--status-policy",
            "success-only",
        ]
    )

    assert result.returncode == 0, f"stdout: {result.stdout}\nstderr: {result.stderr}"
    assert "TEST SUMMARY" in result.stderr

    report = json.loads(report_path.read_text())
    assert report["baseUrl"] == api_base_url
    assert report["token"] == f"{TOKEN[:30]}..."
    assert report["summary"]["failed"] == 0, report["results"]["failed"]
    assert report["summary"]["total"] == report["summary"]["successful"] == 26

    paths = [entry["path"] for entry in report["results"]["success"]]
    assert "/projects/p1/tasks/t1/activity" in paths
    assert not any("p2" in path for path in paths)
    assert not any("/comments/" in path for path in paths)
    assert not any(path.startswith("/blueprints/") for path in paths)


def test_unreachable_backend_records_network_errors(
    run_cli: RunCli, tmp_path: Path
) -> None:
    """Every call fails without a response, the run still completes."""
    report_path = tmp_path / "report.json"

    result = run_cli(
        [
            "--base-url",
            "http://127.0.0.1:9/api",
            "--token",
            TOKEN,
            "--timeout",
            "2",
            "--report-path",
            str(report_path),
        ]
    )

    assert result.returncode == 0, result.stderr
    report = json.loads(report_path.read_text())
    assert report["summary"] == {
        "total": 13,
        "successful": 0,
        "failed": 13,
        "byMethod": {"GET": {"success": 0, "failed": 13}},
    }
    assert {entry["status"] for entry in report["results"]["failed"]} == {
        "Network Error"
    }


def test_report_write_failure_exits_non_zero(run_cli: RunCli, tmp_path: Path) -> None:
    """Failing to persist the report is fatal."""
    result = run_cli(
        [
            "--base-url",
            "http://127.0.0.1:9/api",
            "--token",
            TOKEN,
            "--timeout",
            "2",
            "--report-path",
            str(tmp_path),
        ]
    )

    assert result.returncode == 1
    assert "Fatal error running tests" in result.stderr


def test_missing_token_is_usage_error(run_cli: RunCli) -> None:
    """The CLI refuses to run without a token."""
    result = run_cli(["--base-url", "http://127.0.0.1:9/api", "--token", ""])

    assert result.returncode == 2
    assert "API_SMOKE_TOKEN" in result.stderr


def test_comprehensive_scenario_without_backend_creates_nothing(
    run_cli: RunCli, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Failed creates skip every scoped stage and the cleanup."""
    monkeypatch.setenv("API_SMOKE_SCENARIO", "comprehensive")
    report_path = tmp_path / "report.json"

    result = run_cli(
        [
            "--base-url",
            "http://127.0.0.1:9/api",
            "--token",
            TOKEN,
            "--timeout",
            "2",
            "--report-path",
            str(report_path),
        ]
    )

    assert result.returncode == 0, result.stderr
    report = json.loads(report_path.read_text())
    assert report["summary"]["byMethod"] == {
        "GET": {"success": 0, "failed": 13},
        "PATCH": {"success": 0, "failed": 2},
        "POST": {"success": 0, "failed": 1},
    }
    assert report["createdResources"] == {}
