"""Run summary on the console and the persisted JSON report."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from api_smoke.config import SmokeConfig
from api_smoke.models.result import (
    CreatedResources,
    FailureRecord,
    Results,
    SuccessRecord,
)
from api_smoke.runner import STATUS_SYMBOLS


def log_summary(log: logging.Logger, results: Results) -> None:
    """Log totals, then every failure, then every success."""
    log.info("=" * 80)
    log.info("TEST SUMMARY")
    log.info("=" * 80)
    log.info("%s Successful: %d", STATUS_SYMBOLS["success"], len(results.successes))
    log.info("%s Failed: %d", STATUS_SYMBOLS["failure"], len(results.failures))
    log.info("Total: %d", results.total)

    by_method = results.by_method()
    if by_method:
        log.info("By HTTP Method:")
        for method, counts in by_method.items():
            log.info(
                "  %s: %d %s / %d %s",
                method,
                counts["success"],
                STATUS_SYMBOLS["success"],
                counts["failed"],
                STATUS_SYMBOLS["failure"],
            )

    if results.failures:
        log.info("%s FAILED ENDPOINTS:", STATUS_SYMBOLS["failure"])
        log.info("=" * 80)
        for index, failure in enumerate(results.failures, start=1):
            _log_record_header(log, index, failure)
            log.info("  Error: %s", failure.error)
            if isinstance(failure.payload, dict | list):
                log.info("  Full Error: %s", json.dumps(failure.payload, indent=2))

    if results.successes:
        log.info("%s SUCCESSFUL ENDPOINTS:", STATUS_SYMBOLS["success"])
        log.info("=" * 80)
        for index, success in enumerate(results.successes, start=1):
            _log_record_header(log, index, success)
            log.info("  Response: %s", success.shape.preview)


def _log_record_header(
    log: logging.Logger, index: int, record: SuccessRecord | FailureRecord
) -> None:
    log.info("%d. %s", index, record.name)
    log.info("  Method: %s", record.method)
    log.info("  Path: %s", record.path)
    log.info("  Status: %s", record.status)
    if record.sent_data is not None:
        log.info("  Sent Data: %s", json.dumps(record.sent_data))


def format_success(record: SuccessRecord) -> dict[str, Any]:
    """Format a success record for the JSON report."""
    return {
        "name": record.name,
        "method": record.method,
        "path": record.path,
        "status": record.status,
        "sentData": record.sent_data,
        "responseType": record.shape.kind,
        "responsePreview": record.shape.preview,
    }


def format_failure(record: FailureRecord) -> dict[str, Any]:
    """Format a failure record for the JSON report."""
    return {
        "name": record.name,
        "method": record.method,
        "path": record.path,
        "sentData": record.sent_data,
        "status": record.status,
        "error": record.error,
        "fullError": record.payload,
    }


def format_created(created: CreatedResources) -> dict[str, str]:
    """Format the ids of created entities, omitting those never created."""
    ids = {
        "projectId": created.project_id,
        "taskId": created.task_id,
        "commentId": created.comment_id,
        "groupId": created.group_id,
    }
    return {key: value for key, value in ids.items() if value is not None}


def build_report(
    config: SmokeConfig,
    results: Results,
    now: datetime | None = None,
    created: CreatedResources | None = None,
) -> dict[str, Any]:
    """Assemble the report document for a finished run.

    ``createdResources`` is only present for runs that create test data.
    """
    timestamp = now or datetime.now(timezone.utc)
    successes = [format_success(record) for record in results.successes]
    failures = [format_failure(record) for record in results.failures]

    report: dict[str, Any] = {
        "timestamp": timestamp.isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        ),
        "baseUrl": config.base_url,
        "token": config.redacted_token,
        "summary": {
            "total": results.total,
            "successful": len(successes),
            "failed": len(failures),
            "byMethod": results.by_method(),
        },
        "results": {
            "success": successes,
            "failed": failures,
        },
    }
    if created is not None:
        report["createdResources"] = format_created(created)
    return report


def write_report(path: Path, report: dict[str, Any]) -> None:
    """Write the report, replacing any previous one at ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
