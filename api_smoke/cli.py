"""CLI entry point for the API smoke test."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import get_args

from pydantic import SecretStr

from api_smoke.comprehensive import ComprehensiveScenarioDriver
from api_smoke.config import ScenarioName, SmokeConfig, StatusPolicy
from api_smoke.models.result import CreatedResources, Results
from api_smoke.reporter import build_report, log_summary, write_report
from api_smoke.runner import EndpointRunner
from api_smoke.scenario import ScenarioDriver

ENV_PREFIX = "API_SMOKE_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


async def run(config: SmokeConfig) -> int:
    """Run the scenario, log the summary and persist the report."""
    log = logging.getLogger("api_smoke")

    log.info("=" * 80)
    log.info("API ENDPOINT TESTING")
    log.info("=" * 80)
    log.info("Base URL: %s", config.base_url)
    log.info("Token: %s", config.redacted_token)
    log.info("Scenario: %s", config.scenario)

    results = Results()
    created = CreatedResources() if config.scenario == "comprehensive" else None
    try:
        async with EndpointRunner.from_config(config, results) as runner:
            if created is not None:
                await ComprehensiveScenarioDriver(runner=runner, created=created).run()
            else:
                await ScenarioDriver(runner=runner).run()
    finally:
        log_summary(log, results)

    report = build_report(config, results, created=created)
    write_report(config.report_path, report)
    log.info("Detailed results saved to: %s", config.report_path)

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser; every option falls back to ``API_SMOKE_*``."""
    parser = argparse.ArgumentParser(
        description="Smoke-test the project-management REST API"
    )
    parser.add_argument(
        "--base-url",
        default=os.environ.get(f"{ENV_PREFIX}BASE_URL", "http://localhost:8080/api"),
        help="API base URL, paths are appended verbatim",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get(f"{ENV_PREFIX}TOKEN"),
        help="Bearer token sent with every request",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=os.environ.get(f"{ENV_PREFIX}TIMEOUT", "10"),
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--report-path",
        type=Path,
        default=os.environ.get(f"{ENV_PREFIX}REPORT_PATH", "api-test-results.json"),
        help="Where the JSON report is written (overwritten on every run)",
    )
    parser.add_argument(
        "--status-policy",
        choices=get_args(StatusPolicy.__value__),
        default=os.environ.get(f"{ENV_PREFIX}STATUS_POLICY", "any-response"),
        help="Whether non-2xx responses count as successes or failures",
    )
    parser.add_argument(
        "--scenario",
        choices=get_args(ScenarioName.__value__),
        default=os.environ.get(f"{ENV_PREFIX}SCENARIO", "basic"),
        help="basic reads existing data, comprehensive also creates and deletes",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        choices=LOG_LEVELS,
        help="Console log level",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.token:
        parser.error(f"--token or {ENV_PREFIX}TOKEN is required")
    if args.log_level not in LOG_LEVELS:
        parser.error(f"unknown log level: {args.log_level}")

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    log = logging.getLogger("api_smoke")

    try:
        config = SmokeConfig(
            base_url=args.base_url,
            token=SecretStr(args.token),
            timeout=args.timeout,
            report_path=args.report_path,
            status_policy=args.status_policy,
            scenario=args.scenario,
        )
        exit_code = asyncio.run(run(config))
    except Exception:
        log.exception("Fatal error running tests")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
