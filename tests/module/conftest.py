"""Fixtures for module tests using a WireMock testcontainer."""

import subprocess
import sys
from collections.abc import Callable, Generator, Sequence
from pathlib import Path

import pytest
from testcontainers.core import testcontainers_config
from wiremock.constants import Config
from wiremock.testing.testcontainer import WireMockContainer

PROJECT_ROOT = Path(__file__).parent.parent.parent.resolve()

RunCli = Callable[[Sequence[str]], subprocess.CompletedProcess[str]]


@pytest.fixture(scope="session", autouse=True)
def _disable_ryuk() -> None:
    """Disable the extra cleanup instance, we use contexts to clean containers."""
    testcontainers_config.ryuk_disabled = True


@pytest.fixture(scope="session")
def wiremock_server() -> Generator[WireMockContainer, None, None]:
    """Start WireMock container using wiremock's testcontainer support."""
    with WireMockContainer(secure=False) as wm:
        Config.base_url = wm.get_url("__admin")
        yield wm
        print(wm.get_logs())


@pytest.fixture(scope="session")
def api_base_url(wiremock_server: WireMockContainer) -> str:
    """Base URL of the mocked API as seen from the host."""
    return wiremock_server.get_url("api")


@pytest.fixture
def run_cli() -> RunCli:
    """Return a function running the CLI in a subprocess."""

    def _run(args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [sys.executable, "-m", "api_smoke.cli", *args],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=120,
        )

    return _run
