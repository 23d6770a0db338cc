"""Fixtures for integration tests against a mocked HTTP layer."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr

from api_smoke.config import SmokeConfig
from api_smoke.models.result import Results
from api_smoke.runner import EndpointRunner

BASE_URL = "http://api.test/api"


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Intercept every aiohttp request."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def config() -> SmokeConfig:
    """Create test configuration."""
    return SmokeConfig(base_url=BASE_URL, token=SecretStr("test-token"))


@pytest.fixture
def results() -> Results:
    """Fresh accumulator per test."""
    return Results()


@pytest.fixture
async def runner(
    config: SmokeConfig, results: Results, aioresponses: aioresponses_cls
) -> AsyncGenerator[EndpointRunner, None]:
    """Create runner with managed session."""
    async with EndpointRunner.from_config(config, results) as impl:
        yield impl


@pytest.fixture
def register(aioresponses: aioresponses_cls) -> Callable[..., None]:
    """Return a function that mocks endpoints, repeatable unless told otherwise."""

    def _register(
        path: str,
        payload: Any = None,
        *,
        method: str = "GET",
        status: int = 200,
        exception: Exception | None = None,
        repeat: bool = True,
    ) -> None:
        url = f"{BASE_URL}{path}"
        if exception is not None:
            aioresponses.add(url, method, exception=exception, repeat=repeat)
        else:
            aioresponses.add(
                url, method, status=status, payload=payload, repeat=repeat
            )

    return _register
