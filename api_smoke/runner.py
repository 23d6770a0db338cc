"""Endpoint runner: one request per invocation, one outcome record each."""

import json
import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from api_smoke.config import SmokeConfig
from api_smoke.models.endpoint import Endpoint, HttpMethod
from api_smoke.models.result import (
    NETWORK_ERROR,
    FailureRecord,
    FailureStatus,
    Results,
    SuccessRecord,
    shape_of,
)

log = logging.getLogger(__name__)

STATUS_SYMBOLS = {
    "success": "✅",
    "failure": "❌",
}


def decode_body(raw: bytes) -> Any:
    """Decode a response body as JSON, falling back to the raw text."""
    text = raw.decode("utf-8", errors="replace")
    if not text:
        return ""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def error_message(status: int, body: Any) -> str:
    """Pick the human-readable error for a rejected response."""
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return f"Request failed with status code {status}"


@dataclass(frozen=True, kw_only=True)
class EndpointRunner:
    """Invokes backend endpoints and records every outcome in ``results``."""

    config: SmokeConfig
    results: Results
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: SmokeConfig, results: Results
    ) -> AsyncGenerator["EndpointRunner", None]:
        """Create runner with managed session lifecycle."""
        async with aiohttp.ClientSession(
            headers=auth_headers(config),
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as session:
            yield cls(config=config, results=results, session=session)

    async def invoke(
        self,
        name: str,
        method: HttpMethod,
        path: str,
        body: Any | None = None,
        description: str = "",
        headers: Mapping[str, str] | None = None,
    ) -> Any | None:
        """Call one endpoint and record the outcome.

        Args:
            name: Human-readable endpoint name
            method: HTTP method
            path: Path appended to the base URL
            body: JSON payload, only sent for POST, PUT and PATCH
            description: Free-form note shown in the progress output
            headers: Extra headers for this call only, overriding the defaults

        Returns:
            The decoded response body, or None when the call failed

        """
        endpoint = Endpoint(
            name=name,
            method=method,
            path=path,
            body=body,
            description=description,
            headers=dict(headers or {}),
        )
        return await self.execute(endpoint)

    async def execute(self, endpoint: Endpoint) -> Any | None:
        """Perform the request described by ``endpoint``."""
        log.info("Testing: %s", endpoint.name)
        log.info("  Endpoint: %s %s", endpoint.method, endpoint.path)
        if endpoint.description:
            log.info("  Description: %s", endpoint.description)
        if endpoint.body is not None:
            log.info("  Sent Data: %s", json.dumps(endpoint.body))

        try:
            status, body = await self._send(endpoint)
        except (aiohttp.ClientError, TimeoutError) as exc:
            message = str(exc) or type(exc).__name__
            return self._fail(endpoint, NETWORK_ERROR, message, message)

        if self.config.status_policy == "success-only" and not 200 <= status < 300:
            return self._fail(endpoint, status, error_message(status, body), body)

        shape = shape_of(body)
        log.info("  %s Status: %d", STATUS_SYMBOLS["success"], status)
        log.info("  Response Type: %s", shape.kind)
        log.info("  Response: %s", shape.preview)
        if isinstance(body, dict) and body.get("id") is not None:
            label = "Created ID" if endpoint.method == "POST" else "Resource ID"
            log.info("  %s: %s", label, body["id"])

        self.results.record(
            SuccessRecord(
                name=endpoint.name,
                method=endpoint.method,
                path=endpoint.path,
                sent_data=endpoint.body,
                status=status,
                shape=shape,
            )
        )
        return body

    async def _send(self, endpoint: Endpoint) -> tuple[int, Any]:
        url = f"{self.config.base_url.rstrip('/')}{endpoint.path}"
        payload = endpoint.body if endpoint.sends_body else None

        async with self.session.request(
            endpoint.method,
            url,
            headers={**auth_headers(self.config), **endpoint.headers},
            json=payload,
        ) as response:
            raw = await response.read()
            return response.status, decode_body(raw)

    def _fail(
        self,
        endpoint: Endpoint,
        status: FailureStatus,
        error: str,
        payload: Any,
    ) -> None:
        log.warning("  %s Failed: %s", STATUS_SYMBOLS["failure"], status)
        log.warning("  Error: %s", error)

        self.results.record(
            FailureRecord(
                name=endpoint.name,
                method=endpoint.method,
                path=endpoint.path,
                sent_data=endpoint.body,
                status=status,
                error=error,
                payload=payload,
            )
        )
        return None


def auth_headers(config: SmokeConfig) -> Mapping[str, str]:
    """Headers attached to every request."""
    return {
        "Authorization": f"Bearer {config.token.get_secret_value()}",
        "Content-Type": "application/json",
    }
