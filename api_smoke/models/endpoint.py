"""Descriptor for a single endpoint invocation."""

from typing import Any, Literal

from pydantic import Field

from api_smoke.models.base import Model

type HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

BODY_METHODS: frozenset[HttpMethod] = frozenset({"POST", "PUT", "PATCH"})


class Endpoint(Model):
    """One HTTP method and path to call, built fresh for every invocation."""

    name: str = Field(..., description="Human-readable endpoint name")
    method: HttpMethod = Field(..., description="HTTP method")
    path: str = Field(
        ..., description="Path relative to the base URL, may carry a query string"
    )
    body: Any | None = Field(default=None, description="JSON payload to send")
    description: str = Field(default="", description="What the call exercises")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers, applied over the authentication headers",
    )

    @property
    def sends_body(self) -> bool:
        """Whether a payload goes out with the request.

        GET and DELETE never carry one, even when a body was given.
        """
        return self.method in BODY_METHODS and self.body is not None
