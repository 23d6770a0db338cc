"""Configuration for a smoke-test run."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr

type StatusPolicy = Literal["any-response", "success-only"]
type ScenarioName = Literal["basic", "comprehensive"]

TOKEN_PREVIEW_LENGTH = 30


class SmokeConfig(BaseModel):
    """Configuration for the endpoint runner and the report.

    The status policy decides how a received non-2xx response is recorded:
    - any-response: every received response counts as a success
    - success-only: only 2xx responses count, the rest are failures

    The scenario picks the endpoint walk:
    - basic: read-only calls chained on existing data
    - comprehensive: creates, updates and deletes its own test data
    """

    base_url: str = "http://localhost:8080/api"
    token: SecretStr
    timeout: float = Field(default=10.0, gt=0)
    report_path: Path = Path("api-test-results.json")
    status_policy: StatusPolicy = "any-response"
    scenario: ScenarioName = "basic"

    @property
    def redacted_token(self) -> str:
        """Token prefix safe to print and persist."""
        return f"{self.token.get_secret_value()[:TOKEN_PREVIEW_LENGTH]}..."
