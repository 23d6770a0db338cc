"""Models for endpoint outcomes and the run-wide results accumulator."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final, Literal

from api_smoke.models.endpoint import HttpMethod

NETWORK_ERROR: Final = "Network Error"

type ScalarKind = Literal["string", "number", "boolean", "null"]
type FailureStatus = int | Literal["Network Error"]


@dataclass(frozen=True, kw_only=True)
class ArrayShape:
    """Response body is an ordered list of items."""

    length: int
    kind: Literal["array"] = "array"

    @property
    def preview(self) -> str:
        """Item count, e.g. ``Array[3]``."""
        return f"Array[{self.length}]"


@dataclass(frozen=True, kw_only=True)
class ObjectShape:
    """Response body is a record with named fields."""

    keys: Sequence[str]
    kind: Literal["object"] = "object"

    @property
    def preview(self) -> str:
        """Field names in response order."""
        return ", ".join(self.keys)


@dataclass(frozen=True, kw_only=True)
class ScalarShape:
    """Response body is a single string, number, boolean or null."""

    value: str | int | float | bool | None
    kind: ScalarKind

    @property
    def preview(self) -> str:
        """Value rendered the way it appears on the wire."""
        if self.value is None:
            return "null"
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


type ResponseShape = ArrayShape | ObjectShape | ScalarShape


def shape_of(body: Any) -> ResponseShape:
    """Classify a decoded response body."""
    if isinstance(body, list):
        return ArrayShape(length=len(body))
    if isinstance(body, dict):
        return ObjectShape(keys=tuple(body))
    if body is None:
        return ScalarShape(value=None, kind="null")
    # bool before int: bool is an int subclass
    if isinstance(body, bool):
        return ScalarShape(value=body, kind="boolean")
    if isinstance(body, int | float):
        return ScalarShape(value=body, kind="number")
    return ScalarShape(value=str(body), kind="string")


@dataclass(frozen=True, kw_only=True)
class SuccessRecord:
    """A response was received for the endpoint."""

    name: str
    method: HttpMethod
    path: str
    sent_data: Any | None = None
    status: int
    shape: ResponseShape


@dataclass(frozen=True, kw_only=True)
class FailureRecord:
    """The endpoint produced no usable response.

    ``status`` is the HTTP status when a response was rejected, or
    ``NETWORK_ERROR`` when none arrived at all.
    """

    name: str
    method: HttpMethod
    path: str
    sent_data: Any | None = None
    status: FailureStatus
    error: str
    payload: Any


type OutcomeRecord = SuccessRecord | FailureRecord


@dataclass(kw_only=True)
class Results:
    """Append-only accumulator of outcome records in call order."""

    _outcomes: list[OutcomeRecord] = field(default_factory=list, repr=False)

    def record(self, outcome: OutcomeRecord) -> None:
        """Append one outcome."""
        self._outcomes.append(outcome)

    @property
    def outcomes(self) -> Sequence[OutcomeRecord]:
        """Every record in call order."""
        return tuple(self._outcomes)

    @property
    def successes(self) -> Sequence[SuccessRecord]:
        """Success records in call order."""
        return tuple(o for o in self._outcomes if isinstance(o, SuccessRecord))

    @property
    def failures(self) -> Sequence[FailureRecord]:
        """Failure records in call order."""
        return tuple(o for o in self._outcomes if isinstance(o, FailureRecord))

    @property
    def total(self) -> int:
        """Number of invocations recorded so far."""
        return len(self._outcomes)

    def by_method(self) -> dict[str, dict[str, int]]:
        """Count successes and failures per HTTP method, first-seen order."""
        counts: dict[str, dict[str, int]] = {}
        for outcome in self._outcomes:
            method_counts = counts.setdefault(
                outcome.method, {"success": 0, "failed": 0}
            )
            if isinstance(outcome, SuccessRecord):
                method_counts["success"] += 1
            else:
                method_counts["failed"] += 1
        return counts


@dataclass(kw_only=True)
class CreatedResources:
    """Ids of entities created during a run, kept for cleanup and the report."""

    project_id: str | None = None
    task_id: str | None = None
    comment_id: str | None = None
    group_id: str | None = None
