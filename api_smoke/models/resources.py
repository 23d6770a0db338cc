"""Shallow model for the backend resources the scenario chains on.

Only the ``id`` field is inspected; everything else is passed through.
"""

from pydantic import ConfigDict

from api_smoke.models.base import Model


class Resource(Model):
    """Any backend entity addressable by ``id``."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str | int
