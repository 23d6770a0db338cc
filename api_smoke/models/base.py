"""Base model configuration shared by request and response models."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with immutable instances."""

    model_config = ConfigDict(frozen=True)
