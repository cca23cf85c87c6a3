"""Base model configuration for run and snapshot data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that tolerates unknown keys in stored or collected data."""

    model_config = ConfigDict(frozen=True, extra="ignore")
