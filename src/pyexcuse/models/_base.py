"""Base model for pyexcuse value objects.

Every model in :mod:`pyexcuse.models` inherits from
:class:`ExcuseBaseModel`, which makes instances immutable and rejects
unknown fields so persisted payloads with unexpected keys are detected
rather than silently accepted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ExcuseBaseModel(BaseModel):
    """Frozen pydantic base for engine value objects."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )
