"""Versioned envelope for persisted JSON values.

Every JSON blob written by the engine is wrapped as
``{"schema": <version>, "data": <payload>}`` so that data written by an
incompatible release can be recognised and discarded on purpose.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from pyexcuse._constants import SNAPSHOT_SCHEMA_VERSION
from pyexcuse.models._base import ExcuseBaseModel


class SnapshotEnvelope(ExcuseBaseModel):
    version: int = Field(alias="schema", ge=1)
    data: Any

    @classmethod
    def wrap(cls, data: Any) -> SnapshotEnvelope:
        return cls(version=SNAPSHOT_SCHEMA_VERSION, data=data)

    @property
    def is_supported(self) -> bool:
        return self.version <= SNAPSHOT_SCHEMA_VERSION
