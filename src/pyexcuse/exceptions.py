"""Custom exception hierarchy for pyexcuse."""

from __future__ import annotations


class ExcuseError(Exception):
    """Base exception for all pyexcuse errors."""


class ExcuseConfigError(ExcuseError):
    """Invalid or missing configuration."""


class ExcuseNotReadyError(ExcuseError):
    """Engine used before its persisted state finished loading."""


class ExcuseStorageError(ExcuseError):
    """Key-value storage read, write or remove failure."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class ExcuseSnapshotError(ExcuseStorageError):
    """A persisted value could not be decoded.

    Raised by the snapshot codec for malformed, mistyped or
    future-version values.  The engine loader catches it and falls back
    to the entity's default.
    """


class ExcuseTransportError(ExcuseError):
    """HTTP-level failure talking to the subscription backend."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
