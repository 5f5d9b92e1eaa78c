"""String encodings of the persisted snapshot.

Scalar flags and counters are stored as plain strings.  JSON values are
wrapped in a :class:`~pyexcuse.models.snapshot.SnapshotEnvelope`; bare
payloads written before envelopes existed are still accepted.  Every
``decode_*`` function raises :class:`ExcuseSnapshotError` for a value it
cannot trust, and the loader turns that into the entity's default.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from pydantic import StrictInt, TypeAdapter, ValidationError

from pyexcuse.exceptions import ExcuseSnapshotError
from pyexcuse.models.lucky_day import LuckyDay
from pyexcuse.models.snapshot import SnapshotEnvelope

_TRUE = "true"
_FALSE = "false"

_INDEX_LIST = TypeAdapter(list[StrictInt])
_ENVELOPE_MARKER = "schema"


def _dumps(payload: Any) -> str:
    envelope = SnapshotEnvelope.wrap(payload)
    return json.dumps(envelope.model_dump(by_alias=True), separators=(",", ":"))


def _unwrap(key: str, raw: str) -> tuple[Any, bool]:
    """Return ``(payload, is_legacy)`` for a stored JSON value."""
    try:
        value = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # ValueError also covers integers past the int conversion digit limit.
        raise ExcuseSnapshotError(f"{key}: invalid JSON", key=key) from exc

    if not (isinstance(value, dict) and _ENVELOPE_MARKER in value):
        return value, True

    try:
        envelope = SnapshotEnvelope.model_validate(value)
    except ValidationError as exc:
        raise ExcuseSnapshotError(f"{key}: malformed envelope", key=key) from exc
    if not envelope.is_supported:
        raise ExcuseSnapshotError(f"{key}: unsupported schema version {envelope.version}", key=key)
    return envelope.data, False


def _loads(key: str, raw: str) -> Any:
    return _unwrap(key, raw)[0]


# ------------------------------------------------------------------
# Flags and counters
# ------------------------------------------------------------------


def encode_flag(value: bool) -> str:
    return _TRUE if value else _FALSE


def decode_flag(raw: str | None) -> bool:
    """Anything other than the literal ``"true"`` is false."""
    return raw == _TRUE


def encode_count(value: int) -> str:
    return str(value)


def decode_count(key: str, raw: str) -> int:
    text = raw.strip()
    if not text.isdecimal():
        raise ExcuseSnapshotError(f"{key}: expected a non-negative decimal integer, got {raw[:40]!r}", key=key)
    try:
        return int(text)
    except ValueError as exc:
        raise ExcuseSnapshotError(f"{key}: integer too large", key=key) from exc


# ------------------------------------------------------------------
# Pool consumption
# ------------------------------------------------------------------


def encode_indices(indices: Iterable[int]) -> str:
    return _dumps(sorted(indices))


def decode_indices(key: str, raw: str, pool_size: int) -> frozenset[int]:
    """Decode a consumption set.

    Indices outside ``[0, pool_size)`` are dropped so a shrunken pool
    never carries impossible entries.
    """
    payload = _loads(key, raw)
    try:
        indices = _INDEX_LIST.validate_python(payload)
    except ValidationError as exc:
        raise ExcuseSnapshotError(f"{key}: expected a list of integers", key=key) from exc
    return frozenset(i for i in indices if 0 <= i < pool_size)


# ------------------------------------------------------------------
# Lucky day
# ------------------------------------------------------------------


def encode_lucky_day(lucky_day: LuckyDay) -> str:
    return _dumps(lucky_day.model_dump())


def decode_lucky_day(key: str, raw: str) -> LuckyDay:
    """Decode the lucky day.

    Bare legacy payloads store a 0-based month (January is ``0``); they
    are shifted to the 1-based months used everywhere else.
    """
    payload, legacy = _unwrap(key, raw)
    if legacy and isinstance(payload, dict):
        month = payload.get("month")
        if isinstance(month, int) and not isinstance(month, bool):
            payload = {**payload, "month": month + 1}
    try:
        return LuckyDay.model_validate(payload, strict=True)
    except ValidationError as exc:
        raise ExcuseSnapshotError(f"{key}: invalid lucky day", key=key) from exc


# ------------------------------------------------------------------
# Seen quotes
# ------------------------------------------------------------------


def encode_quotes(quotes: Iterable[str]) -> str:
    return _dumps(list(quotes))


def decode_quotes(key: str, raw: str) -> list[str]:
    """Decode the seen-quote list, skipping non-string entries."""
    payload = _loads(key, raw)
    if not isinstance(payload, list):
        raise ExcuseSnapshotError(f"{key}: expected a list of strings", key=key)
    return [item for item in payload if isinstance(item, str)]
