"""Key-value persistence gateways.

The engine only needs an asynchronous string store with ``get``, ``set``
and ``remove``.  :class:`PersistenceGateway` describes that contract
structurally so any object with those coroutines can be injected (for
example an adapter over a platform key-value store).
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from pyexcuse.exceptions import ExcuseStorageError

_logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Structural interface for the durable key-value store.

    There are no transactions: every call stands alone.
    """

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process gateway backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of everything currently stored."""
        return dict(self._data)


class JsonFileStorage:
    """Gateway persisting all keys as one JSON object on disk.

    Blocking file IO runs in the loop's default executor.  Writes replace
    the file atomically and are serialised so the newest state always
    lands last.  A missing file is an empty store; an unreadable or
    malformed file is logged and treated as empty.

    Parameters
    ----------
    path : Path or str
        Location of the JSON document.  Parent directories are created on
        first write.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._data: dict[str, str] | None = None
        self._loading: asyncio.Future[dict[str, str]] | None = None
        self._write_lock: asyncio.Lock | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            _logger.warning("Could not read storage file %s; starting empty", self._path, exc_info=True)
            return {}

        try:
            raw = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Storage file %s is not valid JSON; starting empty", self._path)
            return {}

        if not isinstance(raw, dict):
            _logger.warning("Storage file %s does not hold a JSON object; starting empty", self._path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _write_file(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(f"{self._path.name}.tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self._path)

    async def _ensure_loaded(self) -> dict[str, str]:
        if self._data is None:
            if self._loading is None:
                loop = asyncio.get_running_loop()
                self._loading = loop.run_in_executor(None, self._read_file)
            data = await self._loading
            if self._data is None:
                self._data = data
        return self._data

    async def _flush(self) -> None:
        if self._write_lock is None:
            self._write_lock = asyncio.Lock()
        async with self._write_lock:
            data = dict(await self._ensure_loaded())
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self._write_file, data)
            except OSError as exc:
                raise ExcuseStorageError(f"Could not write storage file {self._path}: {exc}") from exc

    async def get(self, key: str) -> str | None:
        data = await self._ensure_loaded()
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        data = await self._ensure_loaded()
        data[key] = value
        await self._flush()

    async def remove(self, key: str) -> None:
        data = await self._ensure_loaded()
        if data.pop(key, None) is None:
            return
        await self._flush()
