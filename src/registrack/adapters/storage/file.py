"""Key-value store persisted to a JSON file."""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from registrack.core.exceptions import SessionStoreError

logger = structlog.get_logger()


class JsonFileKeyValueStore:
    """Plain key-value store kept as a single JSON object on disk.

    Writes go to a temporary sibling file that then replaces the target,
    so a crash mid-write never leaves a truncated file. File I/O runs in
    a worker thread to keep the event loop responsive.
    """

    def __init__(self, path: str | Path):
        """Initialize the store.

        Args:
            path: Location of the JSON file. Parent directories are created
                on first write.
        """
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def multi_set(self, entries: Sequence[tuple[str, str]]) -> None:
        """Write several keys in one file replacement."""
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data.update(dict(entries))
            await asyncio.to_thread(self._dump, data)

    async def multi_get(self, keys: Sequence[str]) -> list[tuple[str, str | None]]:
        """Read several keys; missing or non-string values read as None."""
        data = await asyncio.to_thread(self._load)
        result: list[tuple[str, str | None]] = []
        for key in keys:
            value = data.get(key)
            result.append((key, value if isinstance(value, str) else None))
        return result

    async def multi_remove(self, keys: Sequence[str]) -> None:
        """Remove several keys; absent keys are ignored."""
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            changed = False
            for key in keys:
                if key in data:
                    del data[key]
                    changed = True
            if changed:
                await asyncio.to_thread(self._dump, data)

    def _load(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise SessionStoreError(f"Failed to read {self.path}: {e}") from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except ValueError:
            logger.warning("storage_file_corrupt", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise SessionStoreError(f"Failed to write {self.path}: {e}") from e
