"""
Persistence port for the state blob.

The blob is a single JSON object holding the user settings and the star
cache. Anything that can load and save such an object can back the service;
JsonFilePersistence stores it in one file on disk.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class PersistencePort(Protocol):
    """Load/save abstraction for the state blob."""

    async def load(self) -> dict[str, Any] | None:
        """Return the stored blob, or None when nothing usable is stored."""
        ...

    async def save(self, data: dict[str, Any]) -> None:
        """Replace the stored blob. Raises on failure."""
        ...


class JsonFilePersistence:
    """
    Stores the state blob as a JSON file.

    Each write goes to its own temp file in the target directory and is moved
    into place, so a crash mid-write leaves the previous blob intact. File I/O
    runs in a worker thread; saves are serialized so the last caller's blob
    is the one left on disk.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._save_lock = asyncio.Lock()

    async def load(self) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read)

    async def save(self, data: dict[str, Any]) -> None:
        async with self._save_lock:
            await asyncio.to_thread(self._write, data)

    def _read(self) -> dict[str, Any] | None:
        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting with defaults")
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read state file {self.path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.error(f"State file {self.path} does not contain a JSON object")
            return None
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.stem}_", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
