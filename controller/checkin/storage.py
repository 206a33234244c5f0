"""Key-value storage backing the remembered session."""
from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MemorySecureStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def delete_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileSecureStore:
    """JSON file owned by the current user (mode 0600)."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    async def get_item(self, key: str) -> Optional[str]:
        items = await self._run(self._read)
        return items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        def _update() -> None:
            items = self._read()
            items[key] = value
            self._write(items)

        await self._run(_update)

    async def delete_item(self, key: str) -> None:
        def _update() -> None:
            items = self._read()
            if key in items:
                del items[key]
                self._write(items)

        await self._run(_update)

    async def _run(self, func):
        # One read-modify-write at a time per file.
        async with self._lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, func)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected content in {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            tmp_path = f.name
            json.dump(items, f, indent=2)
        try:
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise
        logger.debug("Session storage written to %s", self.path)


__all__ = ["FileSecureStore", "MemorySecureStore"]
