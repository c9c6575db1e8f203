"""Key-value stores for analysis records."""

import asyncio
import json
import logging
import os
from pathlib import Path

from services.gateways.base import KeyValueGateway

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueGateway):
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore(InMemoryKeyValueStore):
    """In-memory store mirrored to a JSON file after every write.

    Writes are serialized by a lock and land via an atomic rename, so two
    writes to the same key persist in the order they were issued.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._lock = asyncio.Lock()
        if self.path.exists():
            with self.path.open(encoding="utf-8") as f:
                self._data = json.load(f)
            logger.info("Loaded %d records from %s", len(self._data), self.path)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value
            snapshot = dict(self._data)
            await asyncio.to_thread(self._flush, snapshot)

    def _flush(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp, self.path)
