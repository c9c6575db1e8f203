"""Filesystem-backed artifact storage."""

import asyncio
import logging
import uuid
from pathlib import Path

from services.gateways.base import SourceFile, StorageGateway

logger = logging.getLogger(__name__)


class LocalStorage(StorageGateway):
    """Stores each upload under a fresh name inside ``root``.

    References are paths relative to ``root``; reads outside it are refused.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    async def upload(self, file: SourceFile) -> str | None:
        suffix = Path(file.name).suffix.lower()
        ref = f"{uuid.uuid4().hex}{suffix}"
        try:
            await asyncio.to_thread(self._write, self.root / ref, file.data)
        except OSError as e:
            logger.error("Upload of %s failed: %s", file.name, e)
            return None
        logger.info("Stored %s as %s (%d bytes)", file.name, ref, len(file.data))
        return ref

    async def read(self, ref: str) -> bytes | None:
        path = self._resolve(ref)
        if path is None:
            logger.warning("Refusing to read artifact outside storage: %s", ref)
            return None
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.warning("Artifact %s unreadable: %s", ref, e)
            return None

    def _resolve(self, ref: str) -> Path | None:
        root = self.root.resolve()
        path = (root / ref).resolve()
        if root != path and root not in path.parents:
            return None
        return path

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
