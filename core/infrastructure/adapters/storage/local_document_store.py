"""Filesystem-backed document store."""
import asyncio
import logging
from pathlib import Path

from core.application.interfaces import IDocumentStore

logger = logging.getLogger(__name__)


class LocalDocumentStore(IDocumentStore):
    """Writes documents under a base directory, e.g. ``uploads/invoices``."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)

    async def save(self, name: str, content: bytes) -> str:
        if Path(name).name != name:
            raise ValueError(f"Invalid document name: {name}")

        path = self.base_dir / name
        await asyncio.to_thread(self._write, path, content)
        logger.debug(f"Stored {len(content)} bytes at {path}")
        return str(path)

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
