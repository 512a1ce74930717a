import asyncio
import logging
from pathlib import Path

from resumehub.storage.base import FileStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Keeps documents on the local disk below ``base_dir``, one folder per user."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _resolve(self, relative_path: str) -> Path:
        target = (self.base_dir / relative_path).resolve()
        if not target.is_relative_to(self.base_dir):
            raise ValueError(f"Path escapes storage directory: {relative_path}")
        return target

    async def save(self, content: bytes, filename: str, subdir: str = "") -> str:
        relative_path = str(Path(subdir) / filename) if subdir else filename
        target = self._resolve(relative_path)
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, content)
        logger.debug("Stored %d bytes at %s", len(content), relative_path)
        return relative_path

    async def retrieve(self, relative_path: str) -> Path:
        target = self._resolve(relative_path)
        if not await asyncio.to_thread(target.is_file):
            raise FileNotFoundError(f"File not found: {relative_path}")
        return target

    async def delete(self, relative_path: str) -> bool:
        target = self._resolve(relative_path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            logger.debug("File %s already removed", relative_path)
            return False
        return True

    async def exists(self, relative_path: str) -> bool:
        return await asyncio.to_thread(self._resolve(relative_path).is_file)
