from abc import ABC, abstractmethod
from pathlib import Path


class FileStorage(ABC):
    """Byte store for uploaded resume documents.

    Paths handed out by ``save`` are relative to the store and are what a
    ``Resume`` keeps in ``file_path``; extractors read through ``retrieve``.
    """

    @abstractmethod
    async def save(self, content: bytes, filename: str, subdir: str = "") -> str:
        """Write ``content`` under ``subdir/filename`` and return that relative path."""
        ...

    @abstractmethod
    async def retrieve(self, relative_path: str) -> Path:
        """Absolute location of a stored document. Raises FileNotFoundError."""
        ...

    @abstractmethod
    async def delete(self, relative_path: str) -> bool:
        """Remove a stored document. False if nothing was there."""
        ...

    @abstractmethod
    async def exists(self, relative_path: str) -> bool: ...
