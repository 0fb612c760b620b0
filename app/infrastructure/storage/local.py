"""Blob-хранилище вложений на локальном диске"""
import logging
from pathlib import Path
from typing import Optional, Protocol

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.exceptions import NotFound, StorageFailure

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    async def put(self, name: str, data: bytes) -> str: ...

    async def get(self, path: str) -> bytes: ...

    async def delete(self, path: str) -> None: ...


class LocalBlobStore:
    """Файлы в каталоге upload_dir; путь blob-а = имя файла внутри каталога"""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.upload_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _full_path(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        # Запрет выхода за пределы каталога
        try:
            full_path.relative_to(self.root)
        except ValueError as e:
            raise NotFound("File not found", path=path) from e
        return full_path

    async def put(self, name: str, data: bytes) -> str:
        full_path = self._full_path(name)
        try:
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Failed to write blob {name}: {e}")
            raise StorageFailure("Failed to store file") from e
        return name

    async def get(self, path: str) -> bytes:
        full_path = self._full_path(path)
        if not full_path.is_file():
            raise NotFound("File not found", path=path)
        try:
            async with aiofiles.open(full_path, "rb") as f:
                return await f.read()
        except OSError as e:
            logger.error(f"Failed to read blob {path}: {e}")
            raise StorageFailure("Failed to read file") from e

    async def delete(self, path: str) -> None:
        """Удаление blob-а; отсутствующий файл считается удаленным"""
        full_path = self._full_path(path)
        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            logger.warning(f"Blob {path} already missing")
        except OSError as e:
            logger.error(f"Failed to delete blob {path}: {e}")
            raise StorageFailure("Failed to delete file") from e
