"""
Storage Service - local disk storage under STORAGE_PATH

Layout:
  {STORAGE_PATH}/students/{uuid}{ext}    student uploads
  {STORAGE_PATH}/teachers/{uuid}{ext}    teacher uploads
  {STORAGE_PATH}/documents/{filename}    issued PDFs
"""

from pathlib import Path
import aiofiles
import aiofiles.os

from synexa.core.config import settings
from synexa.core.exceptions import StorageError
from synexa.core.logging_config import get_logger

logger = get_logger(__name__)


class StorageService:

    def path_for(self, folder: str, name: str) -> Path:
        return settings.storage_dir / folder / name

    async def save(self, folder: str, name: str, content: bytes) -> Path:
        """Write bytes and return the path they were stored at"""
        path = self.path_for(folder, name)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"[Storage] Failed to write {path}: {e}")
            raise StorageError(f"Não foi possível gravar o ficheiro {name}")
        logger.debug(f"[Storage] Saved {path} ({len(content)} bytes)")
        return path

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.isfile(path)

    async def read(self, path: str) -> bytes:
        async with aiofiles.open(path, 'rb') as f:
            return await f.read()

    async def delete(self, path: str) -> bool:
        """Remove a stored file, False when it was already gone"""
        if not await self.exists(path):
            return False
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.error(f"[Storage] Failed to delete {path}: {e}")
            raise StorageError("Não foi possível remover o ficheiro")
        return True


storage_service = StorageService()
