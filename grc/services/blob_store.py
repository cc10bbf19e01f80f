"""
Local filesystem blob store for evidence files.

Writes go through aiofiles so a large upload does not block the event loop.
Stored names are `<stamp>-<original basename>` where the stamp is a
millisecond timestamp that never repeats within the process.
"""
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from grc.core.errors import BadRequest
from grc.core.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StoredBlob:
    filename: str
    path: str
    size: int


class FileTooLarge(BadRequest):
    pass


class LocalBlobStore:
    _stamp_lock = threading.Lock()
    _last_stamp = 0

    def __init__(self, base_dir: str, max_file_size: int):
        self.base_dir = Path(base_dir).resolve()
        self.max_file_size = max_file_size
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def next_stamp(cls) -> int:
        with cls._stamp_lock:
            stamp = max(int(time.time() * 1000), cls._last_stamp + 1)
            cls._last_stamp = stamp
            return stamp

    @staticmethod
    def safe_name(original: str) -> str:
        name = os.path.basename((original or "").replace("\\", "/")).strip()
        return name or "unnamed"

    def _resolve(self, path: str) -> Path:
        resolved = Path(path).resolve()
        if not resolved.is_relative_to(self.base_dir):
            raise BadRequest("Invalid file path")
        return resolved

    async def save(self, upload: UploadFile) -> StoredBlob:
        """
        Stream an upload to disk.

        A partially written file is removed if the write fails or the task is
        cancelled, so a failed save never leaves bytes behind.
        """
        filename = f"{self.next_stamp()}-{self.safe_name(upload.filename)}"
        path = self.base_dir / filename
        size = 0
        try:
            async with aiofiles.open(path, "wb") as out_file:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise FileTooLarge(
                            f"File {self.safe_name(upload.filename)} exceeds the "
                            f"{self.max_file_size} byte limit"
                        )
                    await out_file.write(chunk)
        except BaseException:
            await self._discard(path)
            raise

        logger.debug(f"Stored blob {filename} ({size} bytes)")
        return StoredBlob(filename=filename, path=str(path), size=size)

    async def delete(self, path: str) -> bool:
        """Remove a stored file. A file that is already gone counts as deleted."""
        try:
            await aiofiles.os.remove(self._resolve(path))
        except FileNotFoundError:
            logger.warning(f"Blob already absent: {path}")
            return False
        return True

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception(f"Could not remove partial blob {path}")
