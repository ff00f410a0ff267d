"""
Ephemeral storage for materialized video assets.

Assets live only for the duration of one request. ``AssetScope`` tracks every
path reserved on behalf of a request and releases them on exit, whether the
pipeline finished or failed.
"""

import asyncio
import logging
import secrets
import time
from pathlib import Path
from typing import List, Optional, Protocol

from vidpublish.config import UPLOAD_TMP_DIR
from vidpublish.core.errors import StorageWriteError

logger = logging.getLogger(__name__)


class TempStorage(Protocol):
    def reserve_path(self, safe_name: str) -> Path: ...

    async def write_bytes(self, path: Path, data: bytes) -> None: ...

    async def delete(self, path: Path) -> None: ...


class LocalTempStorage:
    """Stores assets as flat files under a single directory."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root or UPLOAD_TMP_DIR)

    def reserve_path(self, safe_name: str) -> Path:
        # Millisecond timestamp plus a random token keeps concurrent requests apart
        unique = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"
        return self.root / f"{unique}-{safe_name}"

    async def write_bytes(self, path: Path, data: bytes) -> None:
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            raise StorageWriteError(f"Failed to store video: {exc}") from exc

    async def delete(self, path: Path) -> None:
        await asyncio.to_thread(path.unlink)

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


class AssetScope:
    """
    Owns the ephemeral paths of a single request.

    Use as an async context manager; every reserved path is deleted on exit.
    Deletion failures are logged and never raised.
    """

    def __init__(self, storage: TempStorage):
        self.storage = storage
        self._paths: List[Path] = []

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    def reserve(self, safe_name: str) -> Path:
        path = self.storage.reserve_path(safe_name)
        self._paths.append(path)
        return path

    async def write(self, path: Path, data: bytes) -> None:
        await self.storage.write_bytes(path, data)

    async def release(self) -> None:
        while self._paths:
            path = self._paths.pop()
            try:
                await self.storage.delete(path)
                logger.debug("Removed ephemeral asset %s", path)
            except FileNotFoundError:
                continue
            except Exception as e:
                logger.warning(f"Failed to remove ephemeral asset {path}: {e}")

    async def __aenter__(self) -> "AssetScope":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()
