"""Local file source reading fixed-size chunks on demand."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ingestion.exceptions import SourceError
from ingestion.sources.base import ChunkSource

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class FileSource(ChunkSource):
    """Read ``path`` in ``chunk_size`` pieces, one read per pull.

    The file is opened on the first pull, so releasing a source that was
    never pulled does not touch the filesystem. Blocking reads run in a
    worker thread to keep the event loop free.
    """

    source_type = "file"

    def __init__(self, path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__()
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.path = Path(path)
        self.chunk_size = chunk_size
        self.bytes_read = 0
        self._handle: Optional[BinaryIO] = None
        self._eof = False

    async def _read_next(self) -> Optional[bytes]:
        if self._eof:
            return None
        try:
            if self._handle is None:
                self._handle = await asyncio.to_thread(self.path.open, "rb")
                logger.debug("Opened %s for reading", self.path)
            data = await asyncio.to_thread(self._handle.read, self.chunk_size)
        except OSError as exc:
            raise SourceError(
                f"Failed to read {self.path}",
                source_type=self.source_type,
                location=str(self.path),
                original_error=exc,
            ) from exc
        if not data:
            self._eof = True
            return None
        self.bytes_read += len(data)
        return data

    async def _close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            await asyncio.to_thread(handle.close)
        except OSError as exc:
            logger.warning("Failed to close %s: %s", self.path, exc)
