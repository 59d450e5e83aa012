"""Local filesystem sink."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ingestion.exceptions import SinkError

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


class FileSink:
    """Write accepted chunks to ``path``.

    With ``atomic`` (the default) bytes go to ``<path>.partial`` and the file
    is renamed into place on finalize, so readers never observe a half
    written target. Abort closes the handle and removes whatever this sink
    wrote. Blocking file I/O runs in a worker thread.
    """

    sink_type = "file"

    def __init__(
        self,
        path: Union[str, Path],
        atomic: bool = True,
        fsync: bool = False,
    ) -> None:
        self.path = Path(path)
        self.atomic = atomic
        self.fsync = fsync
        self.bytes_written = 0
        self._handle: Optional[BinaryIO] = None
        # closed: no more accepts; finalized/aborted: terminal outcome
        self._closed = False
        self._finalized = False
        self._aborted = False

    @property
    def write_path(self) -> Path:
        if self.atomic:
            return self.path.with_name(self.path.name + PARTIAL_SUFFIX)
        return self.path

    def _open(self) -> BinaryIO:
        self.write_path.parent.mkdir(parents=True, exist_ok=True)
        return self.write_path.open("wb")

    def _error(self, message: str, operation: str, exc: Optional[BaseException] = None) -> SinkError:
        return SinkError(
            message,
            sink_type=self.sink_type,
            operation=operation,
            location=str(self.path),
            original_error=exc,
        )

    async def _ensure_open(self, operation: str) -> BinaryIO:
        if self._closed:
            raise self._error(f"{operation}() called on a closed file sink", operation)
        if self._handle is None:
            try:
                self._handle = await asyncio.to_thread(self._open)
            except OSError as exc:
                raise self._error(f"Cannot open {self.write_path}", operation, exc) from exc
            logger.debug("Opened %s for writing", self.write_path)
        return self._handle

    async def accept(self, chunk: bytes) -> None:
        handle = await self._ensure_open("accept")
        try:
            await asyncio.to_thread(handle.write, chunk)
        except OSError as exc:
            raise self._error(f"Failed to write to {self.write_path}", "accept", exc) from exc
        self.bytes_written += len(chunk)

    def _complete(self, handle: BinaryIO) -> None:
        try:
            handle.flush()
            if self.fsync:
                os.fsync(handle.fileno())
        finally:
            handle.close()
        if self.atomic:
            os.replace(self.write_path, self.path)

    async def finalize(self) -> None:
        # Opening here too means an empty run still produces an (empty) file.
        handle = await self._ensure_open("finalize")
        self._closed = True
        try:
            await asyncio.to_thread(self._complete, handle)
        except OSError as exc:
            raise self._error(f"Failed to finalize {self.path}", "finalize", exc) from exc
        self._handle = None
        self._finalized = True
        logger.info("Wrote %d bytes to %s", self.bytes_written, self.path)

    def _discard(self, handle: Optional[BinaryIO]) -> None:
        if handle is None:
            return
        handle.close()
        self.write_path.unlink(missing_ok=True)

    async def abort(self, error: BaseException) -> None:
        """Close and remove what this sink wrote, including after a failed finalize."""
        if self._finalized or self._aborted:
            return
        self._aborted = True
        self._closed = True
        handle, self._handle = self._handle, None
        logger.warning("Aborting write to %s: %s", self.path, error)
        await asyncio.to_thread(self._discard, handle)
