"""Source backed by an in-memory, generator, or async iterable."""

from __future__ import annotations

from typing import Any, AsyncIterable, AsyncIterator, Iterable, Iterator, Optional, Union

from ingestion.exceptions import SourceError
from ingestion.sources.base import ChunkSource

ChunkLike = Union[bytes, bytearray, memoryview, str]


class IterableSource(ChunkSource):
    """Yield one item of ``iterable`` per pull.

    Sync and async iterables are both accepted. ``str`` items are encoded
    with ``encoding``; other bytes-like items are converted to ``bytes``.
    Exceptions raised by the iterable reach the caller unchanged.

    Example:
        source = IterableSource([b"a", b"b"])
    """

    source_type = "iterable"

    def __init__(
        self,
        iterable: Union[Iterable[ChunkLike], AsyncIterable[ChunkLike]],
        encoding: str = "utf-8",
    ) -> None:
        super().__init__()
        self.encoding = encoding
        self._async_iter: Optional[AsyncIterator[ChunkLike]] = None
        self._sync_iter: Optional[Iterator[ChunkLike]] = None
        if hasattr(iterable, "__aiter__"):
            self._async_iter = iterable.__aiter__()  # type: ignore[union-attr]
        elif hasattr(iterable, "__iter__"):
            self._sync_iter = iter(iterable)  # type: ignore[arg-type]
        else:
            raise TypeError(
                f"IterableSource needs an iterable, got {type(iterable).__name__}"
            )

    async def _read_next(self) -> Optional[bytes]:
        if self._async_iter is not None:
            try:
                item = await self._async_iter.__anext__()
            except StopAsyncIteration:
                return None
        else:
            try:
                item = next(self._sync_iter)  # type: ignore[arg-type]
            except StopIteration:
                return None
        return self._to_bytes(item)

    def _to_bytes(self, item: Any) -> bytes:
        if isinstance(item, bytes):
            return item
        if isinstance(item, (bytearray, memoryview)):
            return bytes(item)
        if isinstance(item, str):
            return item.encode(self.encoding)
        raise SourceError(
            f"Iterable produced a {type(item).__name__}, expected bytes or str",
            source_type=self.source_type,
        )

    async def _close(self) -> None:
        if self._async_iter is not None:
            aclose = getattr(self._async_iter, "aclose", None)
            if aclose is not None:
                await aclose()
        elif self._sync_iter is not None:
            close = getattr(self._sync_iter, "close", None)
            if close is not None:
                close()
