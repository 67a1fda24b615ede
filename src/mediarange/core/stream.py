"""Lazy, forward-only byte sources handed to the host transport."""

from __future__ import annotations
import logging

from .model import MediaRangeError, ResourceUnavailable, StreamInterrupted
from ..io.base import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


class ByteSource:
    """Single-use stream over bytes ``[start, end]`` of a resource.

    Nothing is opened until the first ``next_chunk()``. The underlying handle
    is released on completion, on ``close()`` and on any read failure, so a
    host that stops pulling only has to call ``close()``.
    """

    def __init__(self, resource, start: int, end: int, *, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.start = start
        self.end = end
        self.length = end - start + 1
        self.bytes_read = 0
        self._resource = resource
        self._chunk_size = chunk_size
        self._chunks = None
        self._closed = False

    @property
    def opened(self) -> bool:
        return self._chunks is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def next_chunk(self) -> bytes | None:
        """Return the next chunk, or None once the span is exhausted."""
        if self._closed:
            return None
        if self._chunks is None:
            if self.length == 0:
                self.close()
                return None
            logger.debug("Opening bytes %d-%d", self.start, self.end)
            self._chunks = iter(self._resource.iter_range(self.start, self.end, self._chunk_size))

        try:
            chunk = next(self._chunks)
        except StopIteration:
            self.close()
            raise StreamInterrupted(
                f"Resource ended after {self.bytes_read} of {self.length} bytes"
            ) from None
        except StreamInterrupted:
            self.close()
            raise
        except ResourceUnavailable as e:
            self.close()
            if self.bytes_read == 0:
                raise
            raise StreamInterrupted(f"Read failed at byte {self.start + self.bytes_read}: {e}") from e
        except (MediaRangeError, OSError) as e:
            self.close()
            raise StreamInterrupted(f"Read failed at byte {self.start + self.bytes_read}: {e}") from e
        except BaseException:
            self.close()
            raise

        self.bytes_read += len(chunk)
        if self.bytes_read > self.length:
            self.close()
            raise StreamInterrupted("Resource yielded more bytes than advertised")
        if self.bytes_read == self.length:
            self.close()
        return chunk

    def __iter__(self):
        while (chunk := self.next_chunk()) is not None:
            yield chunk

    def read(self) -> bytes:
        """Drain the remaining span into memory."""
        return b"".join(self)

    def close(self):
        """Release the underlying handle; safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        if self._chunks is not None and hasattr(self._chunks, "close"):
            self._chunks.close()
            logger.debug("Closed bytes %d-%d after %d bytes", self.start, self.end, self.bytes_read)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncByteSource:
    """Asynchronous counterpart of ByteSource over an AsyncResource."""

    def __init__(self, resource, start: int, end: int, *, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.start = start
        self.end = end
        self.length = end - start + 1
        self.bytes_read = 0
        self._resource = resource
        self._chunk_size = chunk_size
        self._chunks = None
        self._closed = False

    @property
    def opened(self) -> bool:
        return self._chunks is not None

    @property
    def closed(self) -> bool:
        return self._closed

    async def next_chunk(self) -> bytes | None:
        if self._closed:
            return None
        if self._chunks is None:
            if self.length == 0:
                await self.aclose()
                return None
            logger.debug("Opening bytes %d-%d", self.start, self.end)
            self._chunks = self._resource.aiter_range(self.start, self.end, self._chunk_size)

        try:
            chunk = await anext(self._chunks)
        except StopAsyncIteration:
            await self.aclose()
            raise StreamInterrupted(
                f"Resource ended after {self.bytes_read} of {self.length} bytes"
            ) from None
        except StreamInterrupted:
            await self.aclose()
            raise
        except ResourceUnavailable as e:
            await self.aclose()
            if self.bytes_read == 0:
                raise
            raise StreamInterrupted(f"Read failed at byte {self.start + self.bytes_read}: {e}") from e
        except (MediaRangeError, OSError) as e:
            await self.aclose()
            raise StreamInterrupted(f"Read failed at byte {self.start + self.bytes_read}: {e}") from e
        except BaseException:
            await self.aclose()
            raise

        self.bytes_read += len(chunk)
        if self.bytes_read > self.length:
            await self.aclose()
            raise StreamInterrupted("Resource yielded more bytes than advertised")
        if self.bytes_read == self.length:
            await self.aclose()
        return chunk

    async def __aiter__(self):
        while (chunk := await self.next_chunk()) is not None:
            yield chunk

    async def read(self) -> bytes:
        return b"".join([chunk async for chunk in self])

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        if self._chunks is not None and hasattr(self._chunks, "aclose"):
            await self._chunks.aclose()
            logger.debug("Closed bytes %d-%d after %d bytes", self.start, self.end, self.bytes_read)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
