"""Base protocols and shared types for I/O layer."""

from typing import Any, AsyncIterator, Iterator, Protocol, runtime_checkable

from ..core.model import StreamInterrupted


class RangeNotSupportedError(StreamInterrupted):
    """Raised when a remote origin ignores Range and its size > RANGE_FALLBACK_MAX."""


RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB
DEFAULT_CHUNK_SIZE = 64 * 1024         # 64 KB
DEFAULT_MEDIA_TYPE = "video/mp4"


@runtime_checkable
class Resource(Protocol):
    """Protocol for synchronous byte-addressable resources."""

    media_type: str

    def size(self) -> int:
        """Return the current length in bytes.
        If the resource cannot be stat'ed → raise ResourceUnavailable.
        """
        ...

    def iter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Lazily yield bytes ``[start, end]`` (inclusive).
        The handle is acquired on first iteration and released by close().
        """
        ...


@runtime_checkable
class AsyncResource(Protocol):
    """Protocol for asynchronous byte-addressable resources."""

    media_type: str

    async def size(self) -> int:
        ...

    def aiter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        ...


@runtime_checkable
class ResourceResolver(Protocol):
    """Maps a request identifier onto a Resource."""

    def resolve(self, identifier: Any) -> Resource:
        ...


@runtime_checkable
class AsyncResourceResolver(Protocol):
    """Maps a request identifier onto an AsyncResource."""

    async def resolve_async(self, identifier: Any) -> AsyncResource:
        ...
