"""Local file and in-memory resources."""

import asyncio
import io
import mimetypes
import os
import stat
from pathlib import Path
from typing import BinaryIO, Union

from ..core.model import ResourceUnavailable, StreamInterrupted
from .base import DEFAULT_CHUNK_SIZE, DEFAULT_MEDIA_TYPE


def guess_media_type(name: Union[Path, str]) -> str:
    """Return the media type for a file name, falling back to DEFAULT_MEDIA_TYPE."""
    media_type, _ = mimetypes.guess_type(str(name))
    return media_type or DEFAULT_MEDIA_TYPE


class FileResource:
    """Resource backed by a file on disk; every request opens its own handle."""

    def __init__(self, path: Union[Path, str], media_type: str | None = None):
        self.path = Path(path)
        self.media_type = media_type or guess_media_type(self.path)

    def size(self) -> int:
        """Return the file's current size (stat'ed on every call)."""
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            raise ResourceUnavailable(self.path, "file not found", status_code=404) from None
        except OSError as e:
            raise ResourceUnavailable(self.path, str(e)) from e
        if not stat.S_ISREG(st.st_mode):
            raise ResourceUnavailable(self.path, "not a regular file", status_code=404)
        if not os.access(self.path, os.R_OK):
            raise ResourceUnavailable(self.path, "permission denied")
        return st.st_size

    def _open(self) -> BinaryIO:
        try:
            return open(self.path, "rb")
        except FileNotFoundError:
            raise ResourceUnavailable(self.path, "file not found", status_code=404) from None
        except OSError as e:
            raise ResourceUnavailable(self.path, str(e)) from e

    def iter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Yield bytes ``[start, end]``; the file is opened on first iteration."""
        with self._open() as handle:
            handle.seek(start)
            remaining = end - start + 1
            while remaining > 0:
                chunk = handle.read(min(chunk_size, remaining))
                if not chunk:
                    raise StreamInterrupted(
                        f"{self.path} ended early: {remaining} bytes short of offset {end}"
                    )
                remaining -= len(chunk)
                yield chunk

    def __repr__(self) -> str:
        return f"FileResource({str(self.path)!r})"


class MemoryResource:
    """Resource over bytes already held in memory."""

    def __init__(self, data: Union[bytes, bytearray, memoryview, BinaryIO], media_type: str = DEFAULT_MEDIA_TYPE):
        if hasattr(data, 'read'):
            # For BytesIO and friends, read all data upfront
            current_pos = data.tell()
            data.seek(0)
            payload = data.read()
            data.seek(current_pos)
            data = payload
        self._data = bytes(data)
        self.media_type = media_type

    @property
    def data(self) -> bytes:
        return self._data

    def size(self) -> int:
        return len(self._data)

    def iter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if end >= len(self._data):
            raise StreamInterrupted(f"Requested offset {end} beyond {len(self._data)} bytes")
        view = memoryview(self._data)
        pos = start
        while pos <= end:
            stop = min(pos + chunk_size, end + 1)
            yield bytes(view[pos:stop])
            pos = stop

    def __repr__(self) -> str:
        return f"MemoryResource({len(self._data)} bytes)"


class AsyncFileResource:
    """Asynchronous file resource - thin wrapper around the sync resource."""

    def __init__(self, path: Union[Path, str], media_type: str | None = None):
        self._sync_resource = FileResource(path, media_type)

    @property
    def path(self) -> Path:
        return self._sync_resource.path

    @property
    def media_type(self) -> str:
        return self._sync_resource.media_type

    async def size(self) -> int:
        return await asyncio.to_thread(self._sync_resource.size)

    async def aiter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Drive the sync iterator one chunk at a time in a worker thread."""
        chunks = self._sync_resource.iter_range(start, end, chunk_size)
        try:
            while True:
                pending = asyncio.ensure_future(asyncio.to_thread(next, chunks, None))
                try:
                    chunk = await asyncio.shield(pending)
                except asyncio.CancelledError:
                    # The generator cannot be closed while a worker thread is inside it
                    await asyncio.wait([pending])
                    if not pending.cancelled():
                        pending.exception()
                    raise
                if chunk is None:
                    break
                yield chunk
        finally:
            await asyncio.to_thread(chunks.close)

    def __repr__(self) -> str:
        return f"AsyncFileResource({str(self.path)!r})"


class AsyncMemoryResource:
    """Asynchronous in-memory resource; no thread hop is needed."""

    def __init__(self, data: Union[bytes, bytearray, memoryview, BinaryIO], media_type: str = DEFAULT_MEDIA_TYPE):
        self._sync_resource = MemoryResource(data, media_type)

    @property
    def media_type(self) -> str:
        return self._sync_resource.media_type

    async def size(self) -> int:
        return self._sync_resource.size()

    async def aiter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        for chunk in self._sync_resource.iter_range(start, end, chunk_size):
            yield chunk


def _file_object_path(source: BinaryIO) -> Path | None:
    """Return the on-disk path behind a file object, if it has a usable one."""
    name = getattr(source, "name", None)
    if isinstance(name, (str, Path)) and os.path.isfile(name):
        return Path(name)
    return None


def open_local_resource(source: Union[Path, str, bytes, BinaryIO], media_type: str | None = None):
    """Create a synchronous local resource."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return MemoryResource(source, media_type or DEFAULT_MEDIA_TYPE)
    if hasattr(source, 'read'):
        # Real files get their own handles per request; buffers are read upfront
        path = _file_object_path(source)
        if path is not None and not isinstance(source, io.BytesIO):
            return FileResource(path, media_type)
        return MemoryResource(source, media_type or DEFAULT_MEDIA_TYPE)
    return FileResource(source, media_type)


async def open_local_resource_async(source: Union[Path, str, bytes, BinaryIO], media_type: str | None = None):
    """Create an asynchronous local resource."""
    resource = open_local_resource(source, media_type)
    if isinstance(resource, FileResource):
        return AsyncFileResource(resource.path, resource.media_type)
    return AsyncMemoryResource(resource.data, resource.media_type)
