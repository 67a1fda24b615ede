"""Asynchronous remote-origin resource using httpx."""

import httpx
from typing import Optional

from ..core.model import ResourceUnavailable, StreamInterrupted
from .base import DEFAULT_CHUNK_SIZE, DEFAULT_MEDIA_TYPE, RANGE_FALLBACK_MAX, RangeNotSupportedError
from .http_sync import _unavailable


# Global async client
_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=60.0, follow_redirects=True)
    return _client


async def _askip_to_range(chunks, start: int, end: int):
    """Async variant of _skip_to_range."""
    pos = 0
    async for chunk in chunks:
        chunk_end = pos + len(chunk)
        if chunk_end > start and pos <= end:
            yield chunk[max(start - pos, 0):end + 1 - pos]
        pos = chunk_end
        if pos > end:
            return


class HTTPAsyncResource:
    """Asynchronous remote-origin resource with Range support."""

    def __init__(self, url: str, media_type: Optional[str] = None, *, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._client = client
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._declared_media_type = media_type
        self._origin_media_type: Optional[str] = None

    @property
    def media_type(self) -> str:
        return self._declared_media_type or self._origin_media_type or DEFAULT_MEDIA_TYPE

    async def size(self) -> int:
        """HEAD the origin and return its Content-Length."""
        client = self._client or _get_client()
        try:
            response = await client.head(self.url)
            self.requests_made += 1
        except httpx.RequestError as e:
            raise ResourceUnavailable(self.url, f"HEAD request failed: {e}") from e

        if response.status_code >= 400:
            raise _unavailable(self.url, response.status_code)

        content_length_header = response.headers.get('content-length')
        if content_length_header is None:
            raise ResourceUnavailable(self.url, "origin did not report Content-Length")
        self.content_length = int(content_length_header)

        content_type = response.headers.get('content-type')
        if content_type:
            self._origin_media_type = content_type.split(";")[0].strip()
        return self.content_length

    async def aiter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Stream bytes ``[start, end]`` from the origin with a ranged GET."""
        headers = {'Range': f'bytes={start}-{end}'}
        client = self._client or _get_client()
        try:
            async with client.stream("GET", self.url, headers=headers) as response:
                self.requests_made += 1
                if response.status_code == 206:
                    chunks = response.aiter_bytes(chunk_size)
                elif response.status_code == 200:
                    # Origin ignored Range and is sending the whole body
                    if self.content_length is None or self.content_length >= RANGE_FALLBACK_MAX:
                        raise RangeNotSupportedError("Origin doesn't support ranges and file is too large")
                    chunks = _askip_to_range(response.aiter_bytes(chunk_size), start, end)
                elif response.status_code >= 400:
                    raise _unavailable(self.url, response.status_code)
                else:
                    raise StreamInterrupted(f"Range request failed with status {response.status_code}")

                async for chunk in chunks:
                    yield chunk
        except httpx.HTTPError as e:
            raise StreamInterrupted(f"Origin stream failed: {e}") from e

    def __repr__(self) -> str:
        return f"HTTPAsyncResource({self.url!r})"


async def open_http_resource_async(url: str, media_type: Optional[str] = None, *,
                                   client: Optional[httpx.AsyncClient] = None) -> HTTPAsyncResource:
    """Create an asynchronous HTTP resource."""
    return HTTPAsyncResource(url, media_type, client=client)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
