"""Synchronous remote-origin resource using requests."""

import requests
from typing import Optional

from ..core.model import ResourceUnavailable, StreamInterrupted
from .base import DEFAULT_CHUNK_SIZE, DEFAULT_MEDIA_TYPE, RANGE_FALLBACK_MAX, RangeNotSupportedError


# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def _unavailable(url: str, status_code: int) -> ResourceUnavailable:
    return ResourceUnavailable(url, f"origin answered {status_code}",
                               status_code=404 if status_code == 404 else 500)


def _skip_to_range(chunks, start: int, end: int):
    """Trim a full-body chunk stream down to bytes ``[start, end]``."""
    pos = 0
    for chunk in chunks:
        chunk_end = pos + len(chunk)
        if chunk_end > start and pos <= end:
            yield chunk[max(start - pos, 0):end + 1 - pos]
        pos = chunk_end
        if pos > end:
            return


class HTTPResource:
    """Resource served by a remote origin that understands Range."""

    def __init__(self, url: str, media_type: Optional[str] = None):
        self.url = url
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._declared_media_type = media_type
        self._origin_media_type: Optional[str] = None
        self._session = _get_session()

    @property
    def media_type(self) -> str:
        return self._declared_media_type or self._origin_media_type or DEFAULT_MEDIA_TYPE

    def size(self) -> int:
        """HEAD the origin and return its Content-Length."""
        try:
            response = self._session.head(self.url, timeout=30, allow_redirects=True)
            self.requests_made += 1
        except requests.RequestException as e:
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

    def iter_range(self, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Stream bytes ``[start, end]`` from the origin with a ranged GET."""
        headers = {'Range': f'bytes={start}-{end}'}
        try:
            response = self._session.get(self.url, headers=headers, stream=True, timeout=30)
            self.requests_made += 1
        except requests.RequestException as e:
            raise StreamInterrupted(f"Range request failed: {e}") from e

        with response:
            if response.status_code == 206:
                chunks = response.iter_content(chunk_size)
            elif response.status_code == 200:
                # Origin ignored Range and is sending the whole body
                if self.content_length is None or self.content_length >= RANGE_FALLBACK_MAX:
                    raise RangeNotSupportedError("Origin doesn't support ranges and file is too large")
                chunks = _skip_to_range(response.iter_content(chunk_size), start, end)
            elif response.status_code >= 400:
                raise _unavailable(self.url, response.status_code)
            else:
                raise StreamInterrupted(f"Range request failed with status {response.status_code}")

            try:
                yield from chunks
            except requests.RequestException as e:
                raise StreamInterrupted(f"Origin stream failed: {e}") from e

    def __repr__(self) -> str:
        return f"HTTPResource({self.url!r})"


def open_http_resource(url: str, media_type: Optional[str] = None) -> HTTPResource:
    """Create a synchronous HTTP resource."""
    return HTTPResource(url, media_type)
