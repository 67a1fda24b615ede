from __future__ import annotations
import logging
from typing import Any, Dict

from .config import ResponderConfig
from .model import ByteRange, MediaRangeError, ResponseDescriptor
from .ranges import resolve_range
from .stream import AsyncByteSource, ByteSource

logger = logging.getLogger(__name__)


def build_headers(media_type: str, resource_length: int, byte_range: ByteRange | None,
                  cache_control: str | None = "no-cache") -> Dict[str, str]:
    """Return response headers in wire order for a full or partial response."""
    content_length = byte_range.length if byte_range is not None else resource_length
    headers = {
        "Content-Type": media_type,
        "Content-Length": str(content_length),
    }
    if byte_range is not None:
        headers["Accept-Ranges"] = "bytes"
        headers["Content-Range"] = byte_range.content_range(resource_length)
    if cache_control:
        headers["Cache-Control"] = cache_control
    return headers


def _plan(identifier: Any, resource_length: int, range_header: str | None) -> ByteRange | None:
    """Validate the request against the current length; None means full content."""
    if range_header is None:
        logger.info("Returning all %d bytes of %s", resource_length, identifier)
        return None
    try:
        byte_range = resolve_range(range_header, resource_length)
    except MediaRangeError as e:
        logger.warning("Rejecting request for %s: %s", identifier, e)
        raise
    logger.info("Returning bytes %d-%d of %s", byte_range.start, byte_range.end, identifier)
    return byte_range


class RangeResponder:
    """Turns (identifier, Range header) into a ResponseDescriptor.

    The resolver is injected so that one responder can front any number of
    resources; no state survives between calls.
    """

    def __init__(self, resolver, config: ResponderConfig | None = None):
        self.resolver = resolver
        self.config = config or ResponderConfig()

    def respond(self, identifier: Any = None, range_header: str | None = None) -> ResponseDescriptor:
        resource = self.resolver.resolve(identifier)
        resource_length = resource.size()
        logger.debug("Resource %s is %d bytes", identifier, resource_length)

        byte_range = _plan(identifier, resource_length, range_header)
        start, end = (byte_range.start, byte_range.end) if byte_range is not None else (0, resource_length - 1)
        return ResponseDescriptor(
            status=200 if byte_range is None else 206,
            headers=build_headers(self.config.media_type or resource.media_type, resource_length,
                                  byte_range, self.config.cache_control),
            body=ByteSource(resource, start, end, chunk_size=self.config.chunk_size),
            resource_length=resource_length,
            byte_range=byte_range,
            identifier=identifier,
        )


class AsyncRangeResponder:
    """Asynchronous RangeResponder over AsyncResource objects."""

    def __init__(self, resolver, config: ResponderConfig | None = None):
        self.resolver = resolver
        self.config = config or ResponderConfig()

    async def respond(self, identifier: Any = None, range_header: str | None = None) -> ResponseDescriptor:
        resource = await self.resolver.resolve_async(identifier)
        resource_length = await resource.size()
        logger.debug("Resource %s is %d bytes", identifier, resource_length)

        byte_range = _plan(identifier, resource_length, range_header)
        start, end = (byte_range.start, byte_range.end) if byte_range is not None else (0, resource_length - 1)
        return ResponseDescriptor(
            status=200 if byte_range is None else 206,
            headers=build_headers(self.config.media_type or resource.media_type, resource_length,
                                  byte_range, self.config.cache_control),
            body=AsyncByteSource(resource, start, end, chunk_size=self.config.chunk_size),
            resource_length=resource_length,
            byte_range=byte_range,
            identifier=identifier,
        )
