"""mediarange - serve media files as full or single-range partial responses."""

import os

from .core.model import (ByteRange, ResponseDescriptor, MediaRangeError, MalformedRange,
                         UnsatisfiableRange, ResourceUnavailable, StreamInterrupted)
from .core.config import ResponderConfig
from .core.ranges import parse_range_header, resolve_range
from .core.responder import RangeResponder, AsyncRangeResponder
from .core.stream import ByteSource, AsyncByteSource
from .io import open_resource, open_resource_async, StaticResolver, MappingResolver, DirectoryResolver


def _identifier(source, resource):
    # Paths and URLs name themselves; raw payloads are named by their resource
    return source if isinstance(source, (str, os.PathLike)) else resource


def respond(source, range_header: str | None = None, *, config: ResponderConfig | None = None,
            media_type: str | None = None) -> ResponseDescriptor:
    """Answer one request for a source (path, URL, bytes, or file-like object)."""
    resource = open_resource(source, media_type)
    return RangeResponder(StaticResolver(resource), config).respond(_identifier(source, resource), range_header)


async def respond_async(source, range_header: str | None = None, *, config: ResponderConfig | None = None,
                        media_type: str | None = None) -> ResponseDescriptor:
    """Answer one request asynchronously for a source (path, URL, bytes, or file-like object)."""
    resource = await open_resource_async(source, media_type)
    return await AsyncRangeResponder(StaticResolver(resource), config).respond(_identifier(source, resource), range_header)


__all__ = [
    "respond", "respond_async",
    "RangeResponder", "AsyncRangeResponder", "ResponderConfig",
    "ByteSource", "AsyncByteSource", "ByteRange", "ResponseDescriptor",
    "parse_range_header", "resolve_range",
    "open_resource", "open_resource_async",
    "StaticResolver", "MappingResolver", "DirectoryResolver",
    "MediaRangeError", "MalformedRange", "UnsatisfiableRange", "ResourceUnavailable", "StreamInterrupted",
]
