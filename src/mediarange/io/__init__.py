"""I/O layer for mediarange - resources that deliver exact byte spans to the responder."""

# Re-export these for import convenience
from .base import (Resource, AsyncResource, ResourceResolver, AsyncResourceResolver,
                   RangeNotSupportedError, DEFAULT_CHUNK_SIZE, DEFAULT_MEDIA_TYPE)
from .local import open_local_resource, open_local_resource_async
from .http_sync import open_http_resource
from .http_async import open_http_resource_async
from .resolver import StaticResolver, MappingResolver, DirectoryResolver


def _is_url(source) -> bool:
    return isinstance(source, str) and source.startswith(('http://', 'https://'))


def open_resource(source, media_type=None):
    """Factory function to create appropriate Resource based on source type."""
    if _is_url(source):
        return open_http_resource(source, media_type)
    return open_local_resource(source, media_type)


async def open_resource_async(source, media_type=None):
    """Factory function to create appropriate AsyncResource based on source type."""
    if _is_url(source):
        return await open_http_resource_async(source, media_type)
    return await open_local_resource_async(source, media_type)
