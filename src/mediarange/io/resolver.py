"""Resolvers map request identifiers onto resources for the responder."""

from __future__ import annotations
from pathlib import Path
from typing import Any, Mapping, Union

from ..core.model import ResourceUnavailable


class StaticResolver:
    """Serve one fixed resource regardless of the identifier."""

    def __init__(self, resource):
        self.resource = resource

    def resolve(self, identifier: Any = None):
        return self.resource

    async def resolve_async(self, identifier: Any = None):
        return self.resource


class MappingResolver:
    """Look identifiers up in a mapping of sources (paths, URLs, bytes).

    A fresh resource is opened on every resolution; entries that already are
    resource objects are returned as-is.
    """

    def __init__(self, mapping: Mapping[str, Any]):
        self.mapping = dict(mapping)

    def _lookup(self, identifier: Any):
        try:
            return self.mapping[identifier]
        except KeyError:
            raise ResourceUnavailable(identifier, "unknown identifier", status_code=404) from None

    def resolve(self, identifier: Any):
        from . import open_resource

        source = self._lookup(identifier)
        return source if hasattr(source, "iter_range") else open_resource(source)

    async def resolve_async(self, identifier: Any):
        from . import open_resource_async

        source = self._lookup(identifier)
        return source if hasattr(source, "aiter_range") else await open_resource_async(source)


class DirectoryResolver:
    """Resolve identifiers as relative file paths beneath `root`."""

    def __init__(self, root: Union[Path, str]):
        self.root = Path(root).resolve()

    def path_for(self, identifier: Any) -> Path:
        relative = str(identifier or "").strip("/")
        if not relative:
            raise ResourceUnavailable(identifier, "empty path", status_code=404)
        candidate = (self.root / relative).resolve()
        if not candidate.is_relative_to(self.root):
            raise ResourceUnavailable(identifier, "path escapes the served directory", status_code=404)
        return candidate

    def resolve(self, identifier: Any):
        from .local import FileResource

        return FileResource(self.path_for(identifier))

    async def resolve_async(self, identifier: Any):
        from .local import AsyncFileResource

        return AsyncFileResource(self.path_for(identifier))
