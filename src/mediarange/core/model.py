from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class ByteRange:
    start: int
    end: int                   # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total: int) -> str:
        return f"bytes {self.start}-{self.end}/{total}"


@dataclass(slots=True)
class ResponseDescriptor:
    status: int                # 200 or 206
    headers: Dict[str, str]
    body: Any                  # ByteSource or AsyncByteSource
    resource_length: int
    byte_range: ByteRange | None = None
    identifier: Any = field(default=None, compare=False)

    @property
    def content_length(self) -> int:
        return int(self.headers["Content-Length"])

    @property
    def partial(self) -> bool:
        return self.status == 206


class MediaRangeError(RuntimeError):
    """Base class for every condition the responder surfaces to its host."""
    status_code: int = 500

    @property
    def headers(self) -> Dict[str, str]:
        return {}


class MalformedRange(MediaRangeError):
    """Raised when a Range header does not match the single-range grammar."""
    status_code = 400

    def __init__(self, header: str):
        super().__init__(f"Malformed Range header: {header!r}")
        self.header = header


class UnsatisfiableRange(MediaRangeError):
    """Raised when a well-formed range falls outside the resource."""
    status_code = 416

    def __init__(self, header: str, resource_length: int):
        super().__init__(
            f"Range {header!r} not satisfiable for resource of {resource_length} bytes"
        )
        self.header = header
        self.resource_length = resource_length

    @property
    def headers(self) -> Dict[str, str]:
        return {"Content-Range": f"bytes */{self.resource_length}"}


class ResourceUnavailable(MediaRangeError):
    """Raised when a resource cannot be resolved, stat'ed or opened."""

    def __init__(self, identifier: Any, reason: str, *, status_code: int = 500):
        super().__init__(f"Resource {identifier!s} unavailable: {reason}")
        self.identifier = identifier
        self.status_code = status_code


class StreamInterrupted(MediaRangeError):
    """Raised when a byte source fails after its headers were produced."""
    pass
