"""Single byte-range grammar: ``bytes=<start>-[<end>]``."""

from __future__ import annotations
import re

from .model import ByteRange, MalformedRange, UnsatisfiableRange

RANGE_RE = re.compile(r"bytes=(\d+)-(\d+)?")


def parse_range_header(header: str) -> tuple[int, int | None]:
    """Return ``(start, end)`` with ``end`` None when the header omits it.

    Only a single range is accepted; suffix ranges (``bytes=-500``) and
    multi-range lists are rejected as malformed.
    """
    match = RANGE_RE.fullmatch(header.strip())
    if match is None:
        raise MalformedRange(header)
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) is not None else None
    return start, end


def resolve_range(header: str, resource_length: int) -> ByteRange:
    """Parse `header` and validate it against a resource of `resource_length` bytes."""
    start, end = parse_range_header(header)
    if end is None:
        end = resource_length - 1
    if start < 0 or end < start or end > resource_length - 1:
        raise UnsatisfiableRange(header, resource_length)
    return ByteRange(start, end)
