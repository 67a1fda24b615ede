from __future__ import annotations
from typing import Any, Dict, Iterable

from .model import MediaRangeError, ResponseDescriptor


def descriptor_asdict(desc: ResponseDescriptor, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict of the descriptor (body excluded), optionally filtered."""
    payload: Dict[str, Any] = {
        "status": desc.status,
        "headers": dict(desc.headers),
        "resource_length": desc.resource_length,
        "range": None,
    }
    if desc.byte_range is not None:
        payload["range"] = {"start": desc.byte_range.start, "end": desc.byte_range.end}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload["success"] = True
    return payload


def error_asdict(exc: BaseException) -> Dict[str, Any]:
    status = exc.status_code if isinstance(exc, MediaRangeError) else 500
    payload: Dict[str, Any] = {"success": False, "error": str(exc), "status": status}
    headers = exc.headers if isinstance(exc, MediaRangeError) else {}
    if headers:
        payload["headers"] = dict(headers)
    return payload
