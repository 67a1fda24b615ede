"""
Configuration for the range responder.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ..io.base import DEFAULT_CHUNK_SIZE


@dataclass(slots=True)
class ResponderConfig:
    """Per-responder settings; every field has a working default."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    cache_control: Optional[str] = "no-cache"
    media_type: Optional[str] = None   # None → the resource's declared type

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

    @classmethod
    def load(cls) -> "ResponderConfig":
        """Build a config from MEDIARANGE_* environment variables."""
        raw_chunk_size = os.getenv("MEDIARANGE_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))
        try:
            chunk_size = int(raw_chunk_size)
        except ValueError:
            raise ValueError(f"MEDIARANGE_CHUNK_SIZE must be an integer, got {raw_chunk_size!r}") from None
        cache_control = os.getenv("MEDIARANGE_CACHE_CONTROL", "no-cache").strip() or None
        media_type = os.getenv("MEDIARANGE_MEDIA_TYPE", "").strip() or None
        return cls(chunk_size=chunk_size, cache_control=cache_control, media_type=media_type)
