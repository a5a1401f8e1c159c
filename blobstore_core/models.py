from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BlobMetadata:
    """Name (relative to its blob path) and size in bytes of a stored blob."""

    name: str
    length: int
