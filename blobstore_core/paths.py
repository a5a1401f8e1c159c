"""Blob path notation and key helpers.

A blob path is a sequence of segments. Its string form joins the segments with
``/`` and always ends with a trailing ``/`` (the root path builds ``""``). A
blob key is that string followed by the blob's relative name.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

SEPARATOR = "/"


def _check_segment(segment: str) -> str:
    if not segment:
        raise ValueError("blob path segment must not be empty")
    if SEPARATOR in segment:
        raise ValueError(f"blob path segment must not contain '{SEPARATOR}': {segment}")
    return segment


@dataclass(frozen=True)
class BlobPath:
    """Immutable hierarchical blob namespace."""

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            _check_segment(segment)

    @classmethod
    def clean_path(cls) -> BlobPath:
        return cls()

    @classmethod
    def of(cls, *segments: str) -> BlobPath:
        return cls(tuple(segments))

    @classmethod
    def parse(cls, value: str) -> BlobPath:
        """Build a path from ``a/b/c`` notation. Empty parts are ignored."""

        return cls(tuple(part for part in (value or "").split(SEPARATOR) if part))

    def add(self, segment: str) -> BlobPath:
        return BlobPath(self.segments + (_check_segment(segment),))

    def parent(self) -> BlobPath | None:
        if not self.segments:
            return None
        return BlobPath(self.segments[:-1])

    def build_as_string(self) -> str:
        if not self.segments:
            return ""
        return SEPARATOR.join(self.segments) + SEPARATOR

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return f"[{']['.join(self.segments)}]"


def join_key(key_path: str, blob_name: str) -> str:
    return key_path + blob_name


def strip_key_prefix(key_path: str, key: str) -> str:
    """Return the blob name of ``key`` relative to ``key_path``."""

    if not key.startswith(key_path):
        raise ValueError(f"key [{key}] is not under prefix [{key_path}]")
    return key[len(key_path) :]
