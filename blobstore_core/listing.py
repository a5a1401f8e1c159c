"""Marker-based listing of object keys under a prefix.

Pages are fetched strictly in sequence: each request resumes from the
continuation token of the page before it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from blobstore_core.errors import BlobStoreError
from blobstore_core.models import BlobMetadata
from blobstore_core.paths import strip_key_prefix
from blobstore_core.socket_access import privileged


@dataclass(frozen=True)
class ObjectSummary:
    key: str
    size: int


@dataclass(frozen=True)
class ListingPage:
    summaries: Sequence[ObjectSummary]
    next_marker: str | None
    is_truncated: bool


def _parse_page(response: Mapping[str, Any]) -> ListingPage:
    summaries = [
        ObjectSummary(key=str(obj["Key"]), size=int(obj.get("Size") or 0))
        for obj in response.get("Contents", []) or []
    ]
    return ListingPage(
        summaries=summaries,
        next_marker=response.get("NextContinuationToken"),
        is_truncated=bool(response.get("IsTruncated")),
    )


def iter_listing_pages(
    client: Any, bucket: str, prefix: str, *, page_size: int | None = None
) -> Iterator[ListingPage]:
    """Yield listing pages for ``prefix`` until the store reports no more results."""

    marker: str | None = None
    while True:
        kwargs: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if marker is not None:
            kwargs["ContinuationToken"] = marker
        if page_size is not None:
            kwargs["MaxKeys"] = page_size
        page = _parse_page(client.list_objects_v2(**kwargs))
        yield page
        if not page.is_truncated:
            return
        if not page.next_marker:
            raise BlobStoreError(
                f"Truncated listing of [{bucket}/{prefix}] returned no continuation token"
            )
        marker = page.next_marker


def list_blobs_by_prefix(
    client: Any,
    bucket: str,
    key_path: str,
    prefix: str | None = None,
    *,
    page_size: int | None = None,
) -> dict[str, BlobMetadata]:
    """Map blob names relative to ``key_path`` to their metadata.

    ``prefix`` narrows the listing but is not stripped from the returned names.
    """

    actual_prefix = key_path + (prefix or "")
    blobs: dict[str, BlobMetadata] = {}
    with privileged():
        for page in iter_listing_pages(client, bucket, actual_prefix, page_size=page_size):
            for summary in page.summaries:
                name = strip_key_prefix(key_path, summary.key)
                blobs[name] = BlobMetadata(name=name, length=summary.size)
    return blobs
