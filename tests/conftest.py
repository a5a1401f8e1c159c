"""Global pytest configuration.

Maintenance scripts live in the top-level `scripts/` folder and are imported in
tests as `scripts.*`, so the project root is put on `sys.path`.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from blobstore_core.store import S3BlobStore
from blobstore_core.testing import InMemoryS3Client


def pytest_configure() -> None:
    root_dir = Path(__file__).resolve().parents[1]

    raw = str(root_dir)
    if raw not in sys.path:
        sys.path.insert(0, raw)


@pytest.fixture
def s3_client() -> InMemoryS3Client:
    return InMemoryS3Client({"bucket": {}})


@pytest.fixture
def store(s3_client: InMemoryS3Client) -> S3BlobStore:
    return S3BlobStore("bucket", s3_client)
