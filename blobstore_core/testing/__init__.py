"""Test doubles for blobstore_core."""

from blobstore_core.testing.memory_client import ClientOp, InMemoryS3Client

__all__ = ["ClientOp", "InMemoryS3Client"]
