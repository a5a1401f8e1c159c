from __future__ import annotations


class BlobStoreError(Exception):
    """Base error for blobstore_core."""


class BlobStoreInitError(BlobStoreError):
    """Raised when a blob store cannot be initialized. The store must not be used."""


class BucketNotFoundError(BlobStoreInitError):
    """Raised when the target bucket does not exist."""

    def __init__(self, bucket: str) -> None:
        super().__init__(f"Bucket [{bucket}] does not exist")
        self.bucket = bucket


class BlobNotFoundError(BlobStoreError, FileNotFoundError):
    """Raised when reading a blob that does not exist."""


class BlobAlreadyExistsError(BlobStoreError, FileExistsError):
    """Raised when a write with ``fail_if_already_exists`` hits an occupied key."""


class SettingsError(BlobStoreError, ValueError):
    """Raised when store settings are missing or malformed."""


class SocketAccessDeniedError(PermissionError):
    """Raised by the socket sandbox for network access outside a privileged scope."""
