"""Stable public imports for `blobstore_core`.

Lower-level utilities (listing pages, socket sandbox, client factory) should be
imported from their submodules explicitly.
"""

from blobstore_core.config import BlobStoreSettings, load_settings_from_env
from blobstore_core.container import S3BlobContainer
from blobstore_core.errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreError,
    BlobStoreInitError,
    BucketNotFoundError,
    SettingsError,
    SocketAccessDeniedError,
)
from blobstore_core.models import BlobMetadata
from blobstore_core.paths import BlobPath
from blobstore_core.store import DELETE_OBJECTS_LIMIT, S3BlobStore

__all__ = [
    "DELETE_OBJECTS_LIMIT",
    "BlobAlreadyExistsError",
    "BlobMetadata",
    "BlobNotFoundError",
    "BlobPath",
    "BlobStoreError",
    "BlobStoreInitError",
    "BlobStoreSettings",
    "BucketNotFoundError",
    "S3BlobContainer",
    "S3BlobStore",
    "SettingsError",
    "SocketAccessDeniedError",
    "load_settings_from_env",
]
