from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import IO, TYPE_CHECKING

from blobstore_core.errors import BlobNotFoundError
from blobstore_core.models import BlobMetadata
from blobstore_core.paths import BlobPath, join_key

if TYPE_CHECKING:
    from blobstore_core.store import S3BlobStore


def _check_blob_name(blob_name: str) -> str:
    if not blob_name:
        raise ValueError("blob name is required")
    return blob_name


class S3BlobContainer:
    """Blobs under one ``BlobPath`` of an ``S3BlobStore``, addressed by relative name."""

    def __init__(self, path: BlobPath, blob_store: S3BlobStore) -> None:
        self._path = path
        self._blob_store = blob_store
        self._key_path = path.build_as_string()

    @property
    def path(self) -> BlobPath:
        return self._path

    @property
    def key_path(self) -> str:
        return self._key_path

    def __repr__(self) -> str:
        return f"S3BlobContainer(bucket={self._blob_store.bucket!r}, path={self._key_path!r})"

    def build_key(self, blob_name: str) -> str:
        return join_key(self._key_path, _check_blob_name(blob_name))

    def blob_exists(self, blob_name: str) -> bool:
        return self._blob_store.blob_exists(self.build_key(blob_name))

    def read_blob(self, blob_name: str) -> IO[bytes]:
        """Return an open stream over the blob. The caller owns and must close it."""

        return self._blob_store.read_blob(self.build_key(blob_name))

    @contextmanager
    def open_blob(self, blob_name: str) -> Iterator[IO[bytes]]:
        """Context manager over ``read_blob`` that always closes the stream."""

        stream = self.read_blob(blob_name)
        try:
            yield stream
        finally:
            stream.close()

    def write_blob(
        self,
        blob_name: str,
        stream: IO[bytes],
        blob_size: int,
        fail_if_already_exists: bool = True,
    ) -> None:
        self._blob_store.write_blob(
            self.build_key(blob_name), stream, blob_size, fail_if_already_exists
        )

    def delete_blob(self, blob_name: str) -> None:
        self._blob_store.delete_blob(self.build_key(blob_name))

    def delete_blob_ignoring_if_not_exists(self, blob_name: str) -> None:
        try:
            self.delete_blob(blob_name)
        except BlobNotFoundError:
            pass

    def list_blobs(self) -> dict[str, BlobMetadata]:
        return self._blob_store.list_blobs_by_prefix(self._key_path)

    def list_blobs_by_prefix(self, blob_name_prefix: str | None) -> dict[str, BlobMetadata]:
        return self._blob_store.list_blobs_by_prefix(self._key_path, blob_name_prefix)

    def move(self, source_blob_name: str, target_blob_name: str) -> None:
        self._blob_store.move(self.build_key(source_blob_name), self.build_key(target_blob_name))

    def delete(self) -> None:
        """Delete every blob under this container's path."""

        self._blob_store.delete(self._path)
