from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import IO, TYPE_CHECKING, Any

from botocore.exceptions import ClientError

from blobstore_core.container import S3BlobContainer
from blobstore_core.errors import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreError,
    BucketNotFoundError,
)
from blobstore_core.listing import list_blobs_by_prefix
from blobstore_core.models import BlobMetadata
from blobstore_core.observability import log_event, store_log_fields
from blobstore_core.paths import BlobPath, join_key
from blobstore_core.socket_access import do_privileged, do_privileged_void, privileged

if TYPE_CHECKING:
    from blobstore_core.config import BlobStoreSettings

logger = logging.getLogger(__name__)

# Maximum number of keys accepted by a single S3 DeleteObjects request.
DELETE_OBJECTS_LIMIT = 1000

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}
_PRECONDITION_CODES = {"412", "PreconditionFailed", "409", "ConditionalRequestConflict"}


def client_error_code(exc: ClientError) -> str:
    response = getattr(exc, "response", None) or {}
    error = response.get("Error") or {}
    code = str(error.get("Code") or "")
    if code:
        return code
    status = (response.get("ResponseMetadata") or {}).get("HTTPStatusCode")
    return str(status or "")


def iter_delete_batches(keys: Iterable[str], *, limit: int) -> Iterator[list[str]]:
    """Group ``keys`` into batches of at most ``limit // 2`` keys.

    A batch is flushed when it reaches the threshold, or when the input is
    exhausted and the batch is not empty.
    """

    threshold = limit // 2
    batch: list[str] = []
    for key in keys:
        batch.append(key)
        if len(batch) >= threshold:
            yield batch
            batch = []
    if batch:
        yield batch


class S3BlobStore:
    """Blob store backed by a single bucket of an S3-compatible object store.

    All methods taking a blob name expect the full key (blob path prefix plus
    relative name). ``S3BlobContainer`` is the path-relative view callers use.
    """

    def __init__(
        self,
        bucket: str,
        client: Any,
        *,
        delete_limit: int = DELETE_OBJECTS_LIMIT,
        page_size: int | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("bucket is required")
        if delete_limit < 2:
            raise ValueError("delete_limit must be at least 2")
        self._client = client
        self._bucket = bucket
        self._delete_limit = delete_limit
        self._page_size = page_size
        if not self.does_bucket_exist(bucket):
            raise BucketNotFoundError(bucket)
        log_event(logger, "blobstore.init", **store_log_fields(bucket, delete_limit=delete_limit))

    @classmethod
    def from_settings(cls, settings: BlobStoreSettings) -> S3BlobStore:
        from blobstore_core.client import create_s3_client

        return cls(
            settings.bucket,
            create_s3_client(settings),
            delete_limit=settings.delete_limit,
            page_size=settings.page_size,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def client(self) -> Any:
        return self._client

    @property
    def delete_limit(self) -> int:
        return self._delete_limit

    def __enter__(self) -> S3BlobStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"S3BlobStore(bucket={self._bucket!r})"

    def blob_container(self, path: BlobPath) -> S3BlobContainer:
        return S3BlobContainer(path, self)

    def does_bucket_exist(self, bucket: str) -> bool:
        def _head() -> bool:
            try:
                self._client.head_bucket(Bucket=bucket)
            except ClientError as exc:
                if client_error_code(exc) in _NOT_FOUND_CODES:
                    return False
                raise
            return True

        return do_privileged(_head)

    def list_blobs_by_prefix(
        self, key_path: str, prefix: str | None = None
    ) -> dict[str, BlobMetadata]:
        return list_blobs_by_prefix(
            self._client, self._bucket, key_path, prefix, page_size=self._page_size
        )

    def blob_exists(self, blob_name: str) -> bool:
        def _head() -> bool:
            try:
                self._client.head_object(Bucket=self._bucket, Key=blob_name)
            except ClientError as exc:
                if client_error_code(exc) in _NOT_FOUND_CODES:
                    return False
                raise
            return True

        return do_privileged(_head)

    def read_blob(self, blob_name: str) -> IO[bytes]:
        """Open a read stream for ``blob_name``. The caller must close it."""

        def _get() -> IO[bytes]:
            try:
                response = self._client.get_object(Bucket=self._bucket, Key=blob_name)
            except ClientError as exc:
                if client_error_code(exc) in _NOT_FOUND_CODES:
                    raise BlobNotFoundError(
                        f"Blob [{blob_name}] does not exist in bucket [{self._bucket}]"
                    ) from exc
                raise
            return response["Body"]

        return do_privileged(_get)

    def write_blob(
        self,
        blob_name: str,
        stream: IO[bytes],
        blob_size: int,
        fail_if_already_exists: bool,
    ) -> None:
        kwargs: dict[str, Any] = {
            "Bucket": self._bucket,
            "Key": blob_name,
            "Body": stream,
            "ContentLength": blob_size,
        }
        if fail_if_already_exists:
            kwargs["IfNoneMatch"] = "*"

        def _put() -> None:
            try:
                self._client.put_object(**kwargs)
            except ClientError as exc:
                if fail_if_already_exists and client_error_code(exc) in _PRECONDITION_CODES:
                    raise BlobAlreadyExistsError(
                        f"Blob [{blob_name}] already exists in bucket [{self._bucket}]"
                    ) from exc
                raise

        do_privileged_void(_put)

    def delete_blob(self, blob_name: str) -> None:
        def _delete() -> None:
            try:
                self._client.delete_object(Bucket=self._bucket, Key=blob_name)
            except ClientError as exc:
                if client_error_code(exc) in _NOT_FOUND_CODES:
                    raise BlobNotFoundError(
                        f"Blob [{blob_name}] does not exist in bucket [{self._bucket}]"
                    ) from exc
                raise

        do_privileged_void(_delete)

    def delete(self, path: BlobPath) -> None:
        """Delete every blob under ``path`` using bounded bulk-delete requests."""

        key_path = path.build_as_string()
        with privileged():
            blobs = self.list_blobs_by_prefix(key_path)
            keys = (join_key(key_path, name) for name in blobs)
            deleted = 0
            batches = 0
            for batch in iter_delete_batches(keys, limit=self._delete_limit):
                self._delete_objects(batch)
                deleted += len(batch)
                batches += 1
                log_event(
                    logger,
                    "blobstore.delete_batch",
                    level=logging.DEBUG,
                    **store_log_fields(self._bucket, prefix=key_path, batch=batches, keys=len(batch)),
                )
        log_event(
            logger,
            "blobstore.delete",
            **store_log_fields(self._bucket, prefix=key_path, deleted=deleted, batches=batches),
        )

    def _delete_objects(self, keys: list[str]) -> None:
        if len(keys) > self._delete_limit:
            raise ValueError(f"delete batch of {len(keys)} keys exceeds limit {self._delete_limit}")
        response = self._client.delete_objects(
            Bucket=self._bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
        )
        errors = (response or {}).get("Errors") or []
        if errors:
            failed = ", ".join(
                f"{error.get('Key')} ({error.get('Code') or 'unknown'})" for error in errors
            )
            raise BlobStoreError(
                f"Failed to delete {len(errors)} blob(s) from bucket [{self._bucket}]: {failed}"
            )

    def move(self, source_blob_name: str, target_blob_name: str) -> None:
        """Copy ``source_blob_name`` to ``target_blob_name`` then delete the source.

        Not atomic: if the delete fails both objects remain. Moving a blob onto
        itself is rejected because the delete would remove the only copy.
        """

        if source_blob_name == target_blob_name:
            raise ValueError(f"Cannot move blob [{source_blob_name}] onto itself")

        def _move() -> None:
            self._client.copy_object(
                Bucket=self._bucket,
                Key=target_blob_name,
                CopySource={"Bucket": self._bucket, "Key": source_blob_name},
            )
            self._client.delete_object(Bucket=self._bucket, Key=source_blob_name)

        do_privileged_void(_move)
        log_event(
            logger,
            "blobstore.move",
            **store_log_fields(self._bucket, source=source_blob_name, target=target_blob_name),
        )

    def close(self) -> None:
        do_privileged_void(self._client.close)
