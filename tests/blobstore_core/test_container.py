from __future__ import annotations

import io

import pytest

from blobstore_core.errors import BlobAlreadyExistsError, BlobNotFoundError
from blobstore_core.models import BlobMetadata
from blobstore_core.paths import BlobPath
from blobstore_core.store import S3BlobStore
from blobstore_core.testing import InMemoryS3Client


@pytest.fixture
def container(store: S3BlobStore):  # noqa: ANN201
    return store.blob_container(BlobPath.of("indices", "idx-1"))


def test_write_then_read(container, s3_client: InMemoryS3Client) -> None:  # noqa: ANN001
    container.write_blob("meta.dat", io.BytesIO(b"hello"), 5)

    assert s3_client.buckets["bucket"]["indices/idx-1/meta.dat"] == b"hello"
    with container.open_blob("meta.dat") as stream:
        assert stream.read() == b"hello"


def test_open_blob_closes_stream_on_error(container) -> None:  # noqa: ANN001
    container.write_blob("blob", io.BytesIO(b"x"), 1)

    with pytest.raises(RuntimeError):
        with container.open_blob("blob") as stream:
            raise RuntimeError("consumer failed")
    assert stream.closed


def test_write_blob_defaults_to_fail_if_exists(container) -> None:  # noqa: ANN001
    container.write_blob("blob", io.BytesIO(b"x"), 1)
    with pytest.raises(BlobAlreadyExistsError):
        container.write_blob("blob", io.BytesIO(b"y"), 1)


def test_read_missing_blob(container) -> None:  # noqa: ANN001
    with pytest.raises(BlobNotFoundError):
        container.read_blob("missing")


def test_empty_blob_name_is_rejected(container) -> None:  # noqa: ANN001
    with pytest.raises(ValueError, match="blob name is required"):
        container.blob_exists("")


def test_list_blobs_returns_relative_names(container, s3_client: InMemoryS3Client) -> None:  # noqa: ANN001
    s3_client.buckets["bucket"].update(
        {
            "indices/idx-1/a": b"1",
            "indices/idx-1/b": b"22",
            "indices/idx-1/sub/c": b"333",
            "indices/idx-10/a": b"x",
        }
    )

    assert container.list_blobs() == {
        "a": BlobMetadata("a", 1),
        "b": BlobMetadata("b", 2),
        "sub/c": BlobMetadata("sub/c", 3),
    }
    assert set(container.list_blobs_by_prefix("sub/")) == {"sub/c"}
    assert set(container.list_blobs_by_prefix(None)) == {"a", "b", "sub/c"}


def test_move_within_container(container, s3_client: InMemoryS3Client) -> None:  # noqa: ANN001
    container.write_blob("pending-1", io.BytesIO(b"data"), 4)

    container.move("pending-1", "final-1")

    assert not container.blob_exists("pending-1")
    assert container.blob_exists("final-1")
    assert s3_client.buckets["bucket"]["indices/idx-1/final-1"] == b"data"


def test_delete_blob_ignoring_if_not_exists(container) -> None:  # noqa: ANN001
    container.delete_blob_ignoring_if_not_exists("missing")


def test_container_delete_removes_only_its_path(container, s3_client: InMemoryS3Client) -> None:  # noqa: ANN001
    s3_client.buckets["bucket"].update({"indices/idx-1/a": b"1", "indices/idx-10/a": b"x"})

    container.delete()

    assert set(s3_client.buckets["bucket"]) == {"indices/idx-10/a"}
