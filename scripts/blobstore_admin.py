from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from pathlib import Path

from botocore.exceptions import ClientError

from blobstore_core.config import BlobStoreSettings, load_settings_from_env
from blobstore_core.errors import BlobStoreError
from blobstore_core.paths import BlobPath, join_key
from blobstore_core.store import S3BlobStore


def _split_key(value: str) -> tuple[BlobPath, str]:
    parent, _, name = value.strip("/").rpartition("/")
    if not name:
        raise ValueError(f"blob key is required, got {value!r}")
    return BlobPath.parse(parent), name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and maintain blobs in a bucket.")
    parser.add_argument("--bucket", type=str, default=os.getenv("BLOBSTORE_BUCKET"))
    parser.add_argument("--endpoint-url", type=str, default=os.getenv("S3_ENDPOINT_URL"))
    parser.add_argument("--region", type=str, default=os.getenv("S3_REGION", "us-east-1"))
    parser.add_argument("--url-style", type=str, default=os.getenv("S3_URL_STYLE", "path"))
    parser.add_argument("--verbose", "-v", action="store_true", default=False)

    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="List blobs under a path.")
    ls.add_argument("path", nargs="?", default="")
    ls.add_argument("--prefix", type=str, default=None)

    cat = sub.add_parser("cat", help="Write a blob to stdout.")
    cat.add_argument("key")

    put = sub.add_parser("put", help="Upload a local file as a blob.")
    put.add_argument("key")
    put.add_argument("file", type=Path)
    put.add_argument("--fail-if-exists", action="store_true", default=False)

    rm = sub.add_parser("rm", help="Delete one blob.")
    rm.add_argument("key")

    rm_prefix = sub.add_parser("rm-prefix", help="Delete every blob under a path.")
    rm_prefix.add_argument("path")

    mv = sub.add_parser("mv", help="Move a blob within the bucket (copy, then delete).")
    mv.add_argument("source")
    mv.add_argument("target")
    return parser


def _build_settings(args: argparse.Namespace) -> BlobStoreSettings:
    env = dict(os.environ)
    if args.bucket:
        env["BLOBSTORE_BUCKET"] = args.bucket
    if args.endpoint_url:
        env["S3_ENDPOINT_URL"] = args.endpoint_url
    env["S3_REGION"] = args.region
    env["S3_URL_STYLE"] = args.url_style
    return load_settings_from_env(env)


def run(store: S3BlobStore, args: argparse.Namespace) -> int:
    if args.command == "ls":
        container = store.blob_container(BlobPath.parse(args.path))
        blobs = container.list_blobs_by_prefix(args.prefix)
        for name in sorted(blobs):
            print(f"{blobs[name].length:>12}  {container.key_path}{name}")
        return 0

    if args.command == "cat":
        path, name = _split_key(args.key)
        with store.blob_container(path).open_blob(name) as stream:
            shutil.copyfileobj(stream, sys.stdout.buffer)
        return 0

    if args.command == "put":
        path, name = _split_key(args.key)
        size = args.file.stat().st_size
        with args.file.open("rb") as stream:
            store.blob_container(path).write_blob(name, stream, size, args.fail_if_exists)
        return 0

    if args.command == "rm":
        path, name = _split_key(args.key)
        store.blob_container(path).delete_blob(name)
        return 0

    if args.command == "rm-prefix":
        store.delete(BlobPath.parse(args.path))
        return 0

    if args.command == "mv":
        source_path, source_name = _split_key(args.source)
        target_path, target_name = _split_key(args.target)
        store.move(
            join_key(source_path.build_as_string(), source_name),
            join_key(target_path.build_as_string(), target_name),
        )
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    try:
        with S3BlobStore.from_settings(_build_settings(args)) as store:
            return run(store, args)
    except (BlobStoreError, ClientError, ValueError) as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
