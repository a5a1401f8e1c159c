"""Store configuration helpers (env-first)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from blobstore_core.errors import SettingsError
from blobstore_core.store import DELETE_OBJECTS_LIMIT


@dataclass(frozen=True)
class BlobStoreSettings:
    bucket: str
    endpoint_url: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    region: str = "us-east-1"
    use_ssl: bool | None = None
    url_style: str = "path"
    session_token: str | None = None
    delete_limit: int = DELETE_OBJECTS_LIMIT
    page_size: int | None = None


def _parse_bool(value: str | None, *, default: bool | None = None) -> bool | None:
    if value is None:
        return default
    text = value.strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return default


def _parse_int(value: str | None, *, name: str) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise SettingsError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise SettingsError(f"{name} must be positive, got {parsed}")
    return parsed


def env_default(env: Mapping[str, str], name: str, default: str | None = None) -> str | None:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_settings_from_env(env: Mapping[str, str] | None = None) -> BlobStoreSettings:
    """Resolve store settings from ``BLOBSTORE_*`` and ``S3_*`` environment variables.

    Credentials are optional (boto3 falls back to its own credential chain), but
    an access key and secret key must be set together.
    """

    env = dict(os.environ) if env is None else env

    bucket = env_default(env, "BLOBSTORE_BUCKET")
    if not bucket:
        raise SettingsError("Missing store configuration: set BLOBSTORE_BUCKET")

    access_key = env_default(env, "S3_ACCESS_KEY_ID")
    secret_key = env_default(env, "S3_SECRET_ACCESS_KEY")
    if bool(access_key) != bool(secret_key):
        raise SettingsError("S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY must be set together")

    url_style = env_default(env, "S3_URL_STYLE", "path") or "path"
    if url_style not in {"path", "virtual", "auto"}:
        raise SettingsError(f"S3_URL_STYLE must be path, virtual or auto, got {url_style!r}")

    delete_limit = _parse_int(env.get("BLOBSTORE_DELETE_LIMIT"), name="BLOBSTORE_DELETE_LIMIT")
    if delete_limit is not None and delete_limit < 2:
        raise SettingsError("BLOBSTORE_DELETE_LIMIT must be at least 2")

    return BlobStoreSettings(
        bucket=bucket,
        endpoint_url=env_default(env, "S3_ENDPOINT_URL"),
        access_key=access_key,
        secret_key=secret_key,
        region=env_default(env, "S3_REGION", "us-east-1") or "us-east-1",
        use_ssl=_parse_bool(env.get("S3_USE_SSL")),
        url_style=url_style,
        session_token=env_default(env, "S3_SESSION_TOKEN"),
        delete_limit=delete_limit or DELETE_OBJECTS_LIMIT,
        page_size=_parse_int(env.get("BLOBSTORE_PAGE_SIZE"), name="BLOBSTORE_PAGE_SIZE"),
    )
