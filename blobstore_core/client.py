from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from blobstore_core.config import BlobStoreSettings


def create_s3_client(settings: BlobStoreSettings, **client_kwargs: Any) -> Any:
    """Build a boto3 S3 client for ``settings``.

    ``use_ssl`` defaults to the scheme of ``endpoint_url`` when one is set.
    """

    use_ssl = settings.use_ssl
    if use_ssl is None:
        use_ssl = not settings.endpoint_url or settings.endpoint_url.startswith("https://")

    kwargs: dict[str, Any] = dict(client_kwargs)
    kwargs.update(
        dict(
            service_name="s3",
            endpoint_url=settings.endpoint_url,
            region_name=settings.region,
            use_ssl=use_ssl,
            aws_access_key_id=settings.access_key,
            aws_secret_access_key=settings.secret_key,
            aws_session_token=settings.session_token,
            config=Config(s3={"addressing_style": settings.url_style}),
        )
    )
    return boto3.client(**kwargs)
