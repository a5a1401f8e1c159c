from __future__ import annotations

import logging
from collections.abc import Mapping


def _kv_pairs(fields: Mapping[str, object]) -> str:
    parts: list[str] = []
    for key, value in fields.items():
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        parts.append(f"{key}={text}")
    return " ".join(parts)


def log_event(
    logger: logging.Logger, message: str, *, level: int = logging.INFO, **fields: object
) -> None:
    """Emit a stable structured log line.

    Host logs are usually plain text, so key fields are appended as ``k=v`` tokens.
    Empty and ``None`` fields are dropped.
    """

    suffix = _kv_pairs(fields)
    if suffix:
        logger.log(level, "%s %s", message, suffix)
    else:
        logger.log(level, "%s", message)


def store_log_fields(bucket: str, **extra: object) -> dict[str, object]:
    """Standard fields attached to every store event."""

    fields: dict[str, object] = {"bucket": bucket}
    fields.update(extra)
    return fields
