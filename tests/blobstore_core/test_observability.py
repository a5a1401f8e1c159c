from __future__ import annotations

import logging

from blobstore_core.observability import log_event, store_log_fields

logger = logging.getLogger("tests.observability")


def test_log_event_appends_key_value_pairs(caplog) -> None:
    caplog.set_level(logging.INFO)
    log_event(logger, "blobstore.move", **store_log_fields("b", source="a/x", target=None, note=" "))

    assert [r.getMessage() for r in caplog.records] == ["blobstore.move bucket=b source=a/x"]


def test_log_event_without_fields(caplog) -> None:
    caplog.set_level(logging.INFO)
    log_event(logger, "blobstore.init")
    assert [r.getMessage() for r in caplog.records] == ["blobstore.init"]


def test_log_event_respects_level(caplog) -> None:
    caplog.set_level(logging.INFO)
    log_event(logger, "blobstore.delete_batch", level=logging.DEBUG, keys=5)
    assert caplog.records == []
