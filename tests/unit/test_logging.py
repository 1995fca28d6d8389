"""Unit tests for structured logging."""

from __future__ import annotations

import io
import json
import logging
import sys
from collections.abc import Iterator

import pytest

from workflow_versioning.logging import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="workflow_versioning.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Created new version %s",
        args=("1.0.0",),
        exc_info=None,
    )
    record.document_id = "grid-resilience"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "workflow_versioning.service"
    assert payload["message"] == "Created new version 1.0.0"
    assert payload["extra"] == {"document_id": "grid-resilience"}
    assert "timestamp" in payload
    assert "exception" not in payload


def test_formatter_renders_exceptions() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("t").makeRecord(
            "t", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))

    assert "extra" not in payload
    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_replaces_handlers(restore_root_logger: None) -> None:
    first = io.StringIO()
    second = io.StringIO()

    configure_logging("debug", stream=first)
    configure_logging("info", stream=second)
    logging.getLogger("workflow_versioning.test").info("hello", extra={"version": "1.0.0"})

    assert first.getvalue() == ""
    line = json.loads(second.getvalue().strip())
    assert line["message"] == "hello"
    assert line["extra"] == {"version": "1.0.0"}
    assert logging.getLogger().level == logging.INFO
