"""Tests for structured logging helpers."""
import io
import json
import logging
import sys

from photojob.utils.logging import StructuredFormatter, configure_logging


def _record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord("photojob.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_emits_json_line():
    payload = json.loads(StructuredFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "photojob.test"
    assert payload["message"] == "hello world"
    assert "timestamp" in payload
    assert "metrics" not in payload
    assert "job_id" not in payload


def test_structured_formatter_includes_job_fields():
    record = _record(job_id="42", metrics={"elapsed_s": 1.5})
    payload = json.loads(StructuredFormatter().format(record))
    assert payload["job_id"] == "42"
    assert payload["metrics"] == {"elapsed_s": 1.5}


def test_structured_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            "photojob.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )
    payload = json.loads(StructuredFormatter().format(record))
    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_json():
    stream = io.StringIO()
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    try:
        configure_logging(level="info", json_logs=True, stream=stream)
        logging.getLogger("photojob.test.cli").info("job %s", "7", extra={"job_id": "7"})
        logging.getLogger("photojob.test.cli").debug("hidden")
        lines = stream.getvalue().strip().splitlines()
        assert len(lines) == 1
        payload = json.loads(lines[0])
        assert payload["message"] == "job 7"
        assert payload["job_id"] == "7"
    finally:
        root.handlers[:] = saved[1]
        root.setLevel(saved[0])


def test_configure_logging_plain():
    stream = io.StringIO()
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    try:
        configure_logging(level="WARNING", stream=stream)
        logging.getLogger("photojob.test.cli").warning("careful")
        assert "[WARNING] photojob.test.cli: careful" in stream.getvalue()
    finally:
        root.handlers[:] = saved[1]
        root.setLevel(saved[0])
