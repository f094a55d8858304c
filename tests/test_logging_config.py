"""Tests for structured logging."""

import json
import logging

from prompt_blocks.api.middleware import request_id_var
from prompt_blocks.logging_config import ContextFilter, JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="prompt_blocks.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Override saved for %s",
        args=("role_mission",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_message_and_extras():
    data = json.loads(JSONFormatter().format(_record(block_id="role_mission")))

    assert data["severity"] == "WARNING"
    assert data["message"] == "Override saved for role_mission"
    assert data["logger"] == "prompt_blocks.test"
    assert data["block_id"] == "role_mission"
    assert "msg" not in data


def test_request_id_from_context():
    token = request_id_var.set("req-42")
    try:
        record = _record()
        ContextFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert json.loads(JSONFormatter().format(record))["request_id"] == "req-42"


def test_no_request_id_outside_requests():
    record = _record()
    ContextFilter().filter(record)
    assert "request_id" not in json.loads(JSONFormatter().format(record))
