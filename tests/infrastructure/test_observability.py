"""Structured Logging — JSON formatter fields, handler setup and secret masking."""

import json
import logging

import pytest

from carrier_gateway.infrastructure.observability import JSONFormatter, mask_secret, setup_logging


@pytest.fixture
def restore_root_logging():
    handlers, level = list(logging.root.handlers), logging.root.level
    quiet = {name: logging.getLogger(name).level for name in ("httpx", "httpcore")}
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)
    for name, previous in quiet.items():
        logging.getLogger(name).setLevel(previous)


def test_json_formatter_surfaces_gateway_fields():
    record = logging.LogRecord("carrier_gateway.test", logging.INFO, __file__, 1, "hello", None, None)
    record.carrier = "ZIM"
    record.status_code = 200
    record.unrelated = "dropped"
    log = json.loads(JSONFormatter().format(record))
    assert log["message"] == "hello"
    assert log["carrier"] == "ZIM"
    assert log["status_code"] == 200
    assert "unrelated" not in log


def test_json_formatter_uses_record_time():
    record = logging.LogRecord("carrier_gateway.test", logging.INFO, __file__, 1, "hello", None, None)
    record.created = 0
    log = json.loads(JSONFormatter().format(record))
    assert log["timestamp"].startswith("1970-01-01T00:00:00")


def test_setup_logging_twice_keeps_one_gateway_handler(restore_root_logging):
    setup_logging("DEBUG", "json")
    setup_logging("INFO", "text")
    gateway = [h for h in logging.root.handlers if type(h).__name__ == "_GatewayHandler"]
    assert len(gateway) == 1
    assert not isinstance(gateway[0].formatter, JSONFormatter)
    assert logging.root.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_mask_secret():
    assert mask_secret("Bearer abcdefghijk") == "Bearer a..."
    assert mask_secret(None) == "missing"
