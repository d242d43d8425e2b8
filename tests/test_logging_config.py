"""Tests for logging setup."""

import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from loguru import logger

from scancheck.logging_config import JSONFormatter, configure_logging, setup_logging
from scancheck.settings import LoggingSettings


@pytest.fixture(autouse=True)
def _restore_logger():
    yield
    logger.remove()


def _record(message: str, **extra) -> dict:
    return {
        "time": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "level": SimpleNamespace(name="WARNING"),
        "message": message,
        "module": "extract",
        "function": "extract_metadata",
        "line": 42,
        "exception": None,
        "extra": extra,
    }


def test_json_formatter_escapes_braces():
    line = JSONFormatter()(_record("bad {payload}", artifact="a-1"))
    assert line.endswith("\n")
    # loguru formats the template once, collapsing doubled braces
    payload = json.loads(line.replace("{{", "{").replace("}}", "}"))
    assert payload["message"] == "bad {payload}"
    assert payload["level"] == "WARNING"
    assert payload["artifact"] == "a-1"


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "scancheck.log"
    setup_logging(level="DEBUG", log_file=log_file)
    logger.debug("hello from test")
    logger.complete()
    assert "hello from test" in log_file.read_text(encoding="utf-8")


def test_configure_logging_json(tmp_path):
    log_file = tmp_path / "scancheck.jsonl"
    configure_logging(LoggingSettings(level="info", json_format=True, log_file=log_file))
    logger.debug("not written")
    logger.info("structured {}", "line")
    logger.complete()
    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["message"] == "structured line"
