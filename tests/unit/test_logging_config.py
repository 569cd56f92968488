import json
import logging
import sys

import pytest

from ghbatch.logging_config import SafeStreamHandler, StructuredLogFormatter, configure_logging


def make_record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_structured_log_formatter_basic():
    record = make_record()
    record.owner = "octo"
    record.repo = "hello"
    record.branch = "main"
    record.step = "create tree"
    record.duration_ms = 42
    output = StructuredLogFormatter().format(record)
    data = json.loads(output)
    assert data["level"] == "INFO"
    assert data["logger"] == "test_logger"
    assert data["message"] == "Test message"
    assert data["owner"] == "octo"
    assert data["repo"] == "hello"
    assert data["branch"] == "main"
    assert data["step"] == "create tree"
    assert data["duration_ms"] == 42
    assert "commit_sha" not in data


def test_structured_log_formatter_exception():
    try:
        raise ValueError("fail!")
    except ValueError:
        record = make_record("Error occurred", logging.ERROR, sys.exc_info())
        data = json.loads(StructuredLogFormatter().format(record))
        assert data["level"] == "ERROR"
        assert "ValueError" in data["exception"]


def test_safe_stream_handler_ignores_closed_stream():
    class ClosedStream:
        def write(self, _):
            raise ValueError("I/O operation on closed file")

        def flush(self):
            pass

    handler = SafeStreamHandler(ClosedStream())
    handler.emit(make_record())


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("structured, formatter_type", [(True, StructuredLogFormatter), (False, logging.Formatter)])
def test_configure_logging(restore_root_logger, structured, formatter_type):
    configure_logging("debug", structured=structured)

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1
    handler = restore_root_logger.handlers[0]
    assert isinstance(handler, SafeStreamHandler)
    assert type(handler.formatter) is formatter_type
    assert logging.getLogger("aiohttp").level == logging.WARNING
