"""Tests for logging setup."""

import io
import json
import logging

from stitchpix.logging_config import JSONLogHandler, setup_logging


def test_json_handler_writes_one_object_per_line():
    stream = io.StringIO()
    handler = JSONLogHandler(stream)
    logger = logging.getLogger("stitchpix.test.json")
    logger.addHandler(handler)
    logger.propagate = False
    try:
        logger.warning("fallback for %s", "DeepAI")
    finally:
        logger.removeHandler(handler)

    line = stream.getvalue().strip()
    assert json.loads(line) == {
        "level": "WARNING",
        "logger": "stitchpix.test.json",
        "message": "fallback for DeepAI",
    }


def test_json_handler_includes_exception():
    stream = io.StringIO()
    handler = JSONLogHandler(stream)
    logger = logging.getLogger("stitchpix.test.exc")
    logger.addHandler(handler)
    logger.propagate = False
    try:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logger.exception("Canvas merge crashed")
    finally:
        logger.removeHandler(handler)

    record = json.loads(stream.getvalue().strip())
    assert "RuntimeError: boom" in record["exc_info"]


def test_setup_logging_json_replaces_root_handlers():
    root = logging.getLogger()
    saved = root.handlers[:]
    try:
        setup_logging("debug", json_logs=True)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], JSONLogHandler)
    finally:
        root.handlers = saved
