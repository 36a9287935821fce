"""
Tests for structured logging.
"""

import json
import logging
import sys

from shared.logging import JSONFormatter, get_logger, get_story_id, set_story_id


def make_record(message="Test message", **extra):
    record = logging.LogRecord("test_module", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_creates_logger():
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_module"


def test_get_logger_does_not_duplicate_handlers():
    first = get_logger("test_module_handlers")
    count = len(first.handlers)

    second = get_logger("test_module_handlers")

    assert second is first
    assert len(second.handlers) == count


def test_formatter_outputs_json():
    log_data = json.loads(JSONFormatter().format(make_record(segment_id="studio_intro", attempt=2)))

    assert log_data["level"] == "INFO"
    assert log_data["message"] == "Test message"
    assert log_data["segment_id"] == "studio_intro"
    assert log_data["attempt"] == 2
    assert log_data["timestamp"].endswith("Z")


def test_formatter_stringifies_complex_extra():
    log_data = json.loads(JSONFormatter().format(make_record(input_keys=["prompt", "seed"])))

    assert log_data["input_keys"] == "['prompt', 'seed']"


def test_story_id_injected_from_context():
    set_story_id("story-42")
    try:
        assert get_story_id() == "story-42"
        log_data = json.loads(JSONFormatter().format(make_record()))
        assert log_data["story_id"] == "story-42"
    finally:
        set_story_id(None)

    log_data = json.loads(JSONFormatter().format(make_record()))
    assert "story_id" not in log_data


def test_exception_included():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(record))

    assert "ValueError: boom" in log_data["exception"]
