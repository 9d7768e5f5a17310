# tests/utils/test_logging.py
import logging

from prdify.utils.logging import ContextFormatter, PrdifyLogger


def make_record(**extra):
    record = logging.LogRecord("prdify.test", logging.INFO, __file__, 10, "Stored answers", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_is_appended_sorted():
    formatter = ContextFormatter("%(levelname)s - %(message)s")

    line = formatter.format(make_record(document_id="abc", answer_count=2))

    assert line == "INFO - Stored answers | answer_count=2 document_id='abc'"


def test_record_without_context_is_unchanged():
    formatter = ContextFormatter("%(message)s")
    assert formatter.format(make_record()) == "Stored answers"


def test_reserved_keys_are_renamed():
    sanitized = PrdifyLogger._sanitize_extra({"name": "Test PRD", "module": "x", "document_id": "abc"})

    assert sanitized == {"extra_name": "Test PRD", "extra_module": "x", "document_id": "abc"}
    assert PrdifyLogger._sanitize_extra(None) is None


def test_loggers_are_namespaced_and_isolated():
    logger = PrdifyLogger("test-component")

    assert logger.logger.name == "prdify.test-component"
    assert logger.logger.propagate is False
    assert len(logger.logger.handlers) == 2

    # A second wrapper for the same component reuses the handlers
    PrdifyLogger("test-component")
    assert len(logger.logger.handlers) == 2
