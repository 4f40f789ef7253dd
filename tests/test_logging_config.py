"""Tests for logging setup and credential masking."""

import io
import logging

from common.logging_config import SensitiveDataFilter, setup_logging


def make_record(msg, args=()):
    return logging.LogRecord('bridge', logging.INFO, __file__, 1, msg, args, None)


def test_masks_tokens_and_passwords():
    log_filter = SensitiveDataFilter()
    record = make_record("x-token=abc123 password: hunter2")

    log_filter.filter(record)

    assert 'abc123' not in record.msg
    assert 'hunter2' not in record.msg
    assert '***MASKED***' in record.msg


def test_masks_basic_auth_header():
    log_filter = SensitiveDataFilter()
    record = make_record("Authorization: Basic YWxpY2U6c2VjcmV0")

    log_filter.filter(record)

    assert 'YWxpY2U6c2VjcmV0' not in record.msg


def test_masks_args():
    log_filter = SensitiveDataFilter()
    record = make_record("sending %s", ("token=abc123",))

    log_filter.filter(record)

    assert record.getMessage() == "sending token=***MASKED***"


def test_setup_logging_writes_to_stream():
    stream = io.StringIO()
    logger = setup_logging('logging-test', log_level='DEBUG', stream=stream)

    logger.debug("hello")

    assert logger.name == 'logging-test'
    assert 'logging-test - DEBUG - hello' in stream.getvalue()
