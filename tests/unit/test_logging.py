"""Unit tests for the logging module."""

import json
import logging
import os

import pytest

import attachment_migrator.utils.logging as log_module
from attachment_migrator.constants import LOGGER_NAME
from attachment_migrator.utils.logging import (
    EnhancedFormatter,
    get_logger,
    is_debug_api_enabled,
    log_api_request,
    log_api_response,
    log_with_context,
    redact,
    setup_logger,
    setup_main_log_file,
)


def _make_record(msg="test message", **extras):
    record = logging.LogRecord(
        name=LOGGER_NAME,
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extras.items():
        setattr(record, key, value)
    return record


# --- EnhancedFormatter tests ---


class TestEnhancedFormatter:
    def test_default_format(self):
        output = EnhancedFormatter().format(_make_record())
        assert "INFO - test message" in output

    def test_verbose_format_includes_location(self):
        output = EnhancedFormatter(verbose=True).format(_make_record())
        assert "[test:1]" in output
        assert LOGGER_NAME in output

    def test_api_details_appended_when_enabled(self):
        record = _make_record(api_data='{"a": 1}', response="ok")
        output = EnhancedFormatter(include_api_details=True).format(record)
        assert 'API Data: {"a": 1}' in output
        assert "Response: ok" in output

    def test_api_details_hidden_by_default(self):
        record = _make_record(api_data='{"a": 1}')
        assert "API Data" not in EnhancedFormatter().format(record)

    def test_record_context_appended(self):
        record = _make_record("Copy failed", file_key="clinical/photo1.png", batch=3)
        output = EnhancedFormatter().format(record)
        assert output.endswith("Copy failed [file_key=clinical/photo1.png, batch=3]")

    def test_empty_context_not_rendered(self):
        output = EnhancedFormatter().format(_make_record(file_key=""))
        assert output.endswith("test message")


# --- setup_logger tests ---


class TestSetupLogger:
    def test_console_only(self):
        logger = setup_logger()
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.INFO
        assert is_debug_api_enabled() is False

    def test_verbose_console_level(self):
        logger = setup_logger(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_repeated_setup_replaces_handlers(self):
        setup_logger()
        logger = setup_logger()
        assert len(logger.handlers) == 1

    def test_output_dir_creates_main_log(self, tmp_path):
        logger = setup_logger(output_dir=str(tmp_path))
        log_with_context(logging.INFO, "hello file")
        for handler in logger.handlers:
            handler.flush()

        with open(os.path.join(str(tmp_path), "migration.log")) as f:
            assert "hello file" in f.read()

    def test_debug_api_writes_structured_log(self, tmp_path):
        logger = setup_logger(debug_api=True, output_dir=str(tmp_path))
        assert is_debug_api_enabled() is True

        log_with_context(logging.INFO, "not an api record")
        log_api_request("GET", "https://prod.supabase.co/rest/v1/objects", {"select": "id"})
        for handler in logger.handlers:
            handler.flush()

        with open(os.path.join(str(tmp_path), "structured_api_debug.log")) as f:
            content = f.read()
        assert "API Request: GET" in content
        assert "not an api record" not in content

    def test_setup_main_log_file_returns_handler(self, tmp_path):
        handler = setup_main_log_file(str(tmp_path / "nested"))
        assert isinstance(handler, logging.FileHandler)
        assert os.path.exists(os.path.join(str(tmp_path / "nested"), "migration.log"))


# --- log_with_context tests ---


class TestLogWithContext:
    def test_attaches_context(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)
        log_with_context(logging.INFO, "msg", file_key="a.png", batch=2)

        record = caplog.records[-1]
        assert record.file_key == "a.png"
        assert record.batch == 2

    def test_drops_none_values(self, caplog):
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)
        log_with_context(logging.INFO, "msg", file_key=None)
        assert not hasattr(caplog.records[-1], "file_key")

    def test_api_records_always_carry_both_fields(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        log_with_context(logging.DEBUG, "msg", api_data="{}")
        record = caplog.records[-1]
        assert record.api_data == "{}"
        assert record.response == ""


# --- API logging tests ---


class TestApiLogging:
    def test_request_is_noop_when_disabled(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        log_api_request("GET", "https://x", {"a": 1})
        log_api_response(200, "https://x", "ok")
        assert caplog.records == []

    def test_request_redacts_credentials(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        log_module._DEBUG_API_ENABLED = True

        log_api_request(
            "POST",
            "https://prod.supabase.co/storage/v1/object/copy",
            {
                "apikey": "secret-key",
                "Authorization": "Bearer secret-key",
                "sourceKey": "files/a.png",
            },
        )

        data = json.loads(caplog.records[-1].api_data)
        assert data["apikey"] == "[REDACTED]"
        assert data["Authorization"] == "[REDACTED]"
        assert data["sourceKey"] == "files/a.png"

    def test_response_truncates_long_text(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        log_module._DEBUG_API_ENABLED = True

        log_api_response(200, "https://x", "y" * 1500)

        record = caplog.records[-1]
        assert record.getMessage() == "API Response: 200 from https://x"
        assert record.response.endswith("... [truncated]")
        assert len(record.response) == 1000 + len("... [truncated]")

    def test_response_serialises_json(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        log_module._DEBUG_API_ENABLED = True

        log_api_response(200, "https://x", [{"id": 1}])

        assert json.loads(caplog.records[-1].response) == [{"id": 1}]


@pytest.mark.parametrize(
    "key,redacted",
    [
        ("apikey", True),
        ("Authorization", True),
        ("access_token", True),
        ("bucketId", False),
        ("destinationKey", False),
    ],
)
def test_redact(key, redacted):
    result = redact({key: "value"})
    assert (result[key] == "[REDACTED]") is redacted


def test_get_logger_adds_default_handler():
    logger = get_logger()
    assert logger.name == LOGGER_NAME
    assert len(logger.handlers) == 1
