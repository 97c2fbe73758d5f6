"""Credentials must never reach log output."""

import logging

import pytest

from recap.utils.logging_config import (
    LogSanitizer,
    SecureFormatter,
    get_security_logger,
    setup_logging,
)

LINEAR_KEY = "lin_api_abcdef1234567890"
GOOGLE_KEY = "AIza" + "B" * 35


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogSanitizer:
    """Test suite for LogSanitizer."""

    def test_linear_key(self):
        message = LogSanitizer.sanitize_message(f"Using key {LINEAR_KEY}")

        assert LINEAR_KEY not in message
        assert "[LINEAR_API_KEY_REDACTED]" in message

    def test_google_key(self):
        message = LogSanitizer.sanitize_message(f"key={GOOGLE_KEY}")

        assert GOOGLE_KEY not in message

    def test_bearer_token(self):
        message = LogSanitizer.sanitize_message("Bearer secret.token-value")

        assert "secret.token-value" not in message

    def test_authorization_header(self):
        message = LogSanitizer.sanitize_message("{'Authorization': 'raw-value'}")

        assert "raw-value" not in message

    def test_nested_values(self):
        value = {"headers": {"auth": [f"token {LINEAR_KEY}"]}, "count": 3}

        sanitized = LogSanitizer.sanitize_value(value)

        assert LINEAR_KEY not in str(sanitized)
        assert sanitized["count"] == 3

    def test_plain_text_untouched(self):
        assert LogSanitizer.sanitize_message("Fetched 3 issues") == "Fetched 3 issues"


class TestSecureFormatter:
    """Test suite for SecureFormatter."""

    def test_redacts_message_and_args(self):
        formatter = SecureFormatter("%(message)s")
        record = logging.LogRecord(
            "test", logging.INFO, __file__, 1, "key %s", (LINEAR_KEY,), None
        )

        output = formatter.format(record)

        assert LINEAR_KEY not in output


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_file_output_is_redacted(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "app.log"

        setup_logging(level="DEBUG", log_file=str(log_file), enable_console=False)
        logging.getLogger("recap.test").info(f"Linear key {LINEAR_KEY}")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "Linear key" in content
        assert LINEAR_KEY not in content

    def test_level(self, restore_root_logger):
        setup_logging(level="WARNING", enable_console=True)

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("aiohttp").level == logging.WARNING

    def test_security_logger_redacts(self, restore_root_logger):
        setup_logging(level="INFO", enable_console=False)
        security_logger = get_security_logger()

        # Must not raise with arbitrary structured fields
        security_logger.log_authentication_attempt(
            service="linear", success=False, error=f"bad key {LINEAR_KEY}"
        )
        security_logger.log_api_request(
            service="linear", endpoint="https://api.linear.app/graphql", status_code=200
        )
