"""Logging configuration for Recap with credential redaction."""

import logging
import re
import sys
from pathlib import Path
from typing import Any, Optional

import structlog


class LogSanitizer:
    """Strip API keys and authorization values from log output."""

    SENSITIVE_PATTERNS = [
        (r"lin_api_[0-9A-Za-z]+", "[LINEAR_API_KEY_REDACTED]"),
        (r"lin_oauth_[0-9A-Za-z]+", "[LINEAR_TOKEN_REDACTED]"),
        (r"AIza[0-9A-Za-z\-_]{35}", "[GOOGLE_API_KEY_REDACTED]"),
        (r"bearer\s+([a-zA-Z0-9_\-\.]+)", "bearer [TOKEN_REDACTED]"),
        (
            r'authorization["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)',
            "authorization=[AUTH_REDACTED]",
        ),
        (r'api_key["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)', "api_key=[KEY_REDACTED]"),
    ]

    @classmethod
    def sanitize_message(cls, message: str) -> str:
        """Sanitize log message by removing sensitive data."""
        if not message:
            return message

        sanitized = message
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized

    @classmethod
    def sanitize_value(cls, value: Any) -> Any:
        """Sanitize individual value."""
        if isinstance(value, str):
            return cls.sanitize_message(value)
        elif isinstance(value, dict):
            return {k: cls.sanitize_value(v) for k, v in value.items()}
        elif isinstance(value, (list, tuple)):
            return type(value)(cls.sanitize_value(v) for v in value)
        else:
            return value


class SecureFormatter(logging.Formatter):
    """Formatter that redacts credentials before rendering."""

    def format(self, record: logging.LogRecord) -> str:
        record.msg = LogSanitizer.sanitize_message(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = LogSanitizer.sanitize_value(record.args)
            else:
                record.args = tuple(
                    LogSanitizer.sanitize_value(arg) for arg in record.args
                )

        return super().format(record)


def _redact_event(_, __, event_dict):
    return {k: LogSanitizer.sanitize_value(v) for k, v in event_dict.items()}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    enable_structured: bool = True,
    sanitize: bool = True,
) -> None:
    """Configure stdlib logging and structlog."""
    root = logging.getLogger()
    root.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)

    if enable_structured:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]
        if sanitize:
            processors.append(_redact_event)
        processors.append(structlog.processors.JSONRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    formatter_class = SecureFormatter if sanitize else logging.Formatter

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            formatter_class("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            formatter_class(
                "%(asctime)s - %(name)s - %(levelname)s - "
                "%(funcName)s:%(lineno)d - %(message)s"
            )
        )
        root.addHandler(file_handler)

    root.setLevel(log_level)

    # Third-party loggers are chatty at INFO
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("grpc").setLevel(logging.WARNING)


class SecurityLogger:
    """Structured audit log for outbound API traffic."""

    def __init__(self, name: str = "security") -> None:
        self.logger = structlog.get_logger(name)

    def log_security_event(
        self, event_type: str, severity: str = "INFO", **kwargs: Any
    ) -> None:
        """Log a structured event with redacted values."""
        sanitized_kwargs = {
            k: LogSanitizer.sanitize_value(v) for k, v in kwargs.items()
        }

        log_method = getattr(self.logger, severity.lower(), self.logger.info)
        log_method("security_event", event_type=event_type, **sanitized_kwargs)

    def log_authentication_attempt(
        self, service: str, success: bool = False, **kwargs: Any
    ) -> None:
        self.log_security_event(
            "authentication_attempt",
            severity="INFO" if success else "WARNING",
            service=service,
            success=success,
            **kwargs,
        )

    def log_api_request(
        self,
        service: str,
        endpoint: str,
        method: str = "POST",
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        self.log_security_event(
            "api_request",
            service=service,
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            **kwargs,
        )

    def log_error(self, error_type: str, error_message: str, **kwargs: Any) -> None:
        self.log_security_event(
            "error_occurred",
            severity="ERROR",
            error_type=error_type,
            error_message=error_message,
            **kwargs,
        )


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance."""
    return logging.getLogger(name)


def get_security_logger() -> SecurityLogger:
    """Get security logger instance."""
    return SecurityLogger()
