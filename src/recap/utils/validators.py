"""Input validation helpers."""

import re
from datetime import date, datetime
from typing import Optional, Tuple, Union
from urllib.parse import urlparse

from .exceptions import ValidationError

DateInput = Union[date, str, None]

SUPPORTED_DOCUMENT_EXTENSION = ".md"


class InputValidator:
    """Validation for user-entered values and configuration."""

    VALID_SCHEMES = ["https"]

    @staticmethod
    def validate_url(url: str) -> bool:
        """Validate an HTTPS endpoint URL."""
        if not url:
            raise ValidationError("URL cannot be empty")

        parsed = urlparse(url)

        if parsed.scheme not in InputValidator.VALID_SCHEMES:
            raise ValidationError(f"Only HTTPS URLs allowed, got: {parsed.scheme}")

        if not parsed.hostname:
            raise ValidationError("URL must have a valid hostname")

        return True

    @staticmethod
    def validate_api_key(api_key: str, allow_bearer: bool = False) -> bool:
        """Validate API key format.

        With ``allow_bearer`` the key may carry a leading ``Bearer `` scheme,
        as OAuth access tokens do.
        """
        if not api_key:
            raise ValidationError("API key cannot be empty")

        if len(api_key) > 500:
            raise ValidationError("API key too long")

        pattern = r"^[a-zA-Z0-9._\-]+$"
        if allow_bearer:
            pattern = r"^(Bearer )?[a-zA-Z0-9._\-]+$"
        if not re.match(pattern, api_key):
            raise ValidationError("API key contains invalid characters")

        return True

    @staticmethod
    def parse_date(value: DateInput) -> Optional[date]:
        """Coerce a calendar date from a date, datetime or ISO string.

        Empty strings and None mean "not selected" and return None.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        value = value.strip()
        if not value:
            return None

        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise ValidationError(f"Invalid date format: {value}") from e

    @staticmethod
    def validate_date_range(start: DateInput, end: DateInput) -> Tuple[date, date]:
        """Require both ends of the period and return them as dates."""
        start_date = InputValidator.parse_date(start)
        end_date = InputValidator.parse_date(end)

        if start_date is None or end_date is None:
            raise ValidationError("Please select a period")

        return start_date, end_date

    @staticmethod
    def is_supported_document(filename: str) -> bool:
        """Only markdown documents are collected."""
        return filename.endswith(SUPPORTED_DOCUMENT_EXTENSION)

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """Strip path separators and control characters from a file name."""
        if not filename:
            return ""

        filename = re.sub(r'[<>:"/\\|?*]', "", filename)
        filename = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", filename)

        return filename[:255].strip()
