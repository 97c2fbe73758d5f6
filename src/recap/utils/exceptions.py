"""Custom exceptions for Recap."""

from typing import Any, Dict, Optional


class RecapError(Exception):
    """Base exception for Recap."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(RecapError):
    """Input validation errors."""


class ConfigurationError(RecapError):
    """Configuration-related errors."""


class DocumentError(RecapError):
    """Errors reading uploaded documents."""


class OperationInProgressError(RecapError):
    """Raised when an operation starts while another is still running."""


class IntegrationError(RecapError):
    """External integration errors."""


class LinearIntegrationError(IntegrationError):
    """Linear-specific integration errors."""


class GeminiIntegrationError(IntegrationError):
    """Google Gemini AI integration errors."""


class AuthenticationError(IntegrationError):
    """Authentication failures."""


class RateLimitError(IntegrationError):
    """API rate limiting errors."""


class NetworkError(RecapError):
    """Network connectivity errors."""


class ExportError(RecapError):
    """Export-related errors."""
