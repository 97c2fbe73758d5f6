"""Configuration loaded from the process environment."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from ..integrations.gemini_client import DEFAULT_MODEL
from ..integrations.linear_client import LINEAR_GRAPHQL_URL
from ..utils.exceptions import ConfigurationError, ValidationError
from ..utils.logging_config import get_logger
from ..utils.validators import InputValidator


@dataclass
class LinearConfig:
    """Linear API settings."""

    api_key: str = ""
    api_url: str = LINEAR_GRAPHQL_URL
    timeout: int = 30


@dataclass
class AIConfig:
    """Gemini settings."""

    gemini_api_key: str = ""
    model_name: str = DEFAULT_MODEL
    timeout: int = 120
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass
class AppConfig:
    """Application settings."""

    log_level: str = "INFO"
    default_range_days: int = 30


@dataclass
class Configuration:
    """Main configuration container."""

    linear: LinearConfig = field(default_factory=LinearConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    app: AppConfig = field(default_factory=AppConfig)


def _first(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return ""


def _as_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _as_float(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


class ConfigManager:
    """Reads API keys and options from environment variables.

    ``LINEAR_API_KEY`` and ``GEMINI_API_KEY`` are required before the
    matching operation runs; ``VITE_``-prefixed names are accepted too. A
    ``.env`` file is merged in without overriding variables already set.
    Nothing is written back to disk.
    """

    LINEAR_KEY_VARS = ("LINEAR_API_KEY", "VITE_LINEAR_API_KEY")
    GEMINI_KEY_VARS = ("GEMINI_API_KEY", "VITE_GEMINI_API_KEY")

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path] = None,
    ):
        self.logger = get_logger(__name__)

        if environ is None:
            if env_file is not None:
                load_dotenv(env_file, override=False)
            else:
                load_dotenv(override=False)
            environ = os.environ

        self._config = self._load_configuration(environ)

    def _load_configuration(self, env: Mapping[str, str]) -> Configuration:
        linear = LinearConfig(
            api_key=_first(env, *self.LINEAR_KEY_VARS),
            api_url=_first(env, "RECAP_LINEAR_API_URL") or LINEAR_GRAPHQL_URL,
            timeout=_as_int(env, "RECAP_TIMEOUT", 30),
        )
        ai = AIConfig(
            gemini_api_key=_first(env, *self.GEMINI_KEY_VARS),
            model_name=_first(env, "RECAP_GEMINI_MODEL") or DEFAULT_MODEL,
            timeout=_as_int(env, "RECAP_GEMINI_TIMEOUT", 120),
            temperature=_as_float(env, "RECAP_GEMINI_TEMPERATURE"),
            max_tokens=_as_int(env, "RECAP_GEMINI_MAX_TOKENS", 0) or None,
        )
        app = AppConfig(
            log_level=_first(env, "RECAP_LOG_LEVEL").upper() or "INFO",
            default_range_days=_as_int(env, "RECAP_DEFAULT_RANGE_DAYS", 30),
        )

        self.logger.debug(
            "Configuration loaded",
            extra={
                "linear_key_set": bool(linear.api_key),
                "gemini_key_set": bool(ai.gemini_api_key),
                "model": ai.model_name,
            },
        )
        return Configuration(linear=linear, ai=ai, app=app)

    def get_config(self) -> Configuration:
        return self._config

    def get_linear_config(self) -> LinearConfig:
        return self._config.linear

    def get_ai_config(self) -> AIConfig:
        return self._config.ai

    def get_app_config(self) -> AppConfig:
        return self._config.app

    def require_linear_key(self) -> str:
        """Return the Linear key or raise naming the variable to set."""
        key = self._config.linear.api_key
        if not key:
            raise ConfigurationError(
                "Linear API key not configured. Set LINEAR_API_KEY."
            )
        return key

    def require_gemini_key(self) -> str:
        """Return the Gemini key or raise naming the variable to set."""
        key = self._config.ai.gemini_api_key
        if not key:
            raise ConfigurationError(
                "Gemini API key not configured. Set GEMINI_API_KEY."
            )
        return key

    def validate_configuration(self) -> bool:
        """Check every configured value, raising on the first problem."""
        try:
            InputValidator.validate_api_key(
                self.require_linear_key(), allow_bearer=True
            )
            InputValidator.validate_api_key(self.require_gemini_key())
            InputValidator.validate_url(self._config.linear.api_url)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        if self._config.app.default_range_days < 0:
            raise ConfigurationError("RECAP_DEFAULT_RANGE_DAYS cannot be negative")

        self.logger.info("Configuration validation passed")
        return True

    def is_configured(self) -> bool:
        try:
            return self.validate_configuration()
        except ConfigurationError:
            return False
