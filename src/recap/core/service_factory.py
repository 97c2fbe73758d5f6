"""Factory for creating integration service clients."""

import asyncio
from typing import Any, Dict

from ..integrations.gemini_client import GeminiClient
from ..integrations.linear_client import LinearClient
from ..utils.exceptions import ConfigurationError, ValidationError
from ..utils.logging_config import get_logger
from .config_manager import ConfigManager


class ServiceFactory:
    """Creates clients from configuration and closes them as a group.

    Clients are cached until ``close_all``. Each GUI operation runs on its
    own event loop, so the orchestrator closes everything after every
    operation.
    """

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager
        self.logger = get_logger(__name__)
        self._clients: Dict[str, Any] = {}

    async def create_linear_client(self) -> LinearClient:
        if "linear" in self._clients:
            return self._clients["linear"]

        linear_config = self.config_manager.get_linear_config()
        api_key = self.config_manager.require_linear_key()

        try:
            client = LinearClient(
                api_key=api_key,
                api_url=linear_config.api_url,
                timeout=linear_config.timeout,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Linear configuration: {e}") from e

        self._clients["linear"] = client
        self.logger.info(f"Created Linear client for {linear_config.api_url}")
        return client

    async def create_gemini_client(self) -> GeminiClient:
        if "gemini" in self._clients:
            return self._clients["gemini"]

        ai_config = self.config_manager.get_ai_config()
        api_key = self.config_manager.require_gemini_key()

        try:
            client = GeminiClient(
                api_key=api_key,
                model_name=ai_config.model_name,
                timeout=ai_config.timeout,
                temperature=ai_config.temperature,
                max_tokens=ai_config.max_tokens,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid Gemini configuration: {e}") from e

        self._clients["gemini"] = client
        self.logger.info(f"Created Gemini client for {ai_config.model_name}")
        return client

    async def close_all(self) -> None:
        """Close all active clients."""
        close_tasks = []

        for service_name, client in self._clients.items():
            self.logger.debug(f"Closing {service_name} client")
            close_tasks.append(client.close())

        if close_tasks:
            results = await asyncio.gather(*close_tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    self.logger.error(f"Error closing client: {result}")

        self._clients.clear()

    async def test_connections(self) -> Dict[str, bool]:
        """Check both services with a lightweight request each."""
        results = {}

        try:
            linear = await self.create_linear_client()
            results["linear"] = await linear.validate_connection()
        except Exception as e:
            self.logger.error(f"Linear connection test failed: {e}")
            results["linear"] = False

        try:
            gemini = await self.create_gemini_client()
            results["gemini"] = await gemini.validate_api_key()
        except Exception as e:
            self.logger.error(f"Gemini connection test failed: {e}")
            results["gemini"] = False

        return results

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        _ = exc_type, exc_val, exc_tb  # Unused but required by protocol
        await self.close_all()
