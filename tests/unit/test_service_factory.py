"""Unit tests for the service factory."""

from unittest.mock import AsyncMock, patch

import pytest

from recap.core.config_manager import ConfigManager
from recap.core.service_factory import ServiceFactory
from recap.integrations.linear_client import LinearClient
from recap.utils.exceptions import ConfigurationError


@pytest.fixture
def factory(config_manager):
    return ServiceFactory(config_manager)


class TestServiceFactory:
    """Test suite for ServiceFactory."""

    @pytest.mark.asyncio
    async def test_linear_client_is_cached(self, factory, sample_environ):
        first = await factory.create_linear_client()
        second = await factory.create_linear_client()

        assert isinstance(first, LinearClient)
        assert first is second
        assert first.api_key == sample_environ["LINEAR_API_KEY"]

        await factory.close_all()

    @pytest.mark.asyncio
    async def test_close_all_forgets_clients(self, factory):
        first = await factory.create_linear_client()
        await factory.close_all()

        second = await factory.create_linear_client()

        assert first is not second
        await factory.close_all()

    @pytest.mark.asyncio
    async def test_missing_key(self):
        factory = ServiceFactory(ConfigManager(environ={}))

        with pytest.raises(ConfigurationError, match="LINEAR_API_KEY"):
            await factory.create_linear_client()
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            await factory.create_gemini_client()

    @pytest.mark.asyncio
    async def test_malformed_key(self):
        factory = ServiceFactory(ConfigManager(environ={"LINEAR_API_KEY": "bad key"}))

        with pytest.raises(ConfigurationError, match="Invalid Linear configuration"):
            await factory.create_linear_client()

    @pytest.mark.asyncio
    async def test_gemini_client_uses_ai_config(self, sample_environ):
        manager = ConfigManager(
            environ={**sample_environ, "RECAP_GEMINI_MODEL": "gemini-2.5-pro"}
        )
        factory = ServiceFactory(manager)

        with patch("recap.integrations.gemini_client.genai"):
            client = await factory.create_gemini_client()

        assert client.model_name == "gemini-2.5-pro"
        await factory.close_all()

    @pytest.mark.asyncio
    async def test_connections(self, factory):
        with patch(
            "recap.core.service_factory.LinearClient.validate_connection",
            new=AsyncMock(return_value=True),
        ), patch("recap.integrations.gemini_client.genai"), patch(
            "recap.core.service_factory.GeminiClient.validate_api_key",
            new=AsyncMock(return_value=False),
        ):
            results = await factory.test_connections()

        assert results == {"linear": True, "gemini": False}
        await factory.close_all()

    @pytest.mark.asyncio
    async def test_connections_without_keys(self):
        factory = ServiceFactory(ConfigManager(environ={}))

        assert await factory.test_connections() == {"linear": False, "gemini": False}
