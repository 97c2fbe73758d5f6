"""Base client for HTTP integrations."""

import asyncio
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp

from ..utils.exceptions import (
    AuthenticationError,
    IntegrationError,
    NetworkError,
    RateLimitError,
)
from ..utils.logging_config import get_logger, get_security_logger


class BaseIntegrationClient(ABC):
    """Shared aiohttp session handling for integration clients.

    Requests are issued exactly once. Failures surface to the caller as
    ``IntegrationError`` subclasses or ``NetworkError``.
    """

    service_name = "http"

    def __init__(self, base_url: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = get_logger(self.__class__.__name__)
        self.security_logger = get_security_logger()

        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

        self.metrics = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "total_latency": 0.0,
            "last_request_time": None,
        }

    @abstractmethod
    async def validate_connection(self) -> bool:
        """Validate the connection to the service."""

    @asynccontextmanager
    async def get_session(self):
        """Get or create the aiohttp session."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    headers=self._get_default_headers(),
                )

        yield self._session

    def _get_default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": "Recap/1.0",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str = "",
        headers: Optional[Dict[str, str]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make a single HTTP request and return the decoded JSON body."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}" if endpoint else self.base_url
        request_headers = self._get_default_headers()
        if headers:
            request_headers.update(headers)

        self.logger.debug(
            f"Making {method} request to {url}",
            extra={"has_body": json_data is not None},
        )

        start_time = time.time()
        self.metrics["total_requests"] += 1

        try:
            async with self.get_session() as session:
                async with session.request(
                    method=method, url=url, headers=request_headers, json=json_data
                ) as response:
                    self.security_logger.log_api_request(
                        service=self.service_name,
                        endpoint=url,
                        method=method,
                        status_code=response.status,
                    )

                    if response.status == 429:
                        retry_after = response.headers.get("Retry-After", "60")
                        raise RateLimitError(
                            f"Rate limit exceeded. Retry after {retry_after} seconds"
                        )

                    if response.status in (401, 403):
                        raise AuthenticationError(
                            f"Authentication failed: {response.status}"
                        )

                    if response.status >= 400:
                        result = await self._error_body(response)
                    else:
                        result = await response.json(content_type=None)

        except ValueError as e:
            self.metrics["failed_requests"] += 1
            self.logger.error(f"Invalid JSON from {method} {url}: {e}")
            raise IntegrationError(f"Invalid JSON response: {e}") from e

        except aiohttp.ClientError as e:
            self.metrics["failed_requests"] += 1
            self.logger.error(f"Request failed: {method} {url}: {e}")
            raise NetworkError(f"Network request failed: {e}") from e

        except asyncio.TimeoutError as e:
            self.metrics["failed_requests"] += 1
            self.logger.error(f"Request timed out: {method} {url}")
            raise NetworkError(f"Request timed out after {self.timeout}s") from e

        except IntegrationError:
            self.metrics["failed_requests"] += 1
            self.logger.error(f"Request failed: {method} {url}", exc_info=True)
            raise

        self.metrics["successful_requests"] += 1
        self.metrics["total_latency"] += time.time() - start_time
        self.metrics["last_request_time"] = datetime.now()

        return result

    async def _error_body(self, response: aiohttp.ClientResponse) -> Dict[str, Any]:
        """Return the body of a failed response if it carries GraphQL errors."""
        # GraphQL servers report query errors in the JSON body of a 400
        if response.content_type == "application/json":
            body = await response.json()
            if isinstance(body, dict) and body.get("errors"):
                return body

        error_text = await response.text()
        raise IntegrationError(
            f"Request failed with status {response.status}: {error_text}"
        )

    async def post(
        self,
        endpoint: str = "",
        json_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Make POST request."""
        return await self._make_request(
            "POST", endpoint, headers=headers, json_data=json_data
        )

    async def close(self) -> None:
        """Close the client and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()

        self.logger.info("Client closed", extra={"metrics": self.get_metrics()})

    def get_metrics(self) -> Dict[str, Any]:
        metrics = self.metrics.copy()

        if metrics["successful_requests"] > 0:
            metrics["average_latency"] = (
                metrics["total_latency"] / metrics["successful_requests"]
            )
        else:
            metrics["average_latency"] = 0.0

        return metrics

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        _ = exc_type, exc_val, exc_tb  # Unused but required by protocol
        await self.close()
