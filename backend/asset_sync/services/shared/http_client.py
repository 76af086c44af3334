"""Async HTTP client base with retry logic, timeouts, and error handling.

All clients of the accounts API inherit from this class to get consistent
behavior for timeouts, error mapping and transient-failure retries.
"""

import json as jsonlib
import logging
from typing import Any, Self

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Only reads are retried; writes and price lookups are issued exactly once
IDEMPOTENT_METHODS = frozenset({"GET"})


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    def payload_message(self) -> str | None:
        """Extract the ``message`` field from a JSON error body, if present."""
        if not self.response_body:
            return None
        try:
            payload = jsonlib.loads(self.response_body)
        except ValueError:
            return None
        if isinstance(payload, dict):
            message = payload.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        return None


class HTTPClient:
    """Async HTTP client base with retry logic, timeouts, and error handling.

    Example usage:
        class StatusClient(HTTPClient):
            async def is_syncing(self) -> bool:
                data = await self.get_json("/accounts/sync-status")
                return data["isInitialSyncing"]

        async with StatusClient(base_url="http://localhost:8080/api") as client:
            await client.is_syncing()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_wait: float = 1.0,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.default_headers = headers or {}
        self.retry_wait = retry_wait
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url or "",
                timeout=self.timeout,
                headers=self.default_headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        json: Any = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make HTTP request, retrying idempotent methods on transient errors.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: URL path (joined with base_url)
            params: Query parameters
            json: JSON body (for POST/PUT)
            headers: Additional headers to merge with defaults

        Returns:
            httpx.Response object

        Raises:
            HTTPClientError: On HTTP errors, timeouts, or connection failures
        """
        merged_headers = {**self.default_headers, **(headers or {})}
        attempts = self.max_retries if method in IDEMPOTENT_METHODS else 1

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(multiplier=self.retry_wait, max=10),
                retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
                reraise=True,
            ):
                with attempt:
                    response = await self.client.request(
                        method=method,
                        url=url,
                        params=params,
                        json=json,
                        headers=merged_headers,
                    )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"HTTP {e.response.status_code} for {method} {url}: {e.response.text[:200]}"
            )
            raise HTTPClientError(
                message=f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                status_code=e.response.status_code,
                response_body=e.response.text,
            ) from e
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout for {method} {url}")
            raise HTTPClientError(f"Request timed out: {url}") from e
        except httpx.ConnectError as e:
            logger.warning(f"Connection error for {method} {url}: {e}")
            raise HTTPClientError(f"Connection failed: {url}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Transport error for {method} {url}: {e}")
            raise HTTPClientError(f"Request failed: {url}: {e}") from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """Parse a JSON body, mapping malformed content to HTTPClientError."""
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Invalid JSON from {response.request.method} {response.request.url}")
            raise HTTPClientError(
                message=f"Invalid JSON response: {response.request.url}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    async def get(self, url: str, params: dict | None = None) -> httpx.Response:
        """HTTP GET request."""
        return await self._request("GET", url, params=params)

    async def post(self, url: str, json: Any = None, params: dict | None = None) -> httpx.Response:
        """HTTP POST request."""
        return await self._request("POST", url, params=params, json=json)

    async def put(self, url: str, json: Any = None) -> httpx.Response:
        """HTTP PUT request."""
        return await self._request("PUT", url, json=json)

    async def delete(self, url: str) -> httpx.Response:
        """HTTP DELETE request."""
        return await self._request("DELETE", url)

    async def get_json(self, url: str, params: dict | None = None) -> Any:
        """HTTP GET returning parsed JSON."""
        response = await self.get(url, params=params)
        return self._decode(response)

    async def post_json(self, url: str, json: Any = None, params: dict | None = None) -> Any:
        """HTTP POST returning parsed JSON (None for an empty body)."""
        response = await self.post(url, json=json, params=params)
        if not response.content:
            return None
        return self._decode(response)

    async def put_json(self, url: str, json: Any = None) -> Any:
        """HTTP PUT returning parsed JSON."""
        response = await self.put(url, json=json)
        return self._decode(response)
