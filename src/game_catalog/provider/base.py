"""
Base provider client with retry logic, rate limiting, and error handling.

Every external game-information provider is built on this class. It
owns the HTTP client, retries transient failures with exponential
backoff, and maps every failure onto two errors callers can absorb:
ProviderUnavailableError and ProviderFormatError.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from game_catalog.config import RetryConfig, get_settings
from game_catalog.logger import get_logger


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class ProviderUnavailableError(ProviderError):
    """Raised on network failure, timeout, or an error response."""

    pass


class RateLimitError(ProviderUnavailableError):
    """Raised when the provider answers 429."""

    pass


class ProviderFormatError(ProviderError):
    """Raised when a response cannot be parsed."""

    pass


def _is_transient(error: BaseException) -> bool:
    """Transport errors, throttling and server errors are worth retrying."""
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, ProviderUnavailableError) and error.status_code is not None:
        return error.status_code == 429 or error.status_code >= 500
    return False


class BaseProvider(ABC):
    """
    Abstract base class for external game providers.

    Provides common functionality including:
    - HTTP client management
    - Retry logic with exponential backoff
    - Error mapping onto the provider error taxonomy
    - Structured logging

    Subclasses must implement:
    - source_name: Identifier for the provider
    - _parse_response(): Response parsing and validation
    """

    def __init__(
        self,
        *,
        retry_config: RetryConfig | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            retry_config: Custom retry configuration (uses settings if None)
            timeout: HTTP request timeout in seconds
            client: Pre-built HTTP client (one is created lazily if None)
        """
        self._retry_config = retry_config or get_settings().retry
        self._timeout = timeout or 10.0
        self._logger = get_logger(
            self.__class__.__name__,
            component="provider",
            source=self.source_name,
        )
        self._client = client

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return identifier for this provider."""
        ...

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers={
                    "User-Agent": "GameCatalog/1.0",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _log_retry_attempt(self, retry_state: RetryCallState) -> None:
        """Log retry attempts for observability."""
        self._logger.warning(
            "Retrying request",
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
            exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self.client.request(method, url, **kwargs)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After", "60")
            raise RateLimitError(
                f"Rate limit exceeded. Retry after {retry_after}s",
                source=self.source_name,
                endpoint=url,
                status_code=429,
            )

        if response.status_code >= 400:
            raise ProviderUnavailableError(
                f"API error: {response.status_code}",
                source=self.source_name,
                endpoint=url,
                status_code=response.status_code,
            )

        return response

    async def _make_request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Make HTTP request with retry logic.

        Raises:
            ProviderUnavailableError: If the request still fails after retries
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self._retry_config.max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_config.base_delay_seconds,
                max=self._retry_config.max_delay_seconds,
                exp_base=self._retry_config.exponential_base,
            ),
            before_sleep=self._log_retry_attempt,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    self._logger.debug("Making request", method=method, url=url)
                    return await self._send(method, url, **kwargs)
        except ProviderUnavailableError:
            self._logger.error(
                "Request failed after retries",
                url=url,
                attempts=self._retry_config.max_attempts,
            )
            raise
        except httpx.HTTPError as e:
            self._logger.error(
                "Request failed after retries",
                url=url,
                attempts=self._retry_config.max_attempts,
                error=str(e),
            )
            raise ProviderUnavailableError(
                f"Request failed: {e.__class__.__name__}",
                source=self.source_name,
                endpoint=url,
                original_error=e,
            ) from e

        # AsyncRetrying with reraise=True either returns or raises above
        raise ProviderUnavailableError(
            "Request was not attempted", source=self.source_name, endpoint=url
        )

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        """GET a URL and decode its JSON body."""
        response = await self._make_request("GET", url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ProviderFormatError(
                "Response body is not valid JSON",
                source=self.source_name,
                endpoint=url,
                status_code=response.status_code,
                original_error=e,
            ) from e

    @abstractmethod
    def _parse_response(self, raw_data: Any) -> Any:
        """
        Parse and validate a raw API response.

        Raises:
            ProviderFormatError: If response doesn't match expected schema
        """
        ...
