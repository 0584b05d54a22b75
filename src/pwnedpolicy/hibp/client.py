"""
Pwned Passwords range API client.

Issues k-anonymity range queries with:
- Long-lived aiohttp session shared by all lookups
- Exponential backoff via tenacity, bounded by an attempt ceiling
- Status classification into retryable and fatal failures

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import logging

import aiohttp
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pwnedpolicy.hibp.errors import (
    FatalTransportError,
    MalformedRequestError,
    MissingUserAgentError,
    RangeNotFoundError,
    RateLimitError,
    RequestError,
    ServiceUnavailableError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
    UserAgentRejectedError,
)

logger = logging.getLogger(__name__)


class RangeClient:
    """Client for the Pwned Passwords range endpoint.

    One instance owns one aiohttp session and may be shared by concurrent
    lookups on the same event loop.
    """

    PWNED_PASSWORDS_API = "https://api.pwnedpasswords.com"

    DEFAULT_MAX_ATTEMPTS = 3
    DEFAULT_REQUEST_TIMEOUT = 30.0
    DEFAULT_BACKOFF_INITIAL = 0.5
    DEFAULT_BACKOFF_MAX = 10.0

    def __init__(
        self,
        user_agent: str,
        api_key: str | None = None,
        add_padding: bool = False,
        max_attempts: int | None = None,
        request_timeout: float | None = None,
        backoff_initial: float | None = None,
        backoff_max: float | None = None,
        api_base: str | None = None,
    ):
        """Initialize range client.

        Args:
            user_agent: User-Agent header, required by the API
            api_key: Optional hibp-api-key header value
            add_padding: Ask the API to pad responses with zero-count records
            max_attempts: Total request attempts before giving up (default: 3)
            request_timeout: Seconds allowed per attempt (default: 30)
            backoff_initial: First backoff wait in seconds (default: 0.5)
            backoff_max: Upper bound for a single backoff wait (default: 10)
            api_base: Override the API base URL
        """
        if not user_agent:
            raise MissingUserAgentError()

        self.user_agent = user_agent
        self.api_key = api_key
        self.add_padding = add_padding
        self.max_attempts = max_attempts or self.DEFAULT_MAX_ATTEMPTS
        self.request_timeout = request_timeout or self.DEFAULT_REQUEST_TIMEOUT
        self.backoff_initial = backoff_initial or self.DEFAULT_BACKOFF_INITIAL
        self.backoff_max = backoff_max or self.DEFAULT_BACKOFF_MAX
        self.api_base = (api_base or self.PWNED_PASSWORDS_API).rstrip("/")
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session exists."""
        if self._session is None or self._session.closed:
            # Bodies are brotli-decoded by pwnedpolicy.hibp.decoder
            self._session = aiohttp.ClientSession(
                auto_decompress=False,
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            )
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RangeClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def range_url(self, prefix: str) -> str:
        return f"{self.api_base}/range/{prefix}"

    def build_headers(self) -> dict[str, str]:
        """Headers sent with every range request."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Encoding": "br",
        }
        if self.api_key:
            headers["hibp-api-key"] = self.api_key
        if self.add_padding:
            headers["Add-Padding"] = "true"
        return headers

    @staticmethod
    def status_error(response: aiohttp.ClientResponse) -> TransportError:
        """Map a non-200 response onto the transport error hierarchy."""
        # https://haveibeenpwned.com/API/v3#ResponseCodes
        status = response.status
        if status == 400:
            return MalformedRequestError()
        elif status == 401:
            return UnauthorizedError()
        elif status == 403:
            return UserAgentRejectedError()
        elif status == 404:
            return RangeNotFoundError()
        elif status == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                return RateLimitError(float(retry_after) if retry_after else None)
            except ValueError:
                return RateLimitError()
        elif status == 503:
            return ServiceUnavailableError()
        else:
            return UnexpectedStatusError(status)

    async def _request_once(self, prefix: str) -> aiohttp.ClientResponse:
        session = await self._ensure_session()
        url = self.range_url(prefix)
        logger.debug(f"GET {url}")

        try:
            response = await session.get(url, headers=self.build_headers())
        except asyncio.TimeoutError as e:
            raise RequestError("Request timeout") from e
        except aiohttp.ClientError as e:
            raise RequestError(f"Request failed: {e}") from e

        if response.status == 200:
            return response

        response.release()
        error = self.status_error(response)
        if isinstance(error, FatalTransportError):
            logger.warning(f"Range query for {prefix} failed permanently: {error}")
        raise error

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_initial, max=self.backoff_max),
            retry=(
                retry_if_exception_type(TransportError)
                & retry_if_not_exception_type(FatalTransportError)
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def fetch_range(self, prefix: str) -> aiohttp.ClientResponse:
        """Fetch the range response for a 5-character hash prefix.

        Retries transient failures with exponential backoff. Exhausting
        all attempts re-raises the last failure. The returned response is
        undecoded and must be released by the caller.
        """
        return await self._retrying()(self._request_once, prefix)
