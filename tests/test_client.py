"""Tests for the range API client against a local server."""

import asyncio
import socket

import pytest

from pwnedpolicy.hibp.client import RangeClient
from pwnedpolicy.hibp.decoder import iter_lines
from pwnedpolicy.hibp.errors import (
    FatalTransportError,
    MalformedRequestError,
    MissingUserAgentError,
    RangeNotFoundError,
    RateLimitError,
    RequestError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnexpectedStatusError,
    UserAgentRejectedError,
)

from conftest import PASSWORD_PREFIX


def _client(range_server, **kwargs) -> RangeClient:
    kwargs.setdefault("user_agent", "pwnedpolicy-tests")
    kwargs.setdefault("backoff_initial", 0.001)
    kwargs.setdefault("backoff_max", 0.01)
    return RangeClient(api_base=f"http://{range_server.host}:{range_server.port}", **kwargs)


def _unused_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestRangeClientInit:
    def test_requires_user_agent(self):
        with pytest.raises(MissingUserAgentError):
            RangeClient(user_agent="")

    def test_defaults(self):
        client = RangeClient(user_agent="ua")
        assert client.max_attempts == 3
        assert client.api_base == "https://api.pwnedpasswords.com"
        assert client.range_url("ABCDE") == "https://api.pwnedpasswords.com/range/ABCDE"

    def test_headers(self):
        client = RangeClient(user_agent="ua")
        assert client.build_headers() == {"User-Agent": "ua", "Accept-Encoding": "br"}

    def test_optional_headers(self):
        client = RangeClient(user_agent="ua", api_key="secret", add_padding=True)
        headers = client.build_headers()
        assert headers["hibp-api-key"] == "secret"
        assert headers["Add-Padding"] == "true"


class TestFetchRange:
    async def test_success(self, range_server, range_service):
        async with _client(range_server) as client:
            response = await client.fetch_range(PASSWORD_PREFIX)
            async with response:
                lines = [line async for line in iter_lines(response)]

        assert len(lines) == 5
        assert range_service.prefixes == [PASSWORD_PREFIX]

    async def test_sends_headers(self, range_server, range_service):
        async with _client(range_server, api_key="secret", add_padding=True) as client:
            response = await client.fetch_range(PASSWORD_PREFIX)
            response.release()

        headers = range_service.requests[0]["headers"]
        assert headers["User-Agent"] == "pwnedpolicy-tests"
        assert headers["Accept-Encoding"] == "br"
        assert headers["hibp-api-key"] == "secret"
        assert headers["Add-Padding"] == "true"

    async def test_retries_then_succeeds(self, range_server, range_service):
        range_service.statuses = [500, 502]

        async with _client(range_server, max_attempts=3) as client:
            response = await client.fetch_range(PASSWORD_PREFIX)
            response.release()

        assert response.status == 200
        assert len(range_service.requests) == 3

    @pytest.mark.parametrize(
        "status, error",
        [
            (400, MalformedRequestError),
            (404, RangeNotFoundError),
            (500, UnexpectedStatusError),
            (418, UnexpectedStatusError),
        ],
    )
    async def test_retryable_until_exhausted(self, range_server, range_service, status, error):
        range_service.statuses = [status] * 5

        async with _client(range_server, max_attempts=3) as client:
            with pytest.raises(error) as exc:
                await client.fetch_range(PASSWORD_PREFIX)

        assert exc.value.status == status
        assert not isinstance(exc.value, FatalTransportError)
        assert len(range_service.requests) == 3

    @pytest.mark.parametrize(
        "status, error",
        [
            (401, UnauthorizedError),
            (403, UserAgentRejectedError),
            (429, RateLimitError),
            (503, ServiceUnavailableError),
        ],
    )
    async def test_fatal_statuses_not_retried(self, range_server, range_service, status, error):
        range_service.statuses = [status] * 5

        async with _client(range_server, max_attempts=3) as client:
            with pytest.raises(error) as exc:
                await client.fetch_range(PASSWORD_PREFIX)

        assert exc.value.status == status
        assert len(range_service.requests) == 1

    async def test_forbidden_is_missing_user_agent(self, range_server, range_service):
        range_service.statuses = [403]

        async with _client(range_server) as client:
            with pytest.raises(MissingUserAgentError):
                await client.fetch_range(PASSWORD_PREFIX)

    async def test_rate_limit_retry_after(self, range_server, range_service):
        range_service.statuses = [429]
        range_service.retry_after = "2"

        async with _client(range_server) as client:
            with pytest.raises(RateLimitError) as exc:
                await client.fetch_range(PASSWORD_PREFIX)

        assert exc.value.retry_after == 2.0

    async def test_network_error_retried(self):
        client = RangeClient(
            user_agent="ua",
            max_attempts=2,
            backoff_initial=0.001,
            api_base=f"http://127.0.0.1:{_unused_port()}",
        )
        async with client:
            with pytest.raises(RequestError) as exc:
                await client.fetch_range(PASSWORD_PREFIX)

        assert exc.value.__cause__ is not None

    async def test_request_timeout(self, range_server, range_service):
        range_service.delay = 2

        async with _client(range_server, request_timeout=0.05, max_attempts=2) as client:
            with pytest.raises(RequestError):
                await client.fetch_range(PASSWORD_PREFIX)

        assert len(range_service.requests) == 2

    async def test_cancel_interrupts_request(self, range_server, range_service):
        range_service.delay = 5

        async with _client(range_server) as client:
            task = asyncio.create_task(client.fetch_range(PASSWORD_PREFIX))
            while not range_service.requests:
                await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await asyncio.wait_for(task, 1)

    async def test_cancel_interrupts_backoff(self, range_server, range_service):
        range_service.statuses = [500] * 5

        client = _client(range_server, backoff_initial=30, backoff_max=30)
        async with client:
            task = asyncio.create_task(client.fetch_range(PASSWORD_PREFIX))
            while not range_service.requests:
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await asyncio.wait_for(task, 1)

        assert len(range_service.requests) == 1

    async def test_session_reused(self, range_server):
        async with _client(range_server) as client:
            first = await client._ensure_session()
            (await client.fetch_range(PASSWORD_PREFIX)).release()
            assert await client._ensure_session() is first
        assert client._session is None
