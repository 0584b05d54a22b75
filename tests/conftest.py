"""Shared fixtures: a local stand-in for the Pwned Passwords range API."""

import asyncio

import brotli
import pytest
from aiohttp import web

from pwnedpolicy.config import PolicyConfig
from pwnedpolicy.hibp.policy import PasswordPolicy

# "password" SHA-1 = 5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8
#   prefix = 5BAA6 , suffix = 1E4C9B93F3F0682250B6CF8331B7EE68FD8
PASSWORD_PREFIX = "5BAA6"
PASSWORD_SUFFIX = "1E4C9B93F3F0682250B6CF8331B7EE68FD8"

RANGE_5BAA6 = (
    "0018A45C4D1DEF81644B54AB7F969B88D65:10\r\n"
    "00D4F6E8FA6EECAD2A3AA415EEC418D38EC:2\r\n"
    "011053FD0102E94D6AE2F8B83D76FAF94F6:1\r\n"
    "1E4C9B93F3F0682250B6CF8331B7EE68FD8:3533661\r\n"
    "A0F78D8CD41C7B9B0C55B12E858CDEE2E8B:3\r\n"
)

# Served for any prefix without an explicit range
RANGE_DEFAULT = (
    "0005AD76BD555C1D6D771DE417A4B87E4B4:4\r\n"
    "000A8DAE4228F821FB418F59826079BF368:2\r\n"
    "00E40E5AFA8DCE8A41F9CBDA0EDC0D57E5E:0\r\n"
)


class RangeService:
    """Records requests and serves brotli-compressed range bodies."""

    def __init__(self):
        self.ranges: dict[str, str] = {PASSWORD_PREFIX: RANGE_5BAA6}
        self.statuses: list[int] = []
        self.retry_after: str | None = None
        self.raw_body: bytes | None = None
        self.delay: float = 0
        self.body_cut: int | None = None
        self.body_stall: float = 0
        self.requests: list[dict] = []
        self.release = asyncio.Event()

    @property
    def prefixes(self) -> list[str]:
        return [r["prefix"] for r in self.requests]

    async def handle(self, request: web.Request) -> web.Response:
        prefix = request.match_info["prefix"]
        self.requests.append({"prefix": prefix, "headers": request.headers.copy()})

        if self.delay:
            try:
                await asyncio.wait_for(self.release.wait(), self.delay)
            except asyncio.TimeoutError:
                pass

        if self.statuses:
            status = self.statuses.pop(0)
            if status != 200:
                headers = {"Retry-After": self.retry_after} if self.retry_after else {}
                return web.Response(status=status, headers=headers)

        if self.raw_body is not None:
            body = self.raw_body
        else:
            text = self.ranges.get(prefix, RANGE_DEFAULT)
            body = brotli.compress(text.encode("utf-8")) if text else b""

        if self.body_cut is None:
            return web.Response(body=body, headers={"Content-Encoding": "br"})

        # Send the first body_cut bytes, then stall or drop the connection
        response = web.StreamResponse(headers={"Content-Encoding": "br"})
        response.content_length = len(body)
        await response.prepare(request)
        await response.write(body[:self.body_cut])
        if self.body_stall:
            try:
                await asyncio.wait_for(self.release.wait(), self.body_stall)
            except asyncio.TimeoutError:
                pass
            await response.write(body[self.body_cut:])
        else:
            request.transport.close()
        return response


@pytest.fixture
def range_service():
    return RangeService()


@pytest.fixture
async def range_server(aiohttp_server, range_service):
    app = web.Application()
    app.router.add_get("/range/{prefix}", range_service.handle)
    server = await aiohttp_server(app)
    yield server
    range_service.release.set()


@pytest.fixture
def config(range_server):
    return PolicyConfig(
        user_agent="pwnedpolicy-tests",
        min_password_length=7,
        breach_limit=10,
        max_attempts=3,
        backoff_initial=0.001,
        backoff_max=0.01,
        api_base=f"http://{range_server.host}:{range_server.port}",
    )


@pytest.fixture
async def policy(config):
    async with PasswordPolicy(config) as policy:
        yield policy
