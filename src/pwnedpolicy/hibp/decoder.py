"""
Brotli decoding of streamed range responses.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import codecs
from contextlib import aclosing
from typing import AsyncIterator

import aiohttp
import brotli

from pwnedpolicy.hibp.errors import DecodeError, RequestError

CHUNK_SIZE = 8192


class LineDecoder:
    """Incrementally decompress brotli chunks into text lines."""

    def __init__(self):
        self._decompressor = brotli.Decompressor()
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._pending = ""
        self._received = False

    def feed(self, chunk: bytes) -> list[str]:
        """Decode a chunk and return the complete lines it finished."""
        if not chunk:
            return []
        if self._decompressor.is_finished():
            raise DecodeError("unexpected data after end of brotli stream")
        self._received = True
        try:
            data = self._decompressor.process(chunk)
            self._pending += self._text.decode(data)
        except brotli.error as e:
            raise DecodeError(f"invalid brotli data in range response: {e}") from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"range response is not valid UTF-8: {e}") from e

        *lines, self._pending = self._pending.split("\n")
        return lines

    def finish(self) -> list[str]:
        """Flush the trailing line. An empty body yields no lines."""
        if not self._received:
            return []
        if not self._decompressor.is_finished():
            raise DecodeError("truncated brotli stream in range response")
        try:
            self._pending += self._text.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise DecodeError(f"range response is not valid UTF-8: {e}") from e

        tail, self._pending = self._pending, ""
        return [tail] if tail else []


def decode_lines(body: bytes) -> list[str]:
    """Decode a complete brotli body into lines."""
    decoder = LineDecoder()
    return decoder.feed(body) + decoder.finish()


async def _read_chunks(
    response: aiohttp.ClientResponse,
    chunk_size: int,
) -> AsyncIterator[bytes]:
    # Failures here happen after the request was accepted and are not retried
    try:
        async for chunk in response.content.iter_chunked(chunk_size):
            yield chunk
    except asyncio.TimeoutError as e:
        raise RequestError("Timeout while reading range response") from e
    except aiohttp.ClientError as e:
        raise RequestError(f"Failed reading range response: {e}") from e


async def iter_lines(
    response: aiohttp.ClientResponse,
    chunk_size: int = CHUNK_SIZE,
) -> AsyncIterator[str]:
    """Yield decoded lines from a brotli-encoded response body.

    The response is released when iteration ends, fails, or the generator
    is closed early (wrap in ``contextlib.aclosing`` when not exhausting it).
    Network failures and timeouts while streaming raise RequestError.
    """
    decoder = LineDecoder()
    try:
        async with aclosing(_read_chunks(response, chunk_size)) as chunks:
            async for chunk in chunks:
                for line in decoder.feed(chunk):
                    yield line
        for line in decoder.finish():
            yield line
    finally:
        response.release()
