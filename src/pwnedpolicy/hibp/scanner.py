"""
Scan decoded range response lines for a password's hash suffix.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from typing import AsyncIterable, Iterable

from pwnedpolicy.hibp.errors import MalformedResponseError
from pwnedpolicy.hibp.models import BreachRecord

SEPARATOR = ":"


def split_line(line: str) -> tuple[str, str] | None:
    """Split ``SUFFIX:COUNT`` into its two fields, or None if malformed."""
    fields = line.strip().split(SEPARATOR)
    if len(fields) != 2:
        return None
    return fields[0], fields[1]


def parse_count(text: str) -> int:
    """Parse a base-10 unsigned breach count."""
    if not text.isdigit() or not text.isascii():
        raise MalformedResponseError(f"invalid breach count in range response: {text!r}")
    return int(text)


def parse_record(line: str) -> BreachRecord | None:
    """Parse one response line into a BreachRecord.

    Lines that don't split into exactly two fields are skipped (None).
    """
    fields = split_line(line)
    if fields is None:
        return None
    suffix, count = fields
    return BreachRecord(suffix=suffix, count=parse_count(count))


def _match(line: str, suffix: str) -> int | None:
    fields = split_line(line)
    if fields is None or fields[0] != suffix:
        return None
    return parse_count(fields[1])


def scan_breach_count(lines: Iterable[str], suffix: str) -> int:
    """Return the count on the line whose suffix equals *suffix*, else 0.

    Only the matching line's count is parsed; a bad count there raises
    MalformedResponseError.
    """
    for line in lines:
        count = _match(line, suffix)
        if count is not None:
            return count
    return 0


async def scan_breach_count_async(lines: AsyncIterable[str], suffix: str) -> int:
    """Async variant of scan_breach_count for streamed responses."""
    async for line in lines:
        count = _match(line, suffix)
        if count is not None:
            return count
    return 0
