"""
Password breach policy evaluation.

Combines the minimum length rule with a Pwned Passwords range lookup and
a breach limit into a single verdict.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import logging
from contextlib import aclosing

from pwnedpolicy.config import PolicyConfig
from pwnedpolicy.hibp.client import RangeClient
from pwnedpolicy.hibp.decoder import iter_lines
from pwnedpolicy.hibp.errors import (
    BreachLimitError,
    ConfigurationError,
    MinLengthError,
    MissingUserAgentError,
)
from pwnedpolicy.hibp.hashing import derive_keys, password_bytes, split_hash
from pwnedpolicy.hibp.models import EvaluationResult, RangeKeys
from pwnedpolicy.hibp.scanner import scan_breach_count_async

logger = logging.getLogger(__name__)


class PasswordPolicy:
    """Evaluates passwords against a breach policy.

    Each call is independent; the only shared state is the range client's
    HTTP session. Thresholds are read from ``config`` at call time.
    """

    def __init__(self, config: PolicyConfig, client: RangeClient | None = None):
        """Initialize the policy.

        Args:
            config: Policy configuration; ``user_agent`` is required.
                Zero or None numeric fields are replaced with their
                defaults on this object, which the policy keeps using.
            client: Range client to use instead of one built from config

        Raises:
            MissingUserAgentError: config has no user agent
            ConfigurationError: any other invalid setting
        """
        if not config.user_agent:
            raise MissingUserAgentError()

        config.apply_defaults()
        errors = config.validate()
        if errors:
            raise ConfigurationError(f"Configuration errors: {', '.join(errors)}")

        self.config = config
        self.client = client or RangeClient(
            user_agent=config.user_agent,
            api_key=config.api_key,
            add_padding=config.add_padding,
            max_attempts=config.max_attempts,
            request_timeout=config.request_timeout,
            backoff_initial=config.backoff_initial,
            backoff_max=config.backoff_max,
            api_base=config.api_base,
        )

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "PasswordPolicy":
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _breach_count(self, keys: RangeKeys) -> int:
        response = await self.client.fetch_range(keys.prefix)
        async with response:
            async with aclosing(iter_lines(response)) as lines:
                count = await scan_breach_count_async(lines, keys.suffix)
        logger.debug(f"Range {keys.prefix}: matched count {count}")
        return count

    async def _evaluate(self, password: str | bytes) -> EvaluationResult:
        min_length = self.config.min_password_length
        data = password_bytes(password)
        if len(data) < min_length:
            raise MinLengthError(min_length, len(data))

        breach_count = await self._breach_count(derive_keys(data))

        breach_limit = self.config.breach_limit
        allowed = breach_count < breach_limit
        if allowed:
            notes = "" if breach_count == 0 else f"found in {breach_count:,} data breaches"
        else:
            notes = f"found in {breach_count:,} data breaches (limit {breach_limit:,})"
        return EvaluationResult(breach_count=breach_count, allowed=allowed, notes=notes)

    async def evaluate(
        self,
        password: str | bytes,
        timeout: float | None = None,
    ) -> EvaluationResult:
        """Evaluate a password against the policy.

        Args:
            password: Password to check (NOT stored or logged); its length
                is measured in UTF-8 bytes, the same bytes that are hashed
            timeout: Optional deadline in seconds for the whole lookup

        Returns:
            EvaluationResult with breach count and verdict

        Raises:
            MinLengthError: password too short; no request is made
            TransportError: the range lookup failed
            asyncio.TimeoutError: ``timeout`` expired
        """
        if timeout is None:
            return await self._evaluate(password)
        return await asyncio.wait_for(self._evaluate(password), timeout)

    async def validate(self, password: str | bytes, timeout: float | None = None) -> None:
        """Like evaluate, but raise BreachLimitError when not allowed."""
        result = await self.evaluate(password, timeout=timeout)
        if not result.allowed:
            raise BreachLimitError(result.breach_count)

    async def breach_count_for_hash(self, sha1_hash: str, timeout: float | None = None) -> int:
        """Look up the breach count of a pre-computed SHA-1 hex digest."""
        keys = split_hash(sha1_hash)
        if timeout is None:
            return await self._breach_count(keys)
        return await asyncio.wait_for(self._breach_count(keys), timeout)


# Convenience functions for synchronous usage
def evaluate_sync(
    password: str | bytes,
    config: PolicyConfig,
    timeout: float | None = None,
) -> EvaluationResult:
    """Synchronous wrapper for PasswordPolicy.evaluate."""
    async def _evaluate():
        async with PasswordPolicy(config) as policy:
            return await policy.evaluate(password, timeout=timeout)

    return asyncio.run(_evaluate())


def validate_sync(
    password: str | bytes,
    config: PolicyConfig,
    timeout: float | None = None,
) -> None:
    """Synchronous wrapper for PasswordPolicy.validate."""
    async def _validate():
        async with PasswordPolicy(config) as policy:
            await policy.validate(password, timeout=timeout)

    asyncio.run(_validate())
