"""
Exceptions raised while evaluating passwords against Pwned Passwords.

Policy failures, configuration problems and transport failures each have
their own branch so callers can catch exactly what they handle and read
the typed attributes (breach count, lengths, HTTP status) directly.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""


class PwnedPolicyError(Exception):
    """Base class for all pwnedpolicy errors."""


# =============================================================================
# Configuration
# =============================================================================

class ConfigurationError(PwnedPolicyError, ValueError):
    """Invalid policy configuration."""


class MissingUserAgentError(ConfigurationError):
    """A User-Agent is required by the Pwned Passwords API."""

    def __init__(self, message: str = "UserAgent was not specified"):
        super().__init__(message)


# =============================================================================
# Policy
# =============================================================================

class PolicyError(PwnedPolicyError):
    """The password does not satisfy the policy."""


class MinLengthError(PolicyError):
    """Password is shorter than the configured minimum."""

    def __init__(self, min_required: int, length: int):
        self.min_required = min_required
        self.length = length
        super().__init__(
            f"minimum password length {min_required} not satisfied (got {length})"
        )


class BreachLimitError(PolicyError):
    """Password was found in at least ``breach_limit`` breaches."""

    def __init__(self, breach_count: int):
        self.breach_count = breach_count
        super().__init__(
            f"breach count exceeded: found in {breach_count:,} data breaches"
        )


# =============================================================================
# Transport
# =============================================================================

class TransportError(PwnedPolicyError):
    """Failure talking to the range API. Retried unless fatal."""


class RequestError(TransportError):
    """Network-level failure or per-request timeout."""


class UnexpectedStatusError(TransportError):
    """The API answered with a status that is not 200."""

    def __init__(self, status: int, message: str | None = None):
        self.status = status
        super().__init__(
            message or f"http request not successful: received status {status}"
        )


class MalformedRequestError(UnexpectedStatusError):
    """HTTP 400. Kept retryable for compatibility with earlier releases."""

    def __init__(self):
        super().__init__(400, "malformed request")


class RangeNotFoundError(UnexpectedStatusError):
    """HTTP 404. Every prefix 00000-FFFFF should exist, so this is transient."""

    def __init__(self):
        super().__init__(404, "received a 404 error from the Pwned Passwords API")


class DecodeError(TransportError):
    """Response body is not valid brotli data."""


class MalformedResponseError(TransportError):
    """A matching response line carried a count that is not an integer."""


class FatalTransportError(TransportError):
    """Transport failure that retrying cannot fix."""

    status: int = 0


class UnauthorizedError(FatalTransportError):
    status = 401

    def __init__(self):
        super().__init__(
            "unauthorized request to Pwned Passwords API: "
            "no API key was provided or the key was invalid"
        )


class UserAgentRejectedError(FatalTransportError, MissingUserAgentError):
    """HTTP 403. The API rejected the request's User-Agent."""

    status = 403

    def __init__(self):
        MissingUserAgentError.__init__(self, "User-Agent was rejected by the Pwned Passwords API")


class RateLimitError(FatalTransportError):
    """HTTP 429. The rate limit has been exceeded."""

    status = 429

    def __init__(self, retry_after: float | None = None):
        self.retry_after = retry_after
        message = "too many requests: the rate limit has been exceeded"
        if retry_after is not None:
            message += f" (retry after {retry_after:g}s)"
        super().__init__(message)


class ServiceUnavailableError(FatalTransportError):
    """HTTP 503, usually returned by Cloudflare when the origin is down."""

    status = 503

    def __init__(self):
        super().__init__("service unavailable")
