"""
Pwned Passwords policy module.

Checks passwords against known data breaches using the k-anonymity
range API and applies minimum length and breach limit rules.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from pwnedpolicy.hibp.models import (
    BreachRecord,
    EvaluationResult,
    RangeKeys,
    RiskLevel,
)
from pwnedpolicy.hibp.errors import (
    BreachLimitError,
    ConfigurationError,
    DecodeError,
    FatalTransportError,
    MalformedRequestError,
    MalformedResponseError,
    MinLengthError,
    MissingUserAgentError,
    PolicyError,
    PwnedPolicyError,
    RangeNotFoundError,
    RateLimitError,
    RequestError,
    ServiceUnavailableError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
    UserAgentRejectedError,
)
from pwnedpolicy.hibp.hashing import derive_keys, split_hash
from pwnedpolicy.hibp.client import RangeClient
from pwnedpolicy.hibp.policy import PasswordPolicy, evaluate_sync, validate_sync

__all__ = [
    "PasswordPolicy",
    "RangeClient",
    "evaluate_sync",
    "validate_sync",
    "derive_keys",
    "split_hash",
    "BreachRecord",
    "EvaluationResult",
    "RangeKeys",
    "RiskLevel",
    "PwnedPolicyError",
    "ConfigurationError",
    "MissingUserAgentError",
    "PolicyError",
    "MinLengthError",
    "BreachLimitError",
    "TransportError",
    "RequestError",
    "UnexpectedStatusError",
    "MalformedRequestError",
    "RangeNotFoundError",
    "DecodeError",
    "MalformedResponseError",
    "FatalTransportError",
    "UnauthorizedError",
    "UserAgentRejectedError",
    "RateLimitError",
    "ServiceUnavailableError",
]
