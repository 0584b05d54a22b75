"""
Configuration for password breach policies.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import os
from dataclasses import dataclass
from typing import Any

DEFAULT_MIN_PASSWORD_LENGTH = 6
DEFAULT_BREACH_LIMIT = 10
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BACKOFF_INITIAL = 0.5
DEFAULT_BACKOFF_MAX = 10.0
DEFAULT_API_BASE = "https://api.pwnedpasswords.com"


def _env_flag(name: str, default: str = "") -> bool:
    return os.environ.get(name, default).lower() in ("true", "yes", "1")


@dataclass
class PolicyConfig:
    """Configuration for a PasswordPolicy.

    Threshold fields are read on every evaluation, so they can be changed
    on a live instance between calls.
    """

    # Required by the API; typically the name of the consuming app
    user_agent: str = ""

    # Only needed by the email APIs, accepted here for forward compatibility
    api_key: str | None = None

    # https://haveibeenpwned.com/API/v3#PwnedPasswordsPadding
    add_padding: bool = False

    # Policy thresholds
    min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH
    breach_limit: int = DEFAULT_BREACH_LIMIT

    # Transport settings
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    backoff_initial: float = DEFAULT_BACKOFF_INITIAL
    backoff_max: float = DEFAULT_BACKOFF_MAX
    api_base: str = DEFAULT_API_BASE

    @classmethod
    def from_env(cls) -> "PolicyConfig":
        """Load configuration from environment variables."""
        return cls(
            user_agent=os.environ.get("PWNEDPOLICY_USER_AGENT", ""),
            api_key=os.environ.get("HIBP_API_KEY"),
            add_padding=_env_flag("PWNEDPOLICY_ADD_PADDING"),
            min_password_length=int(os.environ.get("PWNEDPOLICY_MIN_LENGTH", str(DEFAULT_MIN_PASSWORD_LENGTH))),
            breach_limit=int(os.environ.get("PWNEDPOLICY_BREACH_LIMIT", str(DEFAULT_BREACH_LIMIT))),
            max_attempts=int(os.environ.get("PWNEDPOLICY_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))),
            request_timeout=float(os.environ.get("PWNEDPOLICY_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))),
            backoff_initial=float(os.environ.get("PWNEDPOLICY_BACKOFF_INITIAL", str(DEFAULT_BACKOFF_INITIAL))),
            backoff_max=float(os.environ.get("PWNEDPOLICY_BACKOFF_MAX", str(DEFAULT_BACKOFF_MAX))),
            api_base=os.environ.get("PWNEDPOLICY_API_BASE", DEFAULT_API_BASE),
        )

    def apply_defaults(self) -> None:
        """Replace unset (zero or None) numeric fields with their defaults."""
        self.min_password_length = self.min_password_length or DEFAULT_MIN_PASSWORD_LENGTH
        self.breach_limit = self.breach_limit or DEFAULT_BREACH_LIMIT
        self.max_attempts = self.max_attempts or DEFAULT_MAX_ATTEMPTS
        self.request_timeout = self.request_timeout or DEFAULT_REQUEST_TIMEOUT
        self.backoff_initial = self.backoff_initial or DEFAULT_BACKOFF_INITIAL
        self.backoff_max = self.backoff_max or DEFAULT_BACKOFF_MAX
        self.api_base = self.api_base or DEFAULT_API_BASE

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if not self.user_agent:
            errors.append("user_agent is required")
        if self.min_password_length < 0:
            errors.append("min_password_length must not be negative")
        if self.breach_limit < 0:
            errors.append("breach_limit must not be negative")
        if self.max_attempts < 1:
            errors.append("max_attempts must be at least 1")
        if self.request_timeout <= 0:
            errors.append("request_timeout must be positive")
        if self.backoff_initial < 0 or self.backoff_max < 0:
            errors.append("backoff intervals must not be negative")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (masks the API key)."""
        return {
            "user_agent": self.user_agent,
            "api_key": f"{self.api_key[:8]}..." if self.api_key else None,
            "add_padding": self.add_padding,
            "min_password_length": self.min_password_length,
            "breach_limit": self.breach_limit,
            "max_attempts": self.max_attempts,
            "request_timeout": self.request_timeout,
            "backoff_initial": self.backoff_initial,
            "backoff_max": self.backoff_max,
            "api_base": self.api_base,
        }
