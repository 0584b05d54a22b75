"""
Data models for Pwned Passwords range lookups and policy evaluations.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from enum import Enum


class RiskLevel(str, Enum):
    """Risk level based on password exposure."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_count(cls, occurrences: int) -> "RiskLevel":
        """Determine risk level based on occurrences."""
        if occurrences == 0:
            return cls.SAFE
        elif occurrences < 10:
            return cls.LOW
        elif occurrences < 100:
            return cls.MEDIUM
        elif occurrences < 10000:
            return cls.HIGH
        else:
            return cls.CRITICAL


@dataclass(frozen=True)
class RangeKeys:
    """SHA-1 digest of a password split for a k-anonymity range query.

    ``prefix`` is sent to the API, ``suffix`` never leaves this process.
    """

    prefix: str
    suffix: str

    @property
    def digest(self) -> str:
        return self.prefix + self.suffix

    def __repr__(self) -> str:
        # Keep the suffix out of tracebacks and logs
        return f"RangeKeys(prefix={self.prefix!r}, suffix='***')"


@dataclass(frozen=True)
class BreachRecord:
    """One ``SUFFIX:COUNT`` line of a range response."""

    suffix: str
    count: int


@dataclass(frozen=True)
class EvaluationResult:
    """Result of evaluating a password against the breach policy."""

    breach_count: int = 0
    allowed: bool = False
    notes: str = ""
    checked_at: datetime = field(default_factory=datetime.now)

    @property
    def is_pwned(self) -> bool:
        """Check if password was found in breaches."""
        return self.breach_count > 0

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.from_count(self.breach_count)

    @property
    def risk_description(self) -> str:
        """Get human-readable risk description."""
        descriptions = {
            RiskLevel.SAFE: "This password has not been found in any known data breaches.",
            RiskLevel.LOW: f"This password has been seen {self.breach_count} times in data breaches. Consider changing it.",
            RiskLevel.MEDIUM: f"This password has been seen {self.breach_count} times. You should change it.",
            RiskLevel.HIGH: f"This password has been seen {self.breach_count:,} times! Change it immediately.",
            RiskLevel.CRITICAL: f"This password has been seen {self.breach_count:,} times! It's extremely common and must be changed.",
        }
        return descriptions[self.risk_level]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "breach_count": self.breach_count,
            "allowed": self.allowed,
            "notes": self.notes,
            "is_pwned": self.is_pwned,
            "risk_level": self.risk_level.value,
            "checked_at": self.checked_at.isoformat(),
        }
