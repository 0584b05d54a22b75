"""
K-anonymity key derivation for Pwned Passwords range queries.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import hashlib
import string

from pwnedpolicy.hibp.models import RangeKeys

PREFIX_LENGTH = 5
SHA1_HEX_LENGTH = 40


def password_bytes(password: str | bytes) -> bytes:
    """Return the exact bytes that are hashed and measured for *password*.

    Text is encoded as UTF-8 without any normalization; bytes are used
    as given.
    """
    if isinstance(password, str):
        return password.encode("utf-8")
    return password


def derive_keys(password: str | bytes) -> RangeKeys:
    """Hash *password* with SHA-1 and split the digest for a range query."""
    password_hash = hashlib.sha1(password_bytes(password)).hexdigest().upper()
    return RangeKeys(
        prefix=password_hash[:PREFIX_LENGTH],
        suffix=password_hash[PREFIX_LENGTH:],
    )


def split_hash(sha1_hash: str) -> RangeKeys:
    """Split a pre-computed SHA-1 hex digest into range keys."""
    sha1_hash = sha1_hash.strip().upper()
    if len(sha1_hash) != SHA1_HEX_LENGTH or any(c not in string.hexdigits for c in sha1_hash):
        raise ValueError("expected a 40 character SHA-1 hex digest")
    return RangeKeys(prefix=sha1_hash[:PREFIX_LENGTH], suffix=sha1_hash[PREFIX_LENGTH:])
