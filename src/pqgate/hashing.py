"""Content hashing for persisted queries."""

import hashlib
import re

_SHA256_HEX = re.compile(r"^[0-9a-fA-F]{64}$")


def compute_hash(query: str) -> str:
    """Return the lowercase hex SHA-256 digest of the exact query text."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()


def normalize_hash(value: object) -> str | None:
    """Return ``value`` lowercased if it is a well-formed SHA-256 hex digest, else None."""
    if not isinstance(value, str) or not _SHA256_HEX.match(value):
        return None
    return value.lower()


def verify(query: str, claimed_hash: str) -> bool:
    """Check that ``claimed_hash`` is the content hash of ``query``."""
    normalized = normalize_hash(claimed_hash)
    if normalized is None:
        return False
    return compute_hash(query) == normalized
