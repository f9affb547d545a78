"""Digest helpers for deriving style scope identifiers."""

from __future__ import annotations

import hashlib


def digest(message: str, length: int | None = None) -> str:
    """Return the hex SHA-256 digest of ``message``.

    Args:
        message: Text to hash, encoded as UTF-8.
        length: If given, truncate the hex digest to this many characters.

    Returns:
        Lowercase hex digest, possibly truncated.

    Raises:
        ValueError: If ``length`` is not positive.
    """
    if length is not None and length <= 0:
        raise ValueError(f"Digest length must be positive, got {length}")
    hex_digest = hashlib.sha256(message.encode("utf-8")).hexdigest()
    return hex_digest if length is None else hex_digest[:length]


def scope_id_for(style: str, length: int) -> str:
    """Scope identifier for a block of style text.

    Surrounding whitespace is ignored so that re-indented but otherwise
    identical blocks share a scope.
    """
    return digest(style.strip(), length)
