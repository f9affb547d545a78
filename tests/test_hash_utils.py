"""Tests for hash utilities module."""

from __future__ import annotations

import hashlib

import pytest

from soar.hash_utils import digest, scope_id_for

_EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestDigest:
    """Tests for digest function."""

    def test_full_digest(self) -> None:
        """Returns the full hex SHA-256 digest by default."""
        assert digest("") == _EMPTY_SHA256

    def test_truncates_to_length(self) -> None:
        """Truncates to the requested number of characters."""
        assert digest("", 6) == "e3b0c4"

    def test_stable_across_calls(self) -> None:
        """Identical input yields identical output."""
        assert digest("color: red;", 8) == digest("color: red;", 8)

    def test_encodes_utf8(self) -> None:
        """Non-ASCII text is hashed as UTF-8."""
        expected = hashlib.sha256("content: '→';".encode("utf-8")).hexdigest()[:6]
        assert digest("content: '→';", 6) == expected

    @pytest.mark.parametrize("length", [0, -3])
    def test_rejects_non_positive_length(self, length: int) -> None:
        """Raises ValueError for a non-positive length."""
        with pytest.raises(ValueError):
            digest("x", length)


class TestScopeIdFor:
    """Tests for scope_id_for function."""

    def test_ignores_surrounding_whitespace(self) -> None:
        """Re-indented blocks share a scope."""
        assert scope_id_for("\n  color: red;\n", 6) == scope_id_for("color: red;", 6)

    def test_matches_digest_of_text(self) -> None:
        """Scope id is the truncated digest of the stripped text."""
        assert scope_id_for("color: red;", 6) == digest("color: red;", 6)
