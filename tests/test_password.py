"""
Tests for bcrypt password hashing.
"""

import pytest

from auth.errors import ComparisonError, InvalidInput
from auth.password import PasswordHasher


class TestHash:
    def test_hash_then_compare(self, hasher):
        hashed = hasher.hash("pw123")
        assert hasher.compare("pw123", hashed) is True

    def test_wrong_password_does_not_match(self, hasher):
        hashed = hasher.hash("pw123")
        assert hasher.compare("pw124", hashed) is False
        assert hasher.compare("PW123", hashed) is False

    def test_same_password_gets_fresh_salt(self, hasher):
        first = hasher.hash("pw123")
        second = hasher.hash("pw123")
        assert first != second
        assert hasher.compare("pw123", first)
        assert hasher.compare("pw123", second)

    def test_hash_embeds_cost_factor(self):
        hashed = PasswordHasher().hash("pw123")
        assert hashed.startswith("$2b$10$")

    def test_hash_never_contains_plaintext(self, hasher):
        assert "supersecret" not in hasher.hash("supersecret")

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_password_rejected(self, hasher, value):
        with pytest.raises(InvalidInput):
            hasher.hash(value)

    def test_password_over_72_bytes_rejected(self, hasher):
        with pytest.raises(InvalidInput, match="72"):
            hasher.hash("x" * 73)

    def test_72_byte_password_accepted(self, hasher):
        password = "y" * 72
        assert hasher.compare(password, hasher.hash(password))


class TestCompare:
    def test_empty_plaintext_rejected(self, hasher):
        with pytest.raises(InvalidInput):
            hasher.compare("", hasher.hash("pw"))

    def test_empty_hash_rejected(self, hasher):
        with pytest.raises(InvalidInput):
            hasher.compare("pw", "")

    def test_malformed_hash_raises_comparison_error(self, hasher):
        with pytest.raises(ComparisonError):
            hasher.compare("pw", "not-a-bcrypt-hash")

    def test_overlong_plaintext_never_matches(self, hasher):
        hashed = hasher.hash("x" * 72)
        assert hasher.compare("x" * 80, hashed) is False


class TestAsync:
    @pytest.mark.asyncio
    async def test_async_roundtrip(self, hasher):
        hashed = await hasher.hash_async("pw123")
        assert await hasher.compare_async("pw123", hashed) is True
        assert await hasher.compare_async("nope", hashed) is False

    @pytest.mark.asyncio
    async def test_async_propagates_errors(self, hasher):
        with pytest.raises(InvalidInput):
            await hasher.hash_async("")
