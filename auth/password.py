"""
Password hashing and verification.

Uses bcrypt for password hashing with a fresh salt per call and a
work factor fixed at construction.  The hash string embeds both, so
verification needs nothing else.
"""

from __future__ import annotations

import asyncio

import bcrypt

from auth.errors import ComparisonError, InvalidInput

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hash / compare with a fixed cost factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash ``password`` with a new random salt."""
        if not password or not isinstance(password, str):
            raise InvalidInput("Password is required")
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            raise InvalidInput(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode()

    def compare(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        if not password or not isinstance(password, str):
            raise InvalidInput("Password is required")
        if not password_hash or not isinstance(password_hash, str):
            raise InvalidInput("Password hash is required")
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            # hash() never accepts such input, so nothing stored can match it
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode())
        except ValueError as exc:
            raise ComparisonError("Stored password hash is malformed") from exc

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def compare_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.compare, password, password_hash)
