"""Credential hashing built on bcrypt."""
from __future__ import annotations

import asyncio

import bcrypt

DEFAULT_HASH_ROUNDS = 10
# bcrypt ignores input beyond 72 bytes and newer releases reject it outright.
_BCRYPT_MAX_BYTES = 72


def _encode_secret(secret: str) -> bytes:
    return secret.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class CredentialHasher:
    """Salted one-way hashing of short secrets such as one-time codes."""

    def __init__(self, rounds: int = DEFAULT_HASH_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """Return a bcrypt digest of `secret`.

        A fresh salt is generated on every call, so hashing the same secret
        twice yields two different digests.
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode_secret(secret), salt).decode("ascii")

    def compare(self, secret: str, digest: str) -> bool:
        """Check a secret against a stored digest.

        Args:
            secret: Plaintext value submitted by the client.
            digest: bcrypt digest previously produced by `hash`.

        Returns:
            True if `secret` matches `digest`; False otherwise, including when
            `digest` is not a well-formed bcrypt hash.
        """
        try:
            return bcrypt.checkpw(_encode_secret(secret), digest.encode("ascii"))
        except (ValueError, TypeError, UnicodeEncodeError, AttributeError):
            return False

    async def hash_async(self, secret: str) -> str:
        """Hash in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.hash, secret)

    async def compare_async(self, secret: str, digest: str) -> bool:
        """Compare in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.compare, secret, digest)
