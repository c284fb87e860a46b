"""
Password hashing.

bcrypt is CPU-bound on purpose; hashing runs in a worker thread so a login
does not stall every other request on the event loop.
"""

import asyncio
import logging

import bcrypt

from .interfaces import IPasswordHasher

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12


class BcryptPasswordHasher(IPasswordHasher):
    """IPasswordHasher backed by bcrypt with a configurable cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify_sync, password, password_hash)

    def _hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def _verify_sync(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash or over-long password
            logger.warning("Password verification rejected its input")
            return False
