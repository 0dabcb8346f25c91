"""Password hashing and policy."""

import asyncio
import hmac
import os

import logfire
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from donorlink.domain.error import ValidationError
from donorlink.domain.value import MIN_PASSWORD_LENGTH

from .base import Service

PASSWORD_PREFIX = "pbkdf2"
KEY_LENGTH = 64
SALT_LENGTH = 16


def validate_new_password(password: str, confirm_password: str | None = None) -> None:
    """Check a password chosen during account setup.

    Raises:
        ValidationError: If the password is missing, too short, or the
            confirmation does not match
    """
    if not password:
        raise ValidationError("Password is required to secure your account.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Choose a password with at least {MIN_PASSWORD_LENGTH} characters."
        )
    if confirm_password and password != confirm_password:
        raise ValidationError("Passwords do not match. Please try again.")


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def _parse_hash(serialized: str) -> tuple[int, bytes, bytes] | None:
    parts = serialized.split("$")
    if len(parts) != 4 or parts[0] != PASSWORD_PREFIX:
        return None
    try:
        iterations = int(parts[1])
        salt = bytes.fromhex(parts[2])
        key = bytes.fromhex(parts[3])
    except ValueError:
        return None
    if iterations <= 0 or not salt or not key:
        return None
    return iterations, salt, key


class PasswordService(Service):
    """PBKDF2-SHA512 password hashing.

    Hashes are stored as ``pbkdf2$<iterations>$<salt hex>$<key hex>``.
    Derivation runs in a worker thread so it does not block the event loop.
    """

    def __init__(self, iterations: int = 210_000) -> None:
        self.iterations = iterations

    async def hash_password(self, password: str) -> str:
        """Hash a password.

        Args:
            password: Plain-text password (non-empty)

        Returns:
            Serialized hash prefixed by the algorithm identifier
        """
        with logfire.span("password_service.hash_password"):
            if not password:
                raise ValidationError("Password must be a non-empty string")
            salt = os.urandom(SALT_LENGTH)
            key = await asyncio.to_thread(_derive, password, salt, self.iterations)
            return "$".join(
                [PASSWORD_PREFIX, str(self.iterations), salt.hex(), key.hex()]
            )

    async def verify_password(self, password: str, serialized: str | None) -> bool:
        """Check a password against a stored hash. Malformed hashes never match."""
        with logfire.span("password_service.verify_password"):
            if not password or not serialized:
                return False
            parsed = _parse_hash(serialized)
            if parsed is None:
                logfire.warn("Stored password hash is malformed")
                return False
            iterations, salt, expected = parsed
            key = await asyncio.to_thread(_derive, password, salt, iterations)
            return hmac.compare_digest(key, expected)
