"""
Password hashing utilities using bcrypt.
"""

import bcrypt

BCRYPT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Password hashing service."""

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    @staticmethod
    def hash(password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(PasswordHasher._encode(password), salt).decode("utf-8")

    @staticmethod
    def verify(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Malformed hashes verify as False rather than raising.
        """
        try:
            return bcrypt.checkpw(
                PasswordHasher._encode(plain_password),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False


def hash_password(password: str) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, hashed_password)
