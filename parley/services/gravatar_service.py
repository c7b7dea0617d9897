"""
Gravatar hash computation.
"""

import hashlib


class GravatarService:
    """Derives the gravatar identifier for a member's email."""

    @staticmethod
    def hash_email_for_gravatar(email: str) -> str:
        """MD5 hex digest of the trimmed, lower-cased email."""
        normalized = (email or "").strip().lower()
        return hashlib.md5(normalized.encode("utf-8")).hexdigest()
