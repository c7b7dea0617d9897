"""
Domain errors raised below the API layer.

Routes translate absent targets and failed authorization to HTTPException
themselves; these cover failures raised from services and context
resolution, and are mapped to JSON by the handler registered in main.
"""

from typing import Any, Dict, Optional


class ForumError(Exception):
    """Base exception for forum domain failures."""

    status_code: int = 500
    code: str = "FORUM_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntityNotFoundError(ForumError):
    """A referenced row does not exist or is not visible."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"{entity_type} not found",
            details={"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class SiteNotResolvedError(ForumError):
    """The configured site is missing from the database."""

    status_code = 500
    code = "SITE_NOT_RESOLVED"

    def __init__(self, site_name: str):
        super().__init__(
            "Site is not configured",
            details={"site_name": site_name},
        )
