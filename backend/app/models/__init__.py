"""Database models"""

from backend.app.models.base import TimestampMixin
from backend.app.models.document import Document
from backend.app.models.enums import (
    Role, ListingStatus, ApplicationStatus, Collection, SessionStatus
)

__all__ = [
    "TimestampMixin",
    "Document",
    "Role",
    "ListingStatus",
    "ApplicationStatus",
    "Collection",
    "SessionStatus",
]
