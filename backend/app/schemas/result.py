"""Success/failure result returned by gateway write operations"""

from typing import Optional
from pydantic import BaseModel


class OperationResult(BaseModel):
    """Either the created/affected identifier or a human-readable error"""
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, id: Optional[str] = None) -> "OperationResult":
        return cls(success=True, id=id)

    @classmethod
    def fail(cls, error: str) -> "OperationResult":
        return cls(success=False, error=error)
