"""Result type shared by all file operations."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class OperationResult:
    """Outcome of one file operation."""
    success: bool
    status: str
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[Exception] = None

    @classmethod
    def executed(cls, message: Optional[str] = None, data: Any = None) -> "OperationResult":
        return cls(success=True, status="EXECUTED", message=message, data=data)

    @classmethod
    def failed(cls, error: Exception, data: Any = None) -> "OperationResult":
        return cls(success=False, status="FAILED", message=str(error), data=data, error=error)
