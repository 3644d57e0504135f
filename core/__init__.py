# fileman - Core Module
"""
Core infrastructure for fileman.
Settings, the audit logger, the error taxonomy and the shared result type.
"""

from .config import Settings, load_settings
from .errors import (
    FileManagerError,
    DirectoryAccessError,
    MetadataRetrievalError,
    ResourceExhaustedError,
    FileOperationError,
    ConfigError,
)
from .logger import AuditLogger, AuditEntry, ActionType, ActionStatus
from .results import OperationResult

__all__ = [
    "Settings",
    "load_settings",
    "FileManagerError",
    "DirectoryAccessError",
    "MetadataRetrievalError",
    "ResourceExhaustedError",
    "FileOperationError",
    "ConfigError",
    "AuditLogger",
    "AuditEntry",
    "ActionType",
    "ActionStatus",
    "OperationResult",
]

__version__ = "0.1.0"
