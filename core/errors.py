"""
Error taxonomy for fileman.

Every public file operation raises one of these internally and converts it
into a failed OperationResult at its boundary, so nothing escapes to the
caller for an ordinary OS failure.
"""

from typing import Optional


class FileManagerError(Exception):
    """Base class for all file-operation errors."""

    def __init__(
        self,
        action: str,
        target: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        """
        Initialize the error.

        Args:
            action: Human-readable name of the failed action, e.g. "Error deleting file"
            target: Path the action was applied to
            cause: Underlying exception (usually an OSError)
        """
        self.action = action
        self.target = target
        self.cause = cause
        super().__init__(self.describe())

    @property
    def errno(self) -> Optional[int]:
        """OS error number of the underlying cause, if any."""
        return getattr(self.cause, "errno", None)

    @property
    def reason(self) -> str:
        """Description of the underlying cause, as perror would print it."""
        if self.cause is None:
            return "unknown error"
        strerror = getattr(self.cause, "strerror", None)
        return strerror or str(self.cause) or type(self.cause).__name__

    def describe(self) -> str:
        return f"{self.action}: {self.reason}"


class DirectoryAccessError(FileManagerError):
    """Directory is missing, not a directory, or not readable."""


class MetadataRetrievalError(FileManagerError):
    """Metadata for a single directory entry could not be read."""


class ResourceExhaustedError(FileManagerError):
    """Memory ran out while collecting file records."""


class FileOperationError(FileManagerError):
    """A one-shot file operation (create, read, copy, ...) failed."""


class ConfigError(ValueError):
    """Configuration file contains an invalid value."""
