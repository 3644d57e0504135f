"""
Directory snapshot sorting.

Scans one directory (not recursively), snapshots size and modification time
of every regular file, and prints the snapshot ordered by an OrderingPolicy.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from rich.console import Console

from core.config import Settings
from core.errors import (
    DirectoryAccessError,
    FileManagerError,
    MetadataRetrievalError,
    ResourceExhaustedError,
)
from core.logger import AuditLogger, ActionType, ActionStatus
from core.results import OperationResult


NAME_MAX_BYTES = 255


class OrderingPolicy(Enum):
    """How a snapshot is ordered."""
    BY_SIZE_ASCENDING = "size"
    BY_MODIFICATION_TIME_DESCENDING = "mtime"

    @classmethod
    def from_name(cls, name: Union[str, "OrderingPolicy"]) -> "OrderingPolicy":
        """
        Look up a policy by its short name ("size", "mtime") or member name.

        Raises:
            ValueError: If the name is unknown
        """
        if isinstance(name, cls):
            return name
        text = str(name).strip()
        for policy in cls:
            if text.lower() == policy.value or text.upper() == policy.name:
                return policy
        choices = ", ".join(p.value for p in cls)
        raise ValueError(f"Unknown ordering policy {name!r} (expected one of: {choices})")


def bounded_name(name: str, max_bytes: int = NAME_MAX_BYTES) -> str:
    """
    Truncate a file name to at most max_bytes of UTF-8.

    The cut never splits a character. Two long names sharing a prefix may
    come out identical.
    """
    encoded = name.encode("utf-8", "surrogateescape")
    if len(encoded) <= max_bytes:
        return name
    return encoded[:max_bytes].decode("utf-8", "ignore")


@dataclass(frozen=True)
class FileRecord:
    """Size and modification time of one regular file, captured at scan time."""
    name: str
    size: int
    modified_time: int  # st_mtime_ns

    @classmethod
    def from_stat(
        cls,
        name: str,
        st: os.stat_result,
        name_max_bytes: int = NAME_MAX_BYTES
    ) -> "FileRecord":
        return cls(
            name=bounded_name(name, name_max_bytes),
            size=int(st.st_size),
            modified_time=int(st.st_mtime_ns),
        )

    @property
    def modified_at(self) -> datetime:
        """
        Modification time as a local datetime, whole seconds.

        Raises:
            ValueError, OverflowError, OSError: If the time is outside the
                range the platform can convert
        """
        return datetime.fromtimestamp(self.modified_time // 1_000_000_000)

    def modified_text(self, fmt: str) -> str:
        """Render the modification time, or "@<seconds>" when it cannot be converted."""
        return render_timestamp(self.modified_time, fmt)


def render_timestamp(modified_time_ns: int, fmt: str) -> str:
    """
    Format a nanosecond timestamp with strftime.

    Times outside the datetime range come back as "@<seconds>".
    """
    seconds = modified_time_ns // 1_000_000_000
    try:
        return datetime.fromtimestamp(seconds).strftime(fmt)
    except (ValueError, OverflowError, OSError):
        return f"@{seconds}"


@dataclass(frozen=True)
class Snapshot:
    """Records collected by one scan plus the entries that were skipped."""
    directory: str
    records: Tuple[FileRecord, ...]
    skipped: Tuple[MetadataRetrievalError, ...] = ()


# key function and reverse flag per policy; sorted() is stable either way
_SORT_KEYS: Dict[OrderingPolicy, Tuple[Callable[[FileRecord], int], bool]] = {
    OrderingPolicy.BY_SIZE_ASCENDING: (lambda r: r.size, False),
    OrderingPolicy.BY_MODIFICATION_TIME_DESCENDING: (lambda r: r.modified_time, True),
}


def stat_entry(entry: os.DirEntry) -> os.stat_result:
    """Fetch fresh metadata for a directory entry."""
    return os.stat(entry.path)


def _is_regular_file(entry: os.DirEntry) -> bool:
    return entry.is_file(follow_symlinks=False)


def scan_directory(
    directory: Union[str, Path],
    name_max_bytes: int = NAME_MAX_BYTES
) -> Snapshot:
    """
    Snapshot the regular files of a directory.

    Entries are read lazily. Directories, symlinks and special files are
    excluded. An entry whose metadata cannot be read (for example because it
    was deleted mid-scan) is skipped and reported in Snapshot.skipped.

    Args:
        directory: Directory to scan
        name_max_bytes: Byte bound applied to record names

    Returns:
        Snapshot in enumeration order

    Raises:
        DirectoryAccessError: If the directory cannot be opened or read
        ResourceExhaustedError: If memory runs out while collecting records
    """
    records: List[FileRecord] = []
    skipped: List[MetadataRetrievalError] = []

    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if not _is_regular_file(entry):
                        continue
                    st = stat_entry(entry)
                except OSError as e:
                    skipped.append(
                        MetadataRetrievalError("Error getting file attributes", entry.path, e)
                    )
                    continue
                records.append(FileRecord.from_stat(entry.name, st, name_max_bytes))
    except OSError as e:
        records.clear()
        raise DirectoryAccessError("Error opening directory", str(directory), e)
    except MemoryError as e:
        records.clear()
        raise ResourceExhaustedError("Memory allocation error", str(directory), e)

    return Snapshot(directory=str(directory), records=tuple(records), skipped=tuple(skipped))


def sort_records(records, policy: OrderingPolicy) -> List[FileRecord]:
    """Return a new list of records ordered by policy. Ties keep their input order."""
    key, reverse = _SORT_KEYS[OrderingPolicy.from_name(policy)]
    return sorted(records, key=key, reverse=reverse)


class DirectorySnapshotSorter:
    """Scans a directory and prints its regular files in policy order."""

    def __init__(
        self,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or Settings()
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.logger = logger or AuditLogger(log_path=self.settings.audit_log)

    def snapshot(
        self,
        directory: Union[str, Path],
        policy: Union[str, OrderingPolicy]
    ) -> Tuple[List[FileRecord], Snapshot]:
        """
        Scan and sort without printing.

        Raises:
            DirectoryAccessError: If the directory cannot be opened or read
            ResourceExhaustedError: If memory runs out while collecting records
        """
        snap = scan_directory(directory, self.settings.name_max_bytes)
        return sort_records(snap.records, OrderingPolicy.from_name(policy)), snap

    def format_record(self, record: FileRecord) -> str:
        modified = record.modified_text(self.settings.timestamp_format)
        return f"{record.name} (Size: {record.size} bytes, Modified: {modified})"

    def sort_and_display(
        self,
        directory: Union[str, Path],
        policy: Union[str, OrderingPolicy]
    ) -> OperationResult:
        """
        Scan a directory, sort its regular files and print them.

        Failures are printed and returned, never raised.

        Returns:
            OperationResult whose data is the sorted list of FileRecord
        """
        policy = OrderingPolicy.from_name(policy)
        target = str(directory)

        try:
            ordered, snap = self.snapshot(directory, policy)
        except FileManagerError as e:
            self.err_console.print(e.describe(), markup=False, highlight=False, soft_wrap=True)
            self.logger.log_action(
                action_type=ActionType.SORT,
                description=f"Failed to sort {target}",
                target=target,
                status=ActionStatus.FAILED,
                result=f"Error: {e.reason}",
                metadata={"policy": policy.value, "errno": e.errno}
            )
            return OperationResult.failed(e, data=[])

        metadata = {
            "policy": policy.value,
            "count": len(ordered),
            "skipped": len(snap.skipped),
        }

        if not ordered:
            self.console.print("No files found in the directory.")
            self.logger.log_action(
                action_type=ActionType.SORT,
                description=f"No files to sort in {target}",
                target=target,
                status=ActionStatus.EMPTY,
                metadata=metadata
            )
            return OperationResult(
                success=True,
                status="EMPTY",
                message="No files found in the directory.",
                data=[]
            )

        self.console.print("Sorted files:")
        for record in ordered:
            self.console.print(
                self.format_record(record), markup=False, highlight=False, soft_wrap=True
            )

        self.logger.log_action(
            action_type=ActionType.SORT,
            description=f"Sorted {target} by {policy.value}",
            target=target,
            status=ActionStatus.EXECUTED,
            result=f"{len(ordered)} files",
            metadata=metadata
        )
        return OperationResult.executed(f"Sorted {len(ordered)} files.", data=ordered)
