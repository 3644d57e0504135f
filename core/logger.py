"""
Audit Logger for fileman.

Provides append-only logging of every file operation with its timestamp,
target path and outcome, so a session can be reviewed afterwards.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from enum import Enum

from rich.console import Console


class ActionType(Enum):
    """Types of file operations that can be logged."""
    CREATE = "create"
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    CHMOD = "chmod"
    LIST = "list"
    STAT = "stat"
    RENAME = "rename"
    MOVE = "move"
    COPY = "copy"
    MKDIR = "mkdir"
    RMDIR = "rmdir"
    SORT = "sort"


class ActionStatus(Enum):
    """Outcome of a file operation."""
    EXECUTED = "executed"
    FAILED = "failed"
    EMPTY = "empty"


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""
    timestamp: str
    action_type: str
    action_description: str
    target: Optional[str]
    status: str
    result: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        action_description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "AuditEntry":
        """Factory method to create an audit entry with current timestamp."""
        return cls(
            timestamp=datetime.now().isoformat(),
            action_type=action_type.value,
            action_description=action_description,
            target=target,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )

    def to_json(self) -> str:
        """Convert entry to JSON string."""
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditEntry":
        """Create entry from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


def _csv_field(value: Optional[str]) -> str:
    """Quote a CSV field, doubling embedded quotes."""
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


class AuditLogger:
    """
    Append-only audit logger for fileman.

    Every operation is logged to a JSONL file, one object per line. The file
    and its directory are created on the first write. A log that cannot be
    written is reported once on stderr and otherwise ignored, so auditing
    never changes the outcome of the operation being audited.
    """

    def __init__(self, log_path: str = "data/audit_log.jsonl"):
        """
        Initialize the audit logger.

        Args:
            log_path: Path to the JSONL log file
        """
        self.log_path = Path(log_path)
        self.write_error: Optional[OSError] = None

    def _ensure_log_directory(self) -> bool:
        """Create the log directory and file if they don't exist."""
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            if not self.log_path.exists():
                self.log_path.touch()
        except OSError as e:
            self._report_write_error(e)
            return False
        return True

    def _report_write_error(self, error: OSError) -> None:
        """Warn about an unwritable log, once per logger."""
        if self.write_error is None:
            Console(stderr=True).print(
                f"Warning: audit log {self.log_path} is not writable: {error}",
                markup=False,
                highlight=False,
                soft_wrap=True
            )
        self.write_error = error

    def _iter_entries(self):
        """Yield entries in file order, skipping corrupt lines."""
        if not self.log_path.is_file():
            return
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    yield AuditEntry.from_json(line)
                except (json.JSONDecodeError, TypeError):
                    continue

    def log(self, entry: AuditEntry) -> bool:
        """
        Append an audit entry to the log.

        Args:
            entry: The AuditEntry to log

        Returns:
            True if the entry was written
        """
        if not self._ensure_log_directory():
            return False
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json() + "\n")
        except OSError as e:
            self._report_write_error(e)
            return False
        return True

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        target: Optional[str] = None,
        status: ActionStatus = ActionStatus.EXECUTED,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Convenience method to create and log an entry in one call.

        Returns the created AuditEntry.
        """
        entry = AuditEntry.create(
            action_type=action_type,
            action_description=description,
            target=target,
            status=status,
            result=result,
            metadata=metadata
        )
        self.log(entry)
        return entry

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        entries = list(self._iter_entries())
        if limit <= 0:
            return []
        return list(reversed(entries[-limit:]))

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """
        Get audit entries filtered by action type, oldest first.

        Args:
            action_type: The ActionType to filter by
            limit: Maximum number of entries to return
        """
        entries = []
        for entry in self._iter_entries():
            if len(entries) >= limit:
                break
            if entry.action_type == action_type.value:
                entries.append(entry)
        return entries

    def get_failed_actions(self, limit: int = 50) -> List[AuditEntry]:
        """
        Get operations that failed.

        Useful for reviewing what went wrong in a demo run.
        """
        entries = []
        for entry in self._iter_entries():
            if len(entries) >= limit:
                break
            if entry.status == ActionStatus.FAILED.value:
                entries.append(entry)
        return entries

    def export(self, format: str = "json") -> str:
        """
        Export the entire audit log.

        Args:
            format: Export format ("json" or "csv")

        Returns:
            String containing the exported data
        """
        entries = self.get_recent(limit=10000)
        header = "timestamp,action_type,action_description,target,status,result"

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2)
        elif format == "csv":
            lines = [header]
            for e in entries:
                fields = [e.timestamp, e.action_type, e.action_description, e.target, e.status, e.result]
                lines.append(",".join(_csv_field(value) for value in fields))
            return "\n".join(lines) + ("" if entries else "\n")
        else:
            raise ValueError(f"Unsupported export format: {format}")
