"""
File operations module for fileman.

Each operation is a single call into the OS file API. Failures are printed
with the underlying OS reason, recorded in the audit log and returned as a
failed OperationResult, so a sequence of operations keeps going after one
of them fails.
"""

import codecs
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console

from core.config import Settings
from core.errors import FileManagerError, FileOperationError
from core.logger import AuditLogger, ActionType, ActionStatus
from core.results import OperationResult
from .sorter import DirectorySnapshotSorter, FileRecord, OrderingPolicy


PathLike = Union[str, Path]


class FileOperator:
    """Elementary file and directory operations with console reporting."""

    def __init__(
        self,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize FileOperator.

        Args:
            console: Console for regular output (default: stdout)
            err_console: Console for diagnostics (default: stderr)
            logger: Audit logger instance
            settings: Tool defaults (chunk sizes, modes, timestamp format)
        """
        self.settings = settings or Settings()
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.logger = logger or AuditLogger(log_path=self.settings.audit_log)
        self.sorter = DirectorySnapshotSorter(
            console=self.console,
            err_console=self.err_console,
            logger=self.logger,
            settings=self.settings
        )

    def _say(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _succeed(
        self,
        action_type: ActionType,
        description: str,
        target: str,
        message: Optional[str] = None,
        data: Any = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> OperationResult:
        """Print the success message (if any), audit it and build the result."""
        if message:
            self._say(message)
        self.logger.log_action(
            action_type=action_type,
            description=description,
            target=target,
            status=ActionStatus.EXECUTED,
            result=message,
            metadata=metadata
        )
        return OperationResult.executed(message, data=data)

    def _fail(
        self,
        action_type: ActionType,
        error: FileManagerError,
        metadata: Optional[Dict[str, Any]] = None
    ) -> OperationResult:
        """Print the diagnostic, audit it and build the failed result."""
        self.err_console.print(error.describe(), markup=False, highlight=False, soft_wrap=True)
        self.logger.log_action(
            action_type=action_type,
            description=error.action,
            target=error.target,
            status=ActionStatus.FAILED,
            result=f"Error: {error.reason}",
            metadata={"errno": error.errno, **(metadata or {})}
        )
        return OperationResult.failed(error)

    def create_file(self, path: PathLike) -> OperationResult:
        """
        Create a file if it does not exist. Existing content is kept.

        Args:
            path: Path of the file to create
        """
        target = str(path)
        try:
            fd = os.open(target, os.O_CREAT | os.O_WRONLY, self.settings.file_mode)
        except OSError as e:
            return self._fail(ActionType.CREATE, FileOperationError("Error creating file", target, e))
        os.close(fd)

        return self._succeed(
            ActionType.CREATE,
            f"Created file: {target}",
            target,
            message=f"File '{target}' created successfully."
        )

    def read_file(self, path: PathLike) -> OperationResult:
        """
        Print the contents of a file.

        Returns:
            OperationResult whose data is the decoded text read so far
        """
        target = str(path)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        text = []
        size = 0
        try:
            f = open(target, "rb")
        except OSError as e:
            return self._fail(ActionType.READ, FileOperationError("Error opening file", target, e))

        with f:
            try:
                while True:
                    chunk = f.read(self.settings.read_chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    text.append(decoder.decode(chunk))
                    self.console.out(text[-1], end="", highlight=False)
            except OSError as e:
                result = self._fail(ActionType.READ, FileOperationError("Error reading file", target, e))
                result.data = "".join(text)
                return result

        text.append(decoder.decode(b"", final=True))
        if text[-1]:
            self.console.out(text[-1], end="", highlight=False)

        return self._succeed(
            ActionType.READ,
            f"Read file: {target}",
            target,
            data="".join(text),
            metadata={"bytes": size}
        )

    def write_file(self, path: PathLike, content: str) -> OperationResult:
        """
        Append text to an existing file.

        The file is not created when missing; that is reported as a failure.
        """
        target = str(path)
        payload = content.encode("utf-8")
        try:
            fd = os.open(target, os.O_WRONLY | os.O_APPEND)
        except OSError as e:
            return self._fail(ActionType.WRITE, FileOperationError("Error opening file", target, e))

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
        except OSError as e:
            return self._fail(ActionType.WRITE, FileOperationError("Error writing to file", target, e))

        return self._succeed(
            ActionType.WRITE,
            f"Appended to file: {target}",
            target,
            message=f"Wrote {len(payload)} bytes to '{target}'.",
            metadata={"bytes": len(payload)}
        )

    def delete_file(self, path: PathLike) -> OperationResult:
        """Unlink a file."""
        target = str(path)
        try:
            os.unlink(target)
        except OSError as e:
            return self._fail(ActionType.DELETE, FileOperationError("Error deleting file", target, e))

        return self._succeed(
            ActionType.DELETE,
            f"Deleted file: {target}",
            target,
            message=f"File '{target}' deleted successfully."
        )

    def set_permissions(self, path: PathLike, mode: int) -> OperationResult:
        """
        Change the permission bits of a file.

        Args:
            path: Target path
            mode: Permission bits, e.g. 0o644
        """
        target = str(path)
        try:
            os.chmod(target, mode)
        except OSError as e:
            return self._fail(
                ActionType.CHMOD,
                FileOperationError("Error setting file permissions", target, e),
                metadata={"mode": oct(mode)}
            )

        return self._succeed(
            ActionType.CHMOD,
            f"Set permissions {oct(mode)} on {target}",
            target,
            message=f"Permissions for '{target}' set successfully.",
            metadata={"mode": oct(mode)}
        )

    def list_files(self, directory: PathLike) -> OperationResult:
        """
        Print every entry name of a directory, in enumeration order.

        All entry types are listed. Use sort_files for an ordered view of
        regular files only.
        """
        target = str(directory)
        names = []
        try:
            with os.scandir(target) as entries:
                for entry in entries:
                    names.append(entry.name)
                    self._say(entry.name)
        except OSError as e:
            return self._fail(ActionType.LIST, FileOperationError("Error opening directory", target, e))

        return self._succeed(
            ActionType.LIST,
            f"Listed directory: {target}",
            target,
            data=names,
            metadata={"count": len(names)}
        )

    def file_attributes(self, path: PathLike) -> OperationResult:
        """
        Print name, size and modification time of a path.

        Returns:
            OperationResult whose data is a FileRecord
        """
        target = str(path)
        try:
            st = os.stat(target)
        except OSError as e:
            return self._fail(
                ActionType.STAT, FileOperationError("Error getting file attributes", target, e)
            )

        record = FileRecord.from_stat(Path(target).name, st, self.settings.name_max_bytes)
        self._say(f"File: {target}")
        self._say(f"Size: {record.size} bytes")
        self._say(f"Last modified: {record.modified_text(self.settings.timestamp_format)}")

        return self._succeed(
            ActionType.STAT,
            f"Read attributes: {target}",
            target,
            data=record,
            metadata={"size": record.size}
        )

    def rename_file(self, old: PathLike, new: PathLike) -> OperationResult:
        """Rename a file. An existing destination is replaced where the OS allows it."""
        source, destination = str(old), str(new)
        try:
            os.rename(source, destination)
        except OSError as e:
            return self._fail(
                ActionType.RENAME,
                FileOperationError("Error renaming file", source, e),
                metadata={"destination": destination}
            )

        return self._succeed(
            ActionType.RENAME,
            f"Renamed {source} to {destination}",
            source,
            message=f"File renamed successfully from '{source}' to '{destination}'.",
            metadata={"destination": destination}
        )

    def move_file(self, path: PathLike, directory: PathLike) -> OperationResult:
        """
        Move a file into a directory, keeping its base name.

        This is a rename, so source and directory must be on the same
        filesystem.
        """
        source = str(path)
        destination = os.path.join(str(directory), os.path.basename(source))
        try:
            os.rename(source, destination)
        except OSError as e:
            return self._fail(
                ActionType.MOVE,
                FileOperationError("Error moving file", source, e),
                metadata={"destination": destination}
            )

        return self._succeed(
            ActionType.MOVE,
            f"Moved {source} to {destination}",
            source,
            message=f"File '{source}' moved to '{directory}' successfully.",
            data=destination,
            metadata={"destination": destination}
        )

    def copy_file(self, source: PathLike, destination: PathLike) -> OperationResult:
        """
        Copy bytes from source to destination.

        The destination is created or truncated. Both files are closed on
        every path. Read and write failures are reported separately.
        """
        src, dst = str(source), str(destination)
        chunk_size = self.settings.copy_chunk_size
        copied = 0
        try:
            src_file = open(src, "rb")
        except OSError as e:
            return self._fail(ActionType.COPY, FileOperationError("Error opening source file", src, e))

        with src_file:
            try:
                dst_fd = os.open(dst, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.settings.file_mode)
            except OSError as e:
                return self._fail(
                    ActionType.COPY, FileOperationError("Error creating destination file", dst, e)
                )

            try:
                while True:
                    try:
                        chunk = src_file.read(chunk_size)
                    except OSError as e:
                        return self._fail(
                            ActionType.COPY,
                            FileOperationError("Error reading from source file", src, e),
                            metadata={"destination": dst, "bytes": copied}
                        )
                    if not chunk:
                        break

                    view = memoryview(chunk)
                    try:
                        while view:
                            view = view[os.write(dst_fd, view):]
                    except OSError as e:
                        return self._fail(
                            ActionType.COPY,
                            FileOperationError("Error writing to destination file", dst, e),
                            metadata={"source": src, "bytes": copied}
                        )
                    copied += len(chunk)
            finally:
                os.close(dst_fd)

        return self._succeed(
            ActionType.COPY,
            f"Copied {src} to {dst}",
            src,
            message=f"File copied successfully from '{src}' to '{dst}'.",
            metadata={"destination": dst, "bytes": copied}
        )

    def make_directory(self, path: PathLike, mode: Optional[int] = None) -> OperationResult:
        """Create a directory. An already existing directory counts as success."""
        target = str(path)
        mode = self.settings.dir_mode if mode is None else mode
        try:
            os.mkdir(target, mode)
        except FileExistsError as e:
            if not os.path.isdir(target):
                return self._fail(
                    ActionType.MKDIR, FileOperationError("Error creating directory", target, e)
                )
            return self._succeed(
                ActionType.MKDIR,
                f"Directory already exists: {target}",
                target,
                metadata={"existed": True}
            )
        except OSError as e:
            return self._fail(ActionType.MKDIR, FileOperationError("Error creating directory", target, e))

        return self._succeed(
            ActionType.MKDIR,
            f"Created directory: {target}",
            target,
            metadata={"mode": oct(mode)}
        )

    def remove_directory(self, path: PathLike) -> OperationResult:
        """Remove an empty directory."""
        target = str(path)
        try:
            os.rmdir(target)
        except OSError as e:
            return self._fail(ActionType.RMDIR, FileOperationError("Error removing directory", target, e))

        return self._succeed(ActionType.RMDIR, f"Removed directory: {target}", target)

    def sort_files(
        self,
        directory: PathLike,
        policy: Union[str, OrderingPolicy] = OrderingPolicy.BY_SIZE_ASCENDING
    ) -> OperationResult:
        """Print the regular files of a directory in policy order."""
        return self.sorter.sort_and_display(directory, policy)
