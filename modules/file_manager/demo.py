"""
Walk-through of every file operation.

Runs the classic sequence (create, append, read, chmod, list, stat, rename,
copy, move, sort twice, clean up) inside a working directory. Steps are
independent: a failing step is reported and the next one still runs.
"""

from pathlib import Path
from typing import List, Tuple, Union

from core.results import OperationResult
from .file_ops import FileOperator
from .sorter import OrderingPolicy


def run_demo(operator: FileOperator, workdir: Union[str, Path] = ".") -> List[Tuple[str, OperationResult]]:
    """
    Run the demonstration sequence.

    Args:
        operator: FileOperator used for every step
        workdir: Directory the demo files are created in

    Returns:
        (step name, result) for every step, in order
    """
    base = Path(workdir)
    file1 = base / "file1.txt"
    file2 = base / "file2.txt"
    renamed = base / "renamed_file2.txt"
    copy = base / "file1_copy.txt"
    moved_dir = base / "moved"

    steps: List[Tuple[str, OperationResult]] = []
    say = operator.console.print

    def step(name: str, result: OperationResult) -> OperationResult:
        steps.append((name, result))
        return result

    step("create file1", operator.create_file(file1))
    step("create file2", operator.create_file(file2))
    step("write file1", operator.write_file(file1, "Hello, World!\n"))
    step("write file2", operator.write_file(file2, "Another file content.\n"))

    say(f"Contents of {file1.name}:")
    step("read file1", operator.read_file(file1))
    say(f"\nContents of {file2.name}:")
    step("read file2", operator.read_file(file2))

    step("chmod file1", operator.set_permissions(file1, 0o644))

    say("\nListing files in directory:")
    step("list", operator.list_files(base))

    say(f"\nFile attributes for {file1.name}:")
    step("stat file1", operator.file_attributes(file1))

    step("rename file2", operator.rename_file(file2, renamed))
    step("copy file1", operator.copy_file(file1, copy))

    if step("mkdir moved", operator.make_directory(moved_dir)).success:
        step("move file1", operator.move_file(file1, moved_dir))

    say("\nSorting files by size:")
    step("sort by size", operator.sort_files(base, OrderingPolicy.BY_SIZE_ASCENDING))

    say("\nSorting files by last modification time:")
    step("sort by mtime", operator.sort_files(base, OrderingPolicy.BY_MODIFICATION_TIME_DESCENDING))

    step("delete renamed_file2", operator.delete_file(renamed))
    step("delete file1_copy", operator.delete_file(copy))
    step("delete moved/file1", operator.delete_file(moved_dir / file1.name))
    step("rmdir moved", operator.remove_directory(moved_dir))

    return steps
