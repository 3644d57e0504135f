"""
File manager module for fileman.

Provides elementary file operations and directory snapshot sorting.
"""

from .file_ops import FileOperator
from .sorter import (
    DirectorySnapshotSorter,
    FileRecord,
    OrderingPolicy,
    Snapshot,
    scan_directory,
    sort_records,
)
from .demo import run_demo

__all__ = [
    'FileOperator',
    'DirectorySnapshotSorter',
    'FileRecord',
    'OrderingPolicy',
    'Snapshot',
    'scan_directory',
    'sort_records',
    'run_demo',
]
