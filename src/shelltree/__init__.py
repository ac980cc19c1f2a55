"""shelltree: age-based retention for directory trees.

A ``shelltree.properties`` (or ``.shelltree``) file in a directory describes
which files to purge, how old they must be, and whether to archive them into
a dated zip first. Policies marked ``recursive`` cascade into subdirectories
that have no policy file of their own.
"""

from __future__ import annotations

from .core import (
    POLICY_FILE_NAMES,
    ArchiveCreateError,
    ArchiveEntryError,
    DeleteError,
    DirectoryResult,
    Policy,
    PolicyLoadError,
    RetentionEngine,
    RunTotals,
    ShellTreeError,
    TraversalError,
    TreeWalker,
    load_policy,
    process_root,
    process_roots,
)

__version__ = "1.0.0"

__all__ = [
    "ArchiveCreateError",
    "ArchiveEntryError",
    "DeleteError",
    "DirectoryResult",
    "POLICY_FILE_NAMES",
    "Policy",
    "PolicyLoadError",
    "RetentionEngine",
    "RunTotals",
    "ShellTreeError",
    "TraversalError",
    "TreeWalker",
    "load_policy",
    "process_root",
    "process_roots",
]
