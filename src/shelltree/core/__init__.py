"""shelltree core module exports."""

from .archiver import ArchiveContainer, container_name, ensure_archive_folder, open_container
from .errors import (
    ArchiveCreateError,
    ArchiveEntryError,
    DeleteError,
    PolicyLoadError,
    ShellTreeError,
    TraversalError,
)
from .policy import POLICY_FILE_NAMES, Policy, find_policy_file, load_policy
from .retention import RetentionEngine
from .selector import (
    PurgeCandidate,
    WildcardPattern,
    age_in_days,
    collect_purge_set,
    is_archive_entry,
    is_eligible_file,
    is_eligible_subdirectory,
    is_hidden,
)
from .totals import DirectoryResult, RunTotals, byte_count_to_display_size
from .walker import TreeWalker, process_root, process_roots

__all__ = [
    "ArchiveContainer",
    "ArchiveCreateError",
    "ArchiveEntryError",
    "DeleteError",
    "DirectoryResult",
    "POLICY_FILE_NAMES",
    "Policy",
    "PolicyLoadError",
    "PurgeCandidate",
    "RetentionEngine",
    "RunTotals",
    "ShellTreeError",
    "TraversalError",
    "TreeWalker",
    "WildcardPattern",
    "age_in_days",
    "byte_count_to_display_size",
    "collect_purge_set",
    "container_name",
    "ensure_archive_folder",
    "find_policy_file",
    "is_archive_entry",
    "is_eligible_file",
    "is_eligible_subdirectory",
    "is_hidden",
    "load_policy",
    "open_container",
    "process_root",
    "process_roots",
]
