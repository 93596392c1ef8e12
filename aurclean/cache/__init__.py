"""
Build cache reconciliation.

The cache is one directory per package base. A pass inventories it, works out
which bases are still needed (installed locally, or still on the AUR), and
disposes of the rest without letting one bad entry stop the others.
"""

from .disposal import DisposalExecutor, DisposalOutcome, OutcomeStatus
from .inventory import CacheEntry, list_entries
from .membership import MembershipSet, resolve_installed, resolve_remote_available
from .policy import Decision, RetentionPolicy, decide
from .reconcile import (
    clean_after,
    clean_builds,
    clean_dependencies,
    purge_untracked,
    reconcile_cache,
)
from .workspace import WorkspaceState, classify

__all__ = [
    "CacheEntry",
    "Decision",
    "DisposalExecutor",
    "DisposalOutcome",
    "MembershipSet",
    "OutcomeStatus",
    "RetentionPolicy",
    "WorkspaceState",
    "classify",
    "clean_after",
    "clean_builds",
    "clean_dependencies",
    "decide",
    "list_entries",
    "purge_untracked",
    "reconcile_cache",
    "resolve_installed",
    "resolve_remote_available",
]
