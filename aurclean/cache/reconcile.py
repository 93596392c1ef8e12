"""
Cache reconciliation: the entry points that tie inventory, membership,
retention and disposal together.

Pass order for reconcile_cache:

    1. inventory the build directory       (fatal on OSError)
    2. installed bases from the local db
    3. remote bases, only for KeepCurrent  (fatal on RemoteQueryError)
    4. decide every entry
    5. dispose of the REMOVE entries       (per-entry failures recorded)

Nothing is disposed of before steps 1-3 have succeeded.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from aurclean.cache.disposal import DisposalExecutor, DisposalOutcome
from aurclean.cache.inventory import CacheEntry, list_entries
from aurclean.cache.membership import (
    EMPTY,
    resolve_installed,
    resolve_remote_available,
)
from aurclean.cache.policy import Decision, RetentionPolicy, decide
from aurclean.core.interfaces import PackageDatabase, RemoteIndex, VcsBackend

logger = logging.getLogger(__name__)


def _executor(vcs: VcsBackend, executor: Optional[DisposalExecutor]):
    return executor if executor is not None else DisposalExecutor(vcs)


def reconcile_cache(
    root: Union[str, Path],
    policy: RetentionPolicy,
    *,
    vcs: VcsBackend,
    database: PackageDatabase,
    index: Optional[RemoteIndex] = None,
    executor: Optional[DisposalExecutor] = None,
) -> List[DisposalOutcome]:
    """
    Remove cached workspaces that the retention policy does not keep.

    With ``policy.remove_all`` every entry is deleted outright. Otherwise
    entries selected for removal go through workspace-aware disposal: git
    workspaces are reset and cleaned, plain directories are deleted.

    Args:
        root: Build cache directory
        policy: Retention flags for this pass
        vcs: Version-control backend
        database: Local package database
        index: Remote index, required when ``policy.keep_current`` is set
        executor: Disposal executor (defaults to a sequential one over ``vcs``)

    Returns:
        One outcome per cache entry, in inventory order

    Raises:
        OSError: If the cache root cannot be read
        RemoteQueryError: If the remote lookup fails
    """
    executor = _executor(vcs, executor)
    entries = list_entries(root)
    if not entries:
        logger.info(f"No cached packages in {root}")
        return []

    installed_bases = EMPTY
    if policy.keep_installed and not policy.remove_all:
        installed_bases = resolve_installed(database.list_foreign())

    remote_bases = EMPTY
    if policy.needs_remote:
        if index is None:
            raise ValueError("a remote index is required to keep current packages")
        remote_bases = resolve_remote_available([e.name for e in entries], index)

    decisions = {
        entry.name: decide(entry, installed_bases, remote_bases, policy)
        for entry in entries
    }
    to_remove = [e for e in entries if decisions[e.name] is Decision.REMOVE]
    logger.info(
        f"Removing {len(to_remove)} of {len(entries)} cached packages from {root}"
    )

    if policy.remove_all:
        removed = executor.run(to_remove, executor.delete, verb="Deleting")
    else:
        removed = executor.run(to_remove, executor.dispose, verb="Cleaning")

    by_name = {outcome.name: outcome for outcome in removed}
    return [by_name.get(e.name) or DisposalOutcome.kept(e) for e in entries]


def purge_untracked(
    root: Union[str, Path],
    *,
    vcs: VcsBackend,
    executor: Optional[DisposalExecutor] = None,
) -> List[DisposalOutcome]:
    """
    Remove untracked files from every git workspace in the cache.

    No membership is computed. Plain directories are left alone and reported
    as KEPT; cleaned git workspaces are reported as REMOVED.

    Raises:
        OSError: If the cache root cannot be read
    """
    executor = _executor(vcs, executor)
    entries = list_entries(root)
    logger.info(f"Removing untracked files from {len(entries)} cached packages")
    return executor.run(entries, executor.clean_untracked, verb="Cleaning")


def _entries_for(root: Union[str, Path], bases: Iterable[str]) -> List[CacheEntry]:
    root = Path(root)
    return [CacheEntry(name=base, path=root / base) for base in bases]


def clean_after(
    root: Union[str, Path],
    bases: Sequence[str],
    *,
    vcs: VcsBackend,
    executor: Optional[DisposalExecutor] = None,
) -> List[DisposalOutcome]:
    """
    Post-build cleanup of the given package bases.

    Git workspaces are reset and cleaned so the next build can reuse the
    checkout; anything else is deleted.
    """
    executor = _executor(vcs, executor)
    return executor.run(_entries_for(root, bases), executor.dispose, verb="Cleaning")


def clean_builds(
    root: Union[str, Path],
    bases: Sequence[str],
    *,
    vcs: VcsBackend,
    executor: Optional[DisposalExecutor] = None,
) -> List[DisposalOutcome]:
    """Delete the build directories of the given package bases."""
    executor = _executor(vcs, executor)
    return executor.run(_entries_for(root, bases), executor.delete, verb="Deleting")


def clean_dependencies(database: PackageDatabase, remove_optional: bool) -> List[str]:
    """
    Uninstall dependencies that no installed package needs any more.

    Args:
        database: Local package database
        remove_optional: Also treat packages only optionally required as hanging

    Returns:
        Names of the removed packages (empty when there was nothing to do)

    Raises:
        PackageManagerError: If the package manager fails
    """
    hanging = database.hanging(remove_optional)
    if not hanging:
        logger.info("No hanging dependencies")
        return []

    logger.info(f"Removing {len(hanging)} hanging dependencies")
    database.remove(hanging)
    return hanging
