"""
Disposal of cached workspaces with per-entry failure isolation.

Two procedures are available:

    dispose  - workspace-aware: git workspaces are reset to HEAD and cleaned,
               plain directories are deleted
    delete   - delete-only: every entry is removed recursively, git or not

A failing entry is recorded as FAILED and never stops the remaining entries.
"""

import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from aurclean.cache.inventory import CacheEntry
from aurclean.cache.workspace import WorkspaceState, classify
from aurclean.core.interfaces import VcsBackend
from aurclean.exceptions import AurCleanError, VcsError

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    KEPT = "kept"
    REMOVED = "removed"
    FAILED = "failed"


@dataclass
class DisposalOutcome:
    """What happened to one cache entry during a pass."""

    name: str
    path: Path
    status: OutcomeStatus
    errors: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    @classmethod
    def kept(cls, entry: CacheEntry) -> "DisposalOutcome":
        return cls(entry.name, entry.path, OutcomeStatus.KEPT)

    @classmethod
    def removed(cls, entry: CacheEntry) -> "DisposalOutcome":
        return cls(entry.name, entry.path, OutcomeStatus.REMOVED)

    @classmethod
    def failure(cls, entry: CacheEntry, *errors: str) -> "DisposalOutcome":
        return cls(entry.name, entry.path, OutcomeStatus.FAILED, list(errors))


class OutcomeRecorder:
    """Thread-safe accumulator of outcomes, returned in the order of the run.

    Outcomes are keyed by position, so an entry listed twice gets two outcomes.
    """

    def __init__(self):
        self._outcomes: dict = {}
        self._lock = threading.Lock()

    def record(self, index: int, outcome: DisposalOutcome) -> None:
        with self._lock:
            self._outcomes[index] = outcome

    def outcomes(self) -> List[DisposalOutcome]:
        with self._lock:
            return [self._outcomes[i] for i in sorted(self._outcomes)]


Action = Callable[[CacheEntry], DisposalOutcome]


class DisposalExecutor:
    """
    Applies disposal procedures to cache entries.

    Args:
        vcs: Backend used to probe, reset and clean git workspaces
        delete_tree: Recursive delete, ``shutil.rmtree`` unless overridden
        max_workers: Number of entries processed concurrently (1 = sequential)
    """

    def __init__(
        self,
        vcs: VcsBackend,
        delete_tree: Callable[[Path], None] = shutil.rmtree,
        max_workers: int = 1,
    ):
        self.vcs = vcs
        self.delete_tree = delete_tree
        self.max_workers = max(1, max_workers)

    def dispose(
        self, entry: CacheEntry, state: Optional[WorkspaceState] = None
    ) -> DisposalOutcome:
        """
        Workspace-aware disposal of one entry.

        A git workspace is reset then cleaned. The clean runs even when the
        reset failed, and the directory is never force-deleted; a failed reset
        still makes the outcome FAILED.
        """
        if state is None:
            state = classify(entry.path, self.vcs)

        if state is WorkspaceState.PLAIN:
            return self.delete(entry)

        errors = []
        try:
            self.vcs.reset(entry.path)
        except VcsError as e:
            logger.error(f"error resetting {entry.name}: {e.stderr or e}")
            errors.append(str(e))

        try:
            self.vcs.clean(entry.path)
        except VcsError as e:
            logger.error(f"error cleaning {entry.name}: {e.stderr or e}")
            errors.append(str(e))

        if errors:
            return DisposalOutcome.failure(entry, *errors)
        return DisposalOutcome.removed(entry)

    def clean_untracked(self, entry: CacheEntry) -> DisposalOutcome:
        """Drop untracked files of a git workspace; plain directories are kept."""
        if classify(entry.path, self.vcs) is WorkspaceState.PLAIN:
            return DisposalOutcome.kept(entry)
        try:
            self.vcs.clean(entry.path)
        except VcsError as e:
            logger.error(f"error cleaning {entry.name}: {e.stderr or e}")
            return DisposalOutcome.failure(entry, str(e))
        return DisposalOutcome.removed(entry)

    def delete(self, entry: CacheEntry) -> DisposalOutcome:
        """Recursively delete one entry without looking at version control."""
        try:
            self.delete_tree(entry.path)
        except OSError as e:
            logger.error(f"error deleting {entry.path}: {e}")
            return DisposalOutcome.failure(entry, str(e))
        return DisposalOutcome.removed(entry)

    def run(
        self,
        entries: Sequence[CacheEntry],
        action: Action,
        verb: str = "Cleaning",
    ) -> List[DisposalOutcome]:
        """
        Apply ``action`` to every entry, isolating failures.

        Args:
            entries: Entries in inventory order
            action: One of the disposal procedures of this executor
            verb: Progress label for the log

        Returns:
            One outcome per entry, in the order of ``entries``
        """
        recorder = OutcomeRecorder()
        total = len(entries)

        def _one(index: int, entry: CacheEntry) -> None:
            logger.info(f":: {verb} ({index}/{total}): {entry.path}")
            try:
                outcome = action(entry)
            except (AurCleanError, OSError) as e:
                logger.error(f"error processing {entry.name}: {e}")
                outcome = DisposalOutcome.failure(entry, str(e))
            recorder.record(index, outcome)

        if self.max_workers == 1 or total <= 1:
            for i, entry in enumerate(entries, start=1):
                _one(i, entry)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(_one, i, entry)
                    for i, entry in enumerate(entries, start=1)
                ]
                for future in futures:
                    future.result()

        return recorder.outcomes()
