"""Retention policy: which cached workspaces survive a reconciliation pass."""

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Iterable

from aurclean.cache.inventory import CacheEntry


class Decision(Enum):
    KEEP = "keep"
    REMOVE = "remove"


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Retention flags for one pass.

    Attributes:
        keep_installed: Keep workspaces of installed packages
        keep_current: Keep workspaces of packages still published on the AUR
        remove_all: Remove everything, ignoring both keep flags
    """

    keep_installed: bool = True
    keep_current: bool = False
    remove_all: bool = False

    @classmethod
    def from_clean_method(
        cls, methods: Iterable[str], remove_all: bool = False
    ) -> "RetentionPolicy":
        """Build a policy from pacman's CleanMethod values."""
        methods = set(methods)
        return cls(
            keep_installed="KeepInstalled" in methods,
            keep_current="KeepCurrent" in methods,
            remove_all=remove_all,
        )

    @property
    def needs_remote(self) -> bool:
        """Whether the remote-available set can influence any decision."""
        return self.keep_current and not self.remove_all


def decide(
    entry: CacheEntry,
    installed_bases: AbstractSet[str],
    remote_available_bases: AbstractSet[str],
    policy: RetentionPolicy,
) -> Decision:
    """
    Decide the disposition of one cached workspace.

    ``remove_all`` overrides everything. Otherwise either keep predicate is
    enough to keep the entry.
    """
    if policy.remove_all:
        return Decision.REMOVE
    if policy.keep_installed and entry.name in installed_bases:
        return Decision.KEEP
    if policy.keep_current and entry.name in remote_available_bases:
        return Decision.KEEP
    return Decision.REMOVE
