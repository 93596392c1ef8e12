"""
Membership sets describing which package bases are still needed.

Two sources of truth feed a reconciliation pass:

    installed   - foreign packages known to the local package database
    remote      - package bases currently published on the AUR

The remote set is optional precision: it costs network round trips and is
only computed when the retention policy keeps current packages.
"""

import logging
from typing import AbstractSet, Iterable, Iterator, Sequence

from aurclean.core.interfaces import InstalledPackage, RemoteIndex

logger = logging.getLogger(__name__)


class MembershipSet(AbstractSet[str]):
    """An immutable set of package bases. Equality is exact string match."""

    __slots__ = ("_bases",)

    def __init__(self, bases: Iterable[str] = ()):
        self._bases = frozenset(bases)

    def __contains__(self, base: object) -> bool:
        return base in self._bases

    def __iter__(self) -> Iterator[str]:
        return iter(self._bases)

    def __len__(self) -> int:
        return len(self._bases)

    def __repr__(self) -> str:
        return f"MembershipSet({sorted(self._bases)!r})"

    @classmethod
    def _from_iterable(cls, it):
        return cls(it)


EMPTY = MembershipSet()


def resolve_installed(packages: Iterable[InstalledPackage]) -> MembershipSet:
    """
    Derive the installed package bases.

    Args:
        packages: Foreign packages from the local database

    Returns:
        Set of bases; packages without an explicit base contribute their name
    """
    return MembershipSet(pkg.effective_base for pkg in packages)


def resolve_remote_available(
    names: Sequence[str], index: RemoteIndex
) -> MembershipSet:
    """
    Derive the package bases currently published on the remote index.

    All names are sent as a single bulk lookup; the index client is
    responsible for splitting it into requests.

    Args:
        names: Candidate names, usually the cache entry names
        index: Remote package index

    Returns:
        Set of the declared bases of every returned record

    Raises:
        RemoteQueryError: If the lookup fails. No partial set is returned.
    """
    if not names:
        return EMPTY

    logger.debug(f"Querying the AUR for {len(names)} cached package bases")
    records = index.info(list(names))
    bases = MembershipSet(record.base for record in records)
    logger.debug(f"{len(bases)} of {len(names)} cached bases are still on the AUR")
    return bases
