"""Protocol interfaces for the collaborators of the cache reconciler.

Protocols that decouple the retention engine from pacman, the AUR and git.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence


@dataclass(frozen=True)
class InstalledPackage:
    """A locally installed package record."""

    name: str
    base: Optional[str] = None

    @property
    def effective_base(self) -> str:
        """The package base, falling back to the package name."""
        return self.base or self.name


@dataclass(frozen=True)
class AurPackage:
    """A record returned by the AUR RPC info endpoint."""

    name: str
    base: str


class PackageDatabase(Protocol):
    """Minimal interface for the local package database."""

    def list_foreign(self) -> List[InstalledPackage]:
        """Installed packages that are not provided by any sync repository."""
        ...

    def hanging(self, remove_optional: bool = False) -> List[str]:
        """Installed dependencies that nothing requires any more."""
        ...

    def remove(self, names: Sequence[str]) -> None:
        """Uninstall packages. Raises PackageManagerError."""
        ...


class RemoteIndex(Protocol):
    """Minimal interface for the remote package index."""

    def info(self, names: Sequence[str]) -> List[AurPackage]:
        """Bulk lookup of package names. Raises RemoteQueryError."""
        ...


class VcsBackend(Protocol):
    """Minimal interface for version-control operations on a workspace."""

    def is_version_controlled(self, path: Path) -> bool:
        """Side-effect free probe for a repository at exactly this path."""
        ...

    def reset(self, path: Path) -> None:
        """Reset the workspace to its tracked head. Raises VcsError."""
        ...

    def clean(self, path: Path) -> None:
        """Remove untracked and ignored files. Raises VcsError."""
        ...
