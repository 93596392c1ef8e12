"""Core interfaces and abstractions for aurclean."""

from aurclean.core.interfaces import (
    AurPackage,
    InstalledPackage,
    PackageDatabase,
    RemoteIndex,
    VcsBackend,
)

__all__ = [
    "AurPackage",
    "InstalledPackage",
    "PackageDatabase",
    "RemoteIndex",
    "VcsBackend",
]
