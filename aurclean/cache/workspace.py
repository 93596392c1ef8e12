"""Classification of cached workspaces into git checkouts and plain directories."""

from enum import Enum
from pathlib import Path

from aurclean.core.interfaces import VcsBackend


class WorkspaceState(Enum):
    VERSION_CONTROLLED = "version-controlled"
    PLAIN = "plain"


def classify(path: Path, vcs: VcsBackend) -> WorkspaceState:
    """Classify a workspace by probing for version-control metadata."""
    if vcs.is_version_controlled(path):
        return WorkspaceState.VERSION_CONTROLLED
    return WorkspaceState.PLAIN
