"""
Git backend for build cache workspaces.

Equivalent shell operations:

    git -C <dir> reset --hard HEAD
    git -C <dir> clean -fx

``clean -fx`` removes untracked files, ignored ones included (downloaded
source tarballs, built packages). Untracked directories are kept.
"""

import logging
from pathlib import Path

from dulwich import porcelain
from dulwich.errors import NotGitRepository

from aurclean.exceptions import VcsError

logger = logging.getLogger(__name__)


class GitWorkspace:
    """VcsBackend implementation backed by dulwich and GitPython."""

    def is_version_controlled(self, path: Path) -> bool:
        """
        Check whether ``path`` itself is a git repository.

        Parent directories are not searched: a build cache living inside a
        dotfiles checkout must not make every entry look version-controlled.

        Args:
            path: Workspace directory

        Returns:
            True if ``path`` holds git metadata
        """
        if not (Path(path) / ".git").exists():
            return False
        try:
            repo = porcelain.open_repo(str(path))
        except NotGitRepository:
            return False
        except OSError as e:
            logger.debug(f"Could not open {path} as a git repository: {e}")
            return False
        repo.close()
        return True

    def reset(self, path: Path) -> None:
        """Hard reset the workspace to HEAD."""
        self._run(path, "reset", "--hard", "HEAD")

    def clean(self, path: Path) -> None:
        """Remove untracked and ignored files from the workspace."""
        self._run(path, "clean", "-fx")

    def _run(self, path: Path, operation: str, *args: str) -> None:
        # GitPython refuses to import without a git executable
        try:
            from git import Repo
            from git.exc import (
                GitCommandError,
                InvalidGitRepositoryError,
                NoSuchPathError,
            )
        except ImportError as e:
            raise VcsError(path, operation, str(e))

        try:
            repo = Repo(str(path))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise VcsError(path, operation, f"not a git repository: {e}")

        try:
            logger.debug(f"git {operation} {' '.join(args)} in {path}")
            getattr(repo.git, operation)(*args)
        except GitCommandError as e:
            raise VcsError(path, operation, str(e.stderr or e))
        finally:
            repo.close()
