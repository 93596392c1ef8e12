"""
Git operations on cached build workspaces.

A workspace is a package base directory under the build cache. When it is a
git checkout it can be reset and cleaned in place instead of being deleted.

    - Probing uses dulwich, which reads the .git metadata without spawning git
    - Reset and clean go through GitPython so they match ``git`` semantics exactly
"""

from .workspace import GitWorkspace

__all__ = ["GitWorkspace"]
