"""Inventory of the build cache: one directory per package base."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached workspace, identified by its package base."""

    name: str
    path: Path


def list_entries(root: Union[str, Path]) -> List[CacheEntry]:
    """
    List the cached workspaces under ``root``.

    Only immediate child directories are returned; stray files (lock files,
    the VCS store) are skipped, and so are symlinks, which may point outside
    the cache.

    Args:
        root: Build cache directory

    Returns:
        Entries sorted by name

    Raises:
        OSError: If the root does not exist or cannot be read
    """
    root = Path(root)
    entries = []
    with os.scandir(root) as it:
        for child in it:
            try:
                is_dir = child.is_dir(follow_symlinks=False)
            except OSError as e:
                logger.debug(f"Skipping unreadable cache child {child.path}: {e}")
                continue
            if not is_dir:
                continue
            entries.append(CacheEntry(name=child.name, path=root / child.name))

    entries.sort(key=lambda e: e.name)
    logger.debug(f"Found {len(entries)} cached workspaces in {root}")
    return entries
