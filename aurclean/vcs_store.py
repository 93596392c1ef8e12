"""
Persisted VCS info for development packages.

The store maps package names to the upstream sources they were built from
and lives next to the build cache as JSON. Uninstalled packages must be
dropped from it, otherwise they keep being checked for updates.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable

logger = logging.getLogger(__name__)


class VCSStore:
    """Load/modify/save wrapper around the VCS info file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.packages: Dict[str, Any] = {}

    def load(self) -> "VCSStore":
        """
        Read the store from disk. A missing file is an empty store.

        Raises:
            ValueError: If the file is not a JSON object
        """
        if not self.path.exists():
            self.packages = {}
            return self

        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        self.packages = data
        return self

    def __contains__(self, name: str) -> bool:
        return name in self.packages

    def remove_packages(self, names: Iterable[str]) -> bool:
        """
        Forget the given packages.

        Returns:
            True if at least one package was removed and the store needs saving
        """
        updated = False
        for name in names:
            if name in self.packages:
                del self.packages[name]
                updated = True
        return updated

    def save(self) -> None:
        """Write the store atomically (temp file in the same directory + rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.packages, f, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug(f"Saved VCS info for {len(self.packages)} packages to {self.path}")
