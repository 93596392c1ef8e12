"""
Access to the local pacman database.

Foreign packages (installed, but provided by no sync repository) are listed
with ``pacman -Qqm``. pacman does not print the package base, so bases are
read from the ``desc`` files of the local database:

    /var/lib/pacman/local/<name>-<version>/desc

    %NAME%
    python-foo-git

    %BASE%
    foo-git
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from aurclean.core.interfaces import InstalledPackage
from aurclean.exceptions import PackageManagerError

logger = logging.getLogger(__name__)


def parse_desc(text: str) -> Dict[str, List[str]]:
    """
    Parse a pacman ``desc`` file into a mapping of field to values.

    Fields are ``%UPPERCASE%`` headers followed by one value per line and
    terminated by an empty line.
    """
    fields: Dict[str, List[str]] = {}
    current: Optional[str] = None
    for line in text.splitlines():
        line = line.strip()
        if not line:
            current = None
        elif line.startswith("%") and line.endswith("%") and len(line) > 2:
            current = line[1:-1]
            fields[current] = []
        elif current is not None:
            fields[current].append(line)
    return fields


def read_local_bases(db_path: Path) -> Dict[str, str]:
    """
    Map installed package names to their package base.

    Packages whose ``desc`` has no %BASE% field are omitted. Unreadable
    entries are skipped.
    """
    local = Path(db_path) / "local"
    bases: Dict[str, str] = {}
    if not local.is_dir():
        logger.debug(f"No local pacman database at {local}")
        return bases

    for desc in local.glob("*/desc"):
        try:
            fields = parse_desc(desc.read_text(encoding="utf-8", errors="replace"))
        except OSError as e:
            logger.debug(f"Skipping {desc}: {e}")
            continue
        name = fields.get("NAME")
        base = fields.get("BASE")
        if name and base:
            bases[name[0]] = base[0]
    return bases


class PacmanDatabase:
    """PackageDatabase implementation that shells out to pacman."""

    def __init__(
        self,
        pacman: str = "pacman",
        db_path: Path = Path("/var/lib/pacman"),
        sudo: str = "sudo",
    ):
        self.pacman = pacman
        self.db_path = Path(db_path)
        self.sudo = sudo

    @classmethod
    def from_config(cls) -> "PacmanDatabase":
        from aurclean.config import get_pacman_bin, get_pacman_db_path, get_sudo_bin

        return cls(
            pacman=get_pacman_bin(), db_path=get_pacman_db_path(), sudo=get_sudo_bin()
        )

    def _query(self, *args: str) -> List[str]:
        command = [self.pacman, *args]
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise PackageManagerError(command, -1, str(e))

        # pacman -Q exits 1 with no output when nothing matches
        if result.returncode == 1 and not result.stdout.strip():
            return []
        if result.returncode != 0:
            raise PackageManagerError(command, result.returncode, result.stderr)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def list_foreign(self) -> List[InstalledPackage]:
        """
        List installed packages that no sync repository provides.

        Raises:
            PackageManagerError: If pacman fails
        """
        names = self._query("-Qqm")
        bases = read_local_bases(self.db_path)
        return [InstalledPackage(name=name, base=bases.get(name)) for name in names]

    def hanging(self, remove_optional: bool = False) -> List[str]:
        """
        List dependencies that no installed package requires.

        Args:
            remove_optional: Also include packages only required optionally
        """
        return self._query("-Qdttq" if remove_optional else "-Qdtq")

    def remove(self, names: Sequence[str]) -> None:
        """
        Uninstall packages with ``pacman -R``.

        pacman runs attached to the terminal so it can ask for confirmation.

        Raises:
            PackageManagerError: If pacman exits with an error
        """
        if not names:
            return

        command = [self.pacman, "-R", *names]
        if self.sudo:
            command.insert(0, self.sudo)

        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(command)
        except OSError as e:
            raise PackageManagerError(command, -1, str(e))
        if result.returncode != 0:
            raise PackageManagerError(command, result.returncode)
