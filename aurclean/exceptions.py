"""
Exception classes for aurclean.
"""

from typing import Optional, Sequence


class AurCleanError(Exception):
    """Base exception for all aurclean errors."""

    pass


class RemoteQueryError(AurCleanError):
    """Raised when the bulk lookup against the AUR RPC index fails."""

    def __init__(self, message: str, names: Optional[Sequence[str]] = None):
        self.names = list(names) if names else []
        super().__init__(message)


class VcsError(AurCleanError):
    """Raised when a git operation on a workspace fails."""

    def __init__(self, path, operation: str, stderr: str = ""):
        self.path = path
        self.operation = operation
        self.stderr = stderr.strip()
        if self.stderr:
            super().__init__(f"git {operation} failed in {path}: {self.stderr}")
        else:
            super().__init__(f"git {operation} failed in {path}")


class PackageManagerError(AurCleanError):
    """Raised when the system package manager exits with an error."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"'{' '.join(self.command)}' exited with status {returncode}"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)
