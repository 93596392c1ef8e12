"""Client for the AUR RPC interface."""

from .client import AurClient

__all__ = ["AurClient"]
