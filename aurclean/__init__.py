"""aurclean: retention and cleanup for AUR build caches."""

__version__ = "0.3.0"
