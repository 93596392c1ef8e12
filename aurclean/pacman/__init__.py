"""Local package database access through pacman."""

from .database import PacmanDatabase, parse_desc, read_local_bases

__all__ = ["PacmanDatabase", "parse_desc", "read_local_bases"]
