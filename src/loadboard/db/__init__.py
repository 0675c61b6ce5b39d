"""Database layer for the Loadboard service."""

from .repository import Repository, get_repository

__all__ = [
    "Repository",
    "get_repository",
]
