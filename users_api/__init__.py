"""Minimal HTTP service for storing and reading user records."""

from __future__ import annotations

from typing import Any

from .config import ServiceConfig, resolve_database_path
from .database import Database, StorageError, UserStore
from .models import User


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the users API application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "ServiceConfig",
    "StorageError",
    "User",
    "UserStore",
    "create_app",
    "resolve_database_path",
]
