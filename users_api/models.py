"""Domain models for the users service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Represents a user record stored in the database."""

    id: int
    name: str
    email: str
    created_at: Optional[datetime]


__all__ = ["User"]
