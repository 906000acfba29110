"""Fixed settings for the users service."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_DATABASE_FILE = "users.sqlite3"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8881
DEFAULT_ROUTE_PREFIX = "/api/users"


def resolve_database_path(value: Optional[str | Path] = None) -> Path:
    """Resolve the on-disk path for the user database."""

    if value:
        return Path(value).expanduser().resolve(strict=False)
    return (Path.cwd() / DEFAULT_DATABASE_FILE).resolve(strict=False)


@dataclass(frozen=True)
class ServiceConfig:
    """Startup constants for the service.

    Nothing here is read from the environment or the command line; tests
    build their own instance when they need different values.
    """

    database_path: Path = field(default_factory=resolve_database_path)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    route_prefix: str = DEFAULT_ROUTE_PREFIX
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not self.route_prefix.startswith("/") or self.route_prefix.endswith("/"):
            raise ValueError("Route prefix must start with '/' and must not end with '/'")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")


__all__ = ["ServiceConfig", "resolve_database_path"]
