"""SQLite-backed persistence for users."""
from __future__ import annotations

import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .models import User
from .schema import USERS_TABLE

logger = logging.getLogger("users_api.database")

_IDENTIFIER_PATTERN = re.compile(r"[+-]?[0-9]+")
_MAX_ROWID = 2**63 - 1
_SELECT_COLUMNS = ", ".join(USERS_TABLE.column_names)


class StorageError(RuntimeError):
    """Raised when the underlying store fails to open or execute a statement."""


class UserStore(Protocol):
    """Operations the HTTP handlers need from a user store."""

    def list_users(self) -> List[User]: ...

    def create_user(self, name: str, email: str, created_at: Optional[datetime] = None) -> User: ...

    def get_user(self, identifier: str) -> Optional[User]: ...


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _is_unset(value: Optional[datetime]) -> bool:
    # The zero timestamp means "use the column default", same as None.
    return value is None or value.replace(tzinfo=None) == datetime.min


def _serialize_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(str(value))
    # CURRENT_TIMESTAMP is UTC but carries no offset.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_identifier(identifier: object) -> Optional[int]:
    """Return the integer row id for ``identifier`` or ``None`` if it cannot name a row."""

    text = str(identifier).strip()
    if not _IDENTIFIER_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if value < 1 or value > _MAX_ROWID:
        return None
    return value


class Database:
    """Process-wide handle around a single shared SQLite connection."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def uri(self) -> str:
        return f"{self._path.resolve(strict=False).as_uri()}?cache=shared&mode=rwc"

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """Open the shared connection, creating the database file if needed."""

        if self._conn is not None:
            return

        try:
            _ensure_directory(self._path)
            conn = sqlite3.connect(
                self.uri,
                uri=True,
                check_same_thread=False,
                isolation_level=None,
            )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"unable to open database {self._path}: {exc}") from exc

        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as exc:
            conn.close()
            raise StorageError(f"unable to open database {self._path}: {exc}") from exc

        self._conn = conn
        logger.info("Opened database at %s", self._path)

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    def ensure_schema(self) -> None:
        """Create the users table if it does not already exist."""

        self._query(USERS_TABLE.create_statement())
        logger.info("Ensured table %s exists", USERS_TABLE.name)

    # ------------------------------------------------------------------
    # User records
    # ------------------------------------------------------------------
    def list_users(self) -> List[User]:
        rows = self._query(
            f"SELECT {_SELECT_COLUMNS} FROM {USERS_TABLE.name} ORDER BY id ASC"
        )
        return [self._row_to_user(row) for row in rows]

    def create_user(
        self,
        name: str,
        email: str,
        created_at: Optional[datetime] = None,
    ) -> User:
        """Insert a user and return the stored record, including its new id."""

        columns = ["name", "email"]
        params: List[object] = [name, email]
        if not _is_unset(created_at):
            columns.append("created_at")
            params.append(_serialize_datetime(created_at))

        placeholders = ", ".join("?" for _ in columns)
        rows = self._query(
            f"INSERT INTO {USERS_TABLE.name} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING {_SELECT_COLUMNS}",
            params,
        )
        return self._row_to_user(rows[0])

    def get_user(self, identifier: str) -> Optional[User]:
        user_id = parse_identifier(identifier)
        if user_id is None:
            return None

        rows = self._query(
            f"SELECT {_SELECT_COLUMNS} FROM {USERS_TABLE.name} WHERE id = ?",
            (user_id,),
        )
        if not rows:
            return None
        return self._row_to_user(rows[0])

    def _query(self, statement: str, params: Sequence[object] = ()) -> List[sqlite3.Row]:
        if self._conn is None:
            raise StorageError("database is not open")
        try:
            return self._conn.execute(statement, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            created_at=_parse_datetime(row["created_at"]),
        )


__all__ = ["Database", "StorageError", "UserStore", "current_timestamp", "parse_identifier"]
