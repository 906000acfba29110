from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from users_api.api import create_app
from users_api.config import ServiceConfig
from users_api.database import Database, StorageError, parse_identifier
from users_api.models import User


class MemoryUserStore:
    """In-process stand-in for :class:`Database` used by the API tests."""

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._next_id = 1
        self.fail_with: Optional[str] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise StorageError(self.fail_with)

    def list_users(self) -> List[User]:
        self._check()
        return [self._users[user_id] for user_id in sorted(self._users)]

    def create_user(self, name: str, email: str, created_at: Optional[datetime] = None) -> User:
        self._check()
        user = User(
            id=self._next_id,
            name=name,
            email=email,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._users[user.id] = user
        self._next_id += 1
        return user

    def get_user(self, identifier: str) -> Optional[User]:
        self._check()
        user_id = parse_identifier(identifier)
        if user_id is None:
            return None
        return self._users.get(user_id)


@pytest.fixture()
def database(tmp_path: Path) -> Iterator[Database]:
    db = Database(tmp_path / "users.sqlite3")
    db.open()
    db.ensure_schema()
    yield db
    db.close()


@pytest.fixture()
def memory_store() -> MemoryUserStore:
    return MemoryUserStore()


@pytest.fixture()
def config(tmp_path: Path) -> ServiceConfig:
    return ServiceConfig(database_path=tmp_path / "users.sqlite3")


@pytest.fixture(params=["sqlite", "memory"])
def client(request, config: ServiceConfig):
    if request.param == "sqlite":
        store = request.getfixturevalue("database")
    else:
        store = request.getfixturevalue("memory_store")

    app = create_app(database=store, config=config)
    with TestClient(app) as test_client:
        yield test_client
