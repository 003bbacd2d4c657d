# tests/conftest.py

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from taskboard.app import create_app
from taskboard.auth import create_access_token
from taskboard.config import Settings
from taskboard.core.database import Database
from taskboard.core.models import Task
from taskboard.core.query_engine import TaskQueryEngine
from taskboard.core.service import TaskService
from taskboard.core.store import TaskStore

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings for one test: temporary SQLite file, fixed secret, no log files.
    """
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}",
        SECRET_KEY="test-secret-key-with-enough-length-for-hs256",
        LOGS_DIR=None,
    )


@pytest_asyncio.fixture()
async def database(settings: Settings):
    db = Database(settings.DATABASE_URL)
    await db.connect()
    yield db
    await db.close()


@pytest.fixture()
def store(database: Database) -> TaskStore:
    return TaskStore(database)


@pytest.fixture()
def engine(store: TaskStore) -> TaskQueryEngine:
    return TaskQueryEngine(store)


@pytest.fixture()
def service(store: TaskStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def add_task(store: TaskStore) -> Callable[..., Any]:
    """
    Insert a task row directly with deterministic timestamps.

    ``minutes`` offsets created_at/updated_at from BASE_TIME so that
    ordering by time is predictable.
    """

    async def _add(owner_id: str = "owner-a", minutes: int = 0, **fields: Any) -> Task:
        ts = BASE_TIME + timedelta(minutes=minutes)
        values: Dict[str, Any] = {
            "id": uuid.uuid4().hex,
            "owner_id": owner_id,
            "title": "Task",
            "description": "",
            "status": "pending",
            "priority": "medium",
            "due_date": None,
            "created_at": ts,
            "updated_at": ts,
        }
        values.update(fields)
        return await store.insert(values)

    return _add


@pytest.fixture()
def client(settings: Settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(settings: Settings) -> Callable[[str], Dict[str, str]]:
    def _headers(user_id: str = "owner-a") -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, settings)}"}

    return _headers
