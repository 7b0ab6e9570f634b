"""Pytest configuration and fixtures."""
import copy
import os
from datetime import datetime, timedelta, timezone

# Settings() reads these at import time.
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError

from timetracker.database import get_database
from timetracker.main import app
from timetracker.utils.auth import create_access_token


# ---------------------------------------------------------------------------
# In-memory stand-in for a Motor database. Supports the subset of the query
# language the services use, plus the unique indexes they rely on.
# ---------------------------------------------------------------------------


class FakeInsertOneResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeUpdateResult:
    def __init__(self, matched_count, modified_count):
        self.matched_count = matched_count
        self.modified_count = modified_count


class FakeDeleteResult:
    def __init__(self, deleted_count):
        self.deleted_count = deleted_count


def _matches(doc: dict, query: dict) -> bool:
    for key, cond in query.items():
        value = doc.get(key)
        if isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond):
            for op, operand in cond.items():
                if op == "$ne" and value == operand:
                    return False
                if op == "$gte" and (value is None or value < operand):
                    return False
                if op == "$lte" and (value is None or value > operand):
                    return False
        elif value != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = None

    def sort(self, keys):
        for key, direction in reversed(keys):
            self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, count):
        self._skip = count
        return self

    def limit(self, count):
        self._limit = count
        return self

    async def to_list(self, length=None):
        docs = self._docs[self._skip:]
        if self._limit is not None:
            docs = docs[: self._limit]
        return [copy.deepcopy(d) for d in docs]


class FakeCollection:
    def __init__(self, unique=()):
        self.docs: list[dict] = []
        # (field, partial filter or None)
        self.unique = unique

    def _check_unique(self, candidate: dict) -> None:
        for field, partial in self.unique:
            if partial is not None and not _matches(candidate, partial):
                continue
            for doc in self.docs:
                if doc["_id"] == candidate["_id"]:
                    continue
                if partial is not None and not _matches(doc, partial):
                    continue
                if doc.get(field) == candidate.get(field):
                    raise DuplicateKeyError(f"E11000 duplicate key error on {field}", 11000)

    def _first(self, query):
        return next((d for d in self.docs if _matches(d, query)), None)

    async def find_one(self, query=None):
        doc = self._first(query or {})
        return copy.deepcopy(doc) if doc else None

    def find(self, query=None):
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return FakeInsertOneResult(doc["_id"])

    async def find_one_and_update(self, query, update, return_document=False):
        doc = self._first(query)
        if doc is None:
            return None
        updated = {**doc, **copy.deepcopy(update["$set"])}
        self._check_unique(updated)
        doc.clear()
        doc.update(updated)
        return copy.deepcopy(doc)

    async def update_one(self, query, update):
        doc = self._first(query)
        if doc is None:
            return FakeUpdateResult(0, 0)
        updated = {**doc, **copy.deepcopy(update["$set"])}
        self._check_unique(updated)
        changed = updated != doc
        doc.clear()
        doc.update(updated)
        return FakeUpdateResult(1, 1 if changed else 0)

    async def delete_one(self, query):
        doc = self._first(query)
        if doc is None:
            return FakeDeleteResult(0)
        self.docs.remove(doc)
        return FakeDeleteResult(1)


class FakeDatabase:
    def __init__(self):
        self.collections = {
            "users": FakeCollection(unique=[("email", None)]),
            "projects": FakeCollection(),
            "time_entries": FakeCollection(unique=[("user_id", {"is_running": True})]),
        }

    def __getitem__(self, name):
        return self.collections[name]


class FakeClock:
    """Controllable clock for services."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_db():
    """Fresh in-memory database."""
    return FakeDatabase()


@pytest.fixture
def clock():
    """Clock starting at 2025-03-03 09:00 UTC."""
    return FakeClock(datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def auth_headers():
    """Factory for bearer headers carrying the given identity claims."""

    def make(email: str, **claims) -> dict:
        token = create_access_token({"email": email, "sub": email, **claims})
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest_asyncio.fixture
async def app_client(fake_db):
    """
    Create a test client backed by an in-memory database.

    This fixture:
    - Points the database dependency at a fresh FakeDatabase
    - Yields an async HTTP client for testing
    - Removes the override afterwards
    """
    app.dependency_overrides[get_database] = lambda: fake_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
