"""
Pytest configuration and shared test helpers for backend tests.
"""
import os

# Skip heavy server startup (MongoDB, scheduler) when running under pytest.
os.environ.setdefault("PYTEST_RUNNING", "1")

import copy
import itertools
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from auth import create_access_token
from database import database
from models import User, Profile
from server import app
from utils.rate_limiter import rate_limiter


# ============================================================================
# In-memory stand-in for the motor collections the services use
# ============================================================================

def _compare(value, op, expected):
    if op == "$ne":
        return value != expected
    if op == "$in":
        return value in expected
    if value is None:
        return False
    if op == "$lt":
        return value < expected
    if op == "$lte":
        return value <= expected
    if op == "$gt":
        return value > expected
    if op == "$gte":
        return value >= expected
    raise NotImplementedError(op)


def matches(doc, query):
    for key, condition in (query or {}).items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
            continue
        value = doc.get(key)
        if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
            if not all(_compare(value, op, expected) for op, expected in condition.items()):
                return False
        elif value != condition:
            return False
    return True


def project(doc, projection):
    doc = copy.deepcopy(doc)
    fields = {k: v for k, v in (projection or {}).items() if k != "_id"}
    if any(fields.values()):
        return {k: v for k, v in doc.items() if k in fields}
    for key in fields:
        doc.pop(key, None)
    return doc


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, key, direction=1):
        self.docs.sort(key=lambda d: (d.get(key) is None, d.get(key)), reverse=direction < 0)
        return self

    async def to_list(self, length=None):
        return self.docs[:length] if length else self.docs


class FakeCollection:
    _ids = itertools.count(1)

    def __init__(self):
        self.docs = []

    async def create_index(self, *args, **kwargs):
        return "index"

    async def insert_one(self, document):
        self.docs.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=next(self._ids))

    async def find_one(self, query=None, projection=None):
        for doc in self.docs:
            if matches(doc, query):
                return project(doc, projection)
        return None

    def find(self, query=None, projection=None):
        return FakeCursor([project(d, projection) for d in self.docs if matches(d, query)])

    async def count_documents(self, query):
        return sum(1 for d in self.docs if matches(d, query))

    def _apply(self, doc, update, inserting=False):
        for key, value in update.get("$set", {}).items():
            doc[key] = copy.deepcopy(value)
        for key, value in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + value
        for key, value in update.get("$addToSet", {}).items():
            items = doc.setdefault(key, [])
            if value not in items:
                items.append(value)
        if inserting:
            for key, value in update.get("$setOnInsert", {}).items():
                doc[key] = copy.deepcopy(value)

    async def _update(self, query, update, upsert, many):
        targets = [d for d in self.docs if matches(d, query)]
        if not many:
            targets = targets[:1]
        for doc in targets:
            self._apply(doc, update)
        if targets or not upsert:
            return SimpleNamespace(matched_count=len(targets), modified_count=len(targets), upserted_id=None)

        doc = {k: v for k, v in query.items() if not k.startswith("$") and not isinstance(v, dict)}
        self._apply(doc, update, inserting=True)
        self.docs.append(doc)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=next(self._ids))

    async def update_one(self, query, update, upsert=False):
        return await self._update(query, update, upsert, many=False)

    async def update_many(self, query, update, upsert=False):
        return await self._update(query, update, upsert, many=True)


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        return self.collections.setdefault(name, FakeCollection())

    def __getitem__(self, name):
        return getattr(self, name)

    async def command(self, *args, **kwargs):
        return {"ok": 1}


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def fake_db(monkeypatch):
    """Every test gets an empty in-memory database."""
    db = FakeDatabase()
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def client():
    """Return a TestClient for the main FastAPI app (server:app)."""
    return TestClient(app)


def seed_user(db, email="user@example.com", is_premium=False, premium_expires_at=None):
    """Insert a user and profile directly and return (user_id, auth headers)."""
    user = User(email=email, password_hash="unused")
    profile = Profile(
        user_id=user.user_id,
        email=email,
        is_premium=is_premium,
        premium_expires_at=premium_expires_at,
    )
    db.users.docs.append(user.model_dump())
    db.profiles.docs.append(profile.model_dump())
    token = create_access_token({"sub": user.user_id, "email": email})
    return user.user_id, {"Authorization": f"Bearer {token}"}


@pytest.fixture
def free_user(fake_db):
    user_id, headers = seed_user(fake_db, "free@example.com")
    return SimpleNamespace(user_id=user_id, headers=headers)


@pytest.fixture
def premium_user(fake_db):
    user_id, headers = seed_user(fake_db, "pro@example.com", is_premium=True)
    return SimpleNamespace(user_id=user_id, headers=headers)


@pytest.fixture
def make_user(fake_db):
    """Factory for extra users: make_user(email, is_premium=..., premium_expires_at=...)."""
    def _make(email, **kwargs):
        user_id, headers = seed_user(fake_db, email, **kwargs)
        return SimpleNamespace(user_id=user_id, headers=headers)
    return _make
