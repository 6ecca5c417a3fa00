"""Pytest configuration and shared fixtures for all tests."""

import os
from contextlib import contextmanager

# Settings are read at import time
os.environ.setdefault("REFERTRACK_BCRYPT_ROUNDS", "4")
os.environ.setdefault("REFERTRACK_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from refertrack.api.main import create_app
from refertrack.auth.passwords import PasswordHasher
from refertrack.errors import StoreError
from refertrack.referral.service import RegistrationService
from refertrack.storage.db import Database
from refertrack.storage.memory import InMemoryUserStore
from refertrack.storage.repo import SqlUserStore


@pytest.fixture
def hasher():
    """Low-cost bcrypt hasher."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def memory_store():
    """Empty in-memory user store."""
    return InMemoryUserStore()


@pytest.fixture
def database(tmp_path):
    """SQLite database in a temporary file, tables created."""
    database = Database(f"sqlite:///{tmp_path / 'refertrack.db'}")
    database.create_tables()
    yield database
    database.engine.dispose()


@pytest.fixture
def sql_store(database):
    """SQL user store on the temporary database."""
    return SqlUserStore(database)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each store implementation in turn."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service(store, hasher):
    """Registration service over the parametrized store."""
    return RegistrationService(store, hasher=hasher)


@pytest.fixture
def client(sql_store, hasher):
    """API client backed by the temporary SQL database."""
    app = create_app(store=sql_store, hasher=hasher)
    with TestClient(app) as client:
        yield client


class FailingStore:
    """Store whose every transaction fails."""

    def initialize(self):
        pass

    def close(self):
        pass

    @contextmanager
    def transaction(self):
        raise StoreError("database unavailable")
        yield


@pytest.fixture
def failing_store():
    """Store that is always down."""
    return FailingStore()
