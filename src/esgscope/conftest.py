# src/esgscope/conftest.py
"""
Pytest configuration and shared fixtures.

Tests are co-located with implementation files using the *_test.py suffix.
This file provides fixtures available to all tests in the package.
"""

import os

# Set environment BEFORE importing any app modules
os.environ["ESGSCOPE_ENV"] = "test"
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/esgscope_test")

from pathlib import Path

import psycopg
import pytest

from esgscope import db
from esgscope import repository
from esgscope.company.repository import CompanyRepository
from esgscope.config import config
from esgscope.repository.memory import InMemoryStore
from esgscope.seed import seed_companies

# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def store():
    """
    Provide a fresh in-memory store.

    Also installed as the process-wide store so code that builds its own
    repositories (services, dispatcher, API) sees the same data.
    """
    store = InMemoryStore()
    repository.set_store(store)
    yield store
    repository.set_store(None)


@pytest.fixture
def seeded_store(store):
    """In-memory store holding the six reference companies."""
    seed_companies(CompanyRepository(store))
    return store


@pytest.fixture
def company_repo(store):
    """Provide a CompanyRepository over the empty in-memory store."""
    return CompanyRepository(store)


@pytest.fixture
def seeded_repo(seeded_store):
    """Provide a CompanyRepository over the seeded in-memory store."""
    return CompanyRepository(seeded_store)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_db():
    """
    Apply the schema to the test database once per session.

    Skips every dependent test when the database is unreachable.
    """
    try:
        conn = psycopg.connect(config.database_url, connect_timeout=3)
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL test database unavailable: {e}")

    schema_file = Path(__file__).parent.parent.parent / "migrations" / "001_initial_schema.sql"
    if not schema_file.exists():
        conn.close()
        raise FileNotFoundError(f"Migration file not found: {schema_file}")

    with conn:
        with conn.cursor() as cur:
            cur.execute(schema_file.read_text())

    yield config.database_url


@pytest.fixture
def db_connection(test_db):
    """
    Provide a database connection with transaction rollback.

    Each test runs in a transaction that is rolled back at the end,
    ensuring tests don't affect each other.
    """
    conn = psycopg.connect(test_db)

    # Clean slate: truncate before each test
    with conn.cursor() as cur:
        cur.execute("TRUNCATE companies RESTART IDENTITY")
    conn.commit()

    # Override the db module to use this connection
    db.set_connection_override(conn)

    yield conn

    conn.rollback()
    db.clear_connection_override()
    conn.close()


@pytest.fixture
def pg_store(db_connection):
    """Provide a PostgresStore bound to the rollback connection."""
    from esgscope.repository.postgres import PostgresStore

    return PostgresStore(config.database_url)


# =============================================================================
# Flask App Fixtures
# =============================================================================


@pytest.fixture
def app(seeded_store):
    """Create Flask application for testing."""
    from esgscope.app import create_app

    app = create_app()
    app.config["TESTING"] = True

    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
