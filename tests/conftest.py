# tests/conftest.py
"""
Pytest configuration and shared fixtures for the ledger tests.

Run:
    pytest tests -v
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from config import Config
from core.db import build_engine, setup_database
from core.document_store import DocumentStore
from mlm_system.config.defaults import default_document
from mlm_system.system import MLMSystem
from mlm_system.utils.time_machine import timeMachine

# =============================================================================
# CONSTANTS
# =============================================================================

CHAIN_NAMES = ['A', 'B', 'C', 'D', 'E']

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# GLOBAL STATE
# =============================================================================

@pytest.fixture(autouse=True)
def clean_globals():
    """Fresh configuration and virtual time for every test."""
    Config.reset()
    timeMachine.setTime(FIXED_NOW)
    yield
    timeMachine.resetToRealTime()
    Config.reset()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """In-memory database, one per test."""
    engine = build_engine("sqlite://")
    setup_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def store(session_factory):
    """Store with the default document already saved."""
    store = DocumentStore(session_factory=session_factory, store_key="test_db")
    store.reset_to_defaults()
    return store


@pytest.fixture
def empty_store(session_factory):
    """Store with nothing saved yet."""
    return DocumentStore(session_factory=session_factory, store_key="test_db")


@pytest.fixture
def system(store):
    return MLMSystem(store)


# =============================================================================
# DOCUMENT FIXTURES
# =============================================================================

@pytest.fixture
def document():
    """Default document, not persisted."""
    return default_document()


@pytest.fixture
def chain(system):
    """
    Builds root -> A -> B -> C -> D -> E through registration.

    Returns dict name -> User (as returned by register).
    """
    users = {}
    sponsor_id = 'root'
    for name in CHAIN_NAMES:
        user = system.register(f"user{name}", "pass", f"Medlem {name}", sponsor_id)
        users[name] = user
        sponsor_id = user.id
    return users
