"""Pytest configuration and fixtures."""

import os

# Set test database URL BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ppc_contracts.db import models  # noqa: F401  registers the tables
from ppc_contracts.db.session import Base
from ppc_contracts.schemas.agreement import AgreementRequest
from helpers import InMemoryStorage


@pytest.fixture(scope="function")
def sqlite_sessionmaker(tmp_path):
    """Create a SQLite database with schema for testing."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield SessionLocal
    engine.dispose()


@pytest.fixture
def db_session(sqlite_sessionmaker):
    session = sqlite_sessionmaker()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    mock_session = MagicMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    mock_session.execute = AsyncMock()
    mock_session.add = MagicMock()
    mock_session.commit = AsyncMock()
    return mock_session


@pytest.fixture
def mock_temporal():
    """Create a mock Temporal client."""
    return AsyncMock()


def _party(company, address, email, contact, title):
    return {
        "companyName": company,
        "entityType": "Limited Liability Company",
        "address": address,
        "email": email,
        "phone": "555-0100",
        "contactName": contact,
        "title": title,
    }


@pytest.fixture
def aca_cpl_payload():
    """Wizard JSON for an ACA Health CPL agreement between a TX buyer and a CA publisher."""
    return {
        "contractType": "ACAHealth",
        "vertical": "ACA Health",
        "acaSubType": "CPL",
        "acaCplPayout": 45,
        "acaCplBufferTime": 90,
        "acaLicensedStates": ["TX", "FL"],
        "buyer": _party(
            "Lone Star Health Agency LLC",
            "100 Congress Ave, Austin, TX 78701",
            "buyer@lonestar.example",
            "Dana Reyes",
            "Managing Director",
        ),
        "publisher": _party(
            "Bright Leads Inc.",
            "55 Market St, San Francisco, CA 94105",
            "ops@brightleads.example",
            "Sam Patel",
            "CEO",
        ),
    }


@pytest.fixture
def aca_cpl_request(aca_cpl_payload):
    return AgreementRequest.model_validate(aca_cpl_payload)


@pytest.fixture
def ppc_payload():
    """Pay-per-call CPL wizard JSON with no parseable state in either address."""
    return {
        "contractType": "PayPerCall",
        "vertical": "Final Expense",
        "campaignSubType": "CPL",
        "payout": 1234.5,
        "bufferTime": 120,
        "billingCycle": "Weekly",
        "paymentTerms": 15,
        "buyer": _party("Acme Insurance", "1 Main Street", "buyer@acme.example", "Ann Lee", "VP"),
        "publisher": _party("Call Co", "2 Side Street", "pub@callco.example", "Bo Kim", "Owner"),
    }


@pytest.fixture
def api_client(sqlite_sessionmaker, memory_storage):
    """TestClient wired to a SQLite session and in-memory storage (no lifespan)."""
    from fastapi.testclient import TestClient

    from ppc_contracts.db.session import get_db_dependency
    from ppc_contracts.deps import get_storage
    from ppc_contracts.main import app

    def override_db():
        db = sqlite_sessionmaker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_dependency] = override_db
    app.dependency_overrides[get_storage] = lambda: memory_storage
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
        app.state.temporal = None
