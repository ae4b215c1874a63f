"""Tests for database layer, models and migrations (SQLite file for unit scope)."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine, inspect

from ppc_contracts.db import get_sync_db
from ppc_contracts.db import session as db_session_module
from ppc_contracts.db.migrations import downgrade_migrations, run_migrations
from ppc_contracts.db.models import ContractDocument, ContractStatus
from ppc_contracts.db.session import _to_async_url, _to_sync_url


@pytest.fixture(scope="function")
def test_db(sqlite_sessionmaker):
    return sqlite_sessionmaker


def _document(**overrides):
    values = {
        "owner_id": "owner-1",
        "contract_type": "CPL",
        "request_snapshot": {"contractType": "CPL", "payout": 30},
    }
    values.update(overrides)
    return ContractDocument(**values)


def test_create_document_defaults(test_db):
    session = test_db()
    try:
        doc = _document()
        session.add(doc)
        session.commit()

        assert doc.id is not None
        assert doc.status == ContractStatus.draft
        assert doc.negotiation_notes == []
        assert doc.signing_unsigned_body is None
        assert doc.buyer_signed_at is None and doc.publisher_signed_at is None
        assert doc.created_at is not None
        assert doc.updated_at is not None
    finally:
        session.close()


def test_signing_columns_persist(test_db):
    session = test_db()
    try:
        signed_at = datetime(2026, 3, 2, 14, 5)
        doc = _document(
            signing_unsigned_body="<div/>",
            signing_status="awaiting_buyer",
            publisher_signer_name="Bo Kim",
            publisher_signature_key="owner-1/doc/publisher-abc.png",
            publisher_signed_at=signed_at,
        )
        session.add(doc)
        session.commit()
        doc_id = doc.id
    finally:
        session.close()

    session = test_db()
    try:
        loaded = session.get(ContractDocument, doc_id)
        assert loaded.publisher_signed_at == signed_at
        assert loaded.publisher_signature_key.endswith(".png")
        assert loaded.request_snapshot["payout"] == 30
    finally:
        session.close()


def test_get_sync_db_commits(test_db, monkeypatch):
    monkeypatch.setattr(db_session_module, "SyncSessionLocal", test_db)

    with get_sync_db() as db:
        db.add(_document(owner_id="committed"))

    session = test_db()
    try:
        assert session.query(ContractDocument).filter_by(owner_id="committed").first() is not None
    finally:
        session.close()


def test_get_sync_db_rolls_back(test_db, monkeypatch):
    monkeypatch.setattr(db_session_module, "SyncSessionLocal", test_db)

    with pytest.raises(ValueError):
        with get_sync_db() as db:
            db.add(_document(owner_id="rolled-back"))
            db.flush()
            raise ValueError("boom")

    session = test_db()
    try:
        assert session.query(ContractDocument).filter_by(owner_id="rolled-back").first() is None
    finally:
        session.close()


@pytest.mark.parametrize(
    "url, expected",
    [
        ("postgresql://u:p@db/contracts", "postgresql+asyncpg://u:p@db/contracts"),
        ("sqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
        ("postgresql+asyncpg://u:p@db/contracts", "postgresql+asyncpg://u:p@db/contracts"),
    ],
)
def test_to_async_url(url, expected):
    assert _to_async_url(url) == expected


def test_to_sync_url():
    assert _to_sync_url("sqlite+aiosqlite:///./x.db") == "sqlite:///./x.db"
    assert _to_sync_url("postgresql+asyncpg://u@h/d") == "postgresql://u@h/d"


def test_migrations_match_models(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    run_migrations(url)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert "contract_documents" in inspector.get_table_names()
        columns = {c["name"] for c in inspector.get_columns("contract_documents")}
        assert set(ContractDocument.__table__.columns.keys()) <= columns
        indexes = {i["name"] for i in inspector.get_indexes("contract_documents")}
        assert "idx_contract_documents_owner_created" in indexes
    finally:
        engine.dispose()

    downgrade_migrations(url)
    engine = create_engine(url)
    try:
        assert "contract_documents" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
