"""Tests for the two-slot signing store (SQLite file + in-memory object storage)."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from ppc_contracts.core.config import settings
from ppc_contracts.db.models import ContractDocument, SigningStatus
from ppc_contracts.db.repository import create_contract
from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.services.signing import (
    InvalidSignature,
    InvalidState,
    NotFound,
    SignerRole,
    SigningStore,
    SlotAlreadySigned,
    StoreUnavailable,
    derive_status,
)
from ppc_contracts.storage.contracts import StorageError
from helpers import JPEG_BYTES, PNG_BYTES

OWNER = "owner-1"


@pytest.fixture
def document_id(db_session):
    doc = create_contract(db_session, owner_id=OWNER, request=AgreementRequest())
    db_session.commit()
    return doc.id


@pytest.fixture
def store(db_session, memory_storage):
    return SigningStore(db_session, memory_storage)


@pytest.fixture
def open_record(store, document_id):
    store.create_signing_record(OWNER, document_id, "<div>unsigned</div>", ("Buyer", "Publisher"))
    return document_id


def test_derive_status_depends_only_on_slots():
    assert derive_status(False, False) is SigningStatus.awaiting_buyer
    assert derive_status(False, True) is SigningStatus.awaiting_buyer
    assert derive_status(True, False) is SigningStatus.awaiting_publisher
    assert derive_status(True, True) is SigningStatus.fully_signed


class TestCreateSigningRecord:
    def test_new_record_has_empty_slots(self, store, document_id):
        record = store.create_signing_record(
            OWNER, document_id, "<div>body</div>", ("Employer", "Employee")
        )

        assert record.status is SigningStatus.awaiting_buyer
        assert record.buyer is None
        assert record.publisher is None
        assert record.unsigned_body == "<div>body</div>"
        assert (record.buyer_label, record.publisher_label) == ("Employer", "Employee")

    def test_unknown_document(self, store):
        with pytest.raises(NotFound):
            store.create_signing_record(OWNER, "missing", "<div/>", ("Buyer", "Publisher"))

    def test_other_owner_cannot_open(self, store, document_id):
        with pytest.raises(NotFound):
            store.create_signing_record("someone-else", document_id, "<div/>", ("Buyer", "Publisher"))

    def test_rejected_after_a_signature(self, store, open_record):
        store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)

        with pytest.raises(InvalidState):
            store.create_signing_record(OWNER, open_record, "<div>new</div>", ("Buyer", "Publisher"))


class TestSubmitSignature:
    def test_buyer_then_publisher(self, store, open_record):
        record = store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann Lee", PNG_BYTES)
        assert record.status is SigningStatus.awaiting_publisher
        assert record.buyer.signer_name == "Ann Lee"
        assert record.buyer.signed_at is not None

        record = store.submit_signature(OWNER, open_record, SignerRole.publisher, "Bo Kim", JPEG_BYTES)
        assert record.status is SigningStatus.fully_signed
        assert record.publisher.signer_name == "Bo Kim"

    def test_publisher_first_stays_awaiting_buyer(self, store, open_record):
        record = store.submit_signature(OWNER, open_record, SignerRole.publisher, "Bo Kim", PNG_BYTES)

        assert record.status is SigningStatus.awaiting_buyer
        assert record.publisher is not None
        assert record.buyer is None

    def test_order_independence(self, db_session, memory_storage):
        """Either arrival order ends fully signed with the same slot contents."""
        outcomes = []
        for order in ((SignerRole.buyer, SignerRole.publisher), (SignerRole.publisher, SignerRole.buyer)):
            doc = create_contract(db_session, owner_id=OWNER, request=AgreementRequest())
            db_session.commit()
            store = SigningStore(db_session, memory_storage)
            store.create_signing_record(OWNER, doc.id, "<div/>", ("Buyer", "Publisher"))
            names = {SignerRole.buyer: "Ann", SignerRole.publisher: "Bo"}
            for role in order:
                record = store.submit_signature(OWNER, doc.id, role, names[role], PNG_BYTES)
            outcomes.append(record)

        for record in outcomes:
            assert record.status is SigningStatus.fully_signed
            assert record.buyer.signer_name == "Ann"
            assert record.publisher.signer_name == "Bo"

    def test_writes_from_separate_sessions_both_survive(self, sqlite_sessionmaker, memory_storage, open_record):
        """Each signer's write touches only its own slot."""
        first, second = sqlite_sessionmaker(), sqlite_sessionmaker()
        try:
            SigningStore(first, memory_storage).load_signing_record(OWNER, open_record)
            SigningStore(second, memory_storage).load_signing_record(OWNER, open_record)

            SigningStore(first, memory_storage).submit_signature(
                OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES
            )
            record = SigningStore(second, memory_storage).submit_signature(
                OWNER, open_record, SignerRole.publisher, "Bo", PNG_BYTES
            )
        finally:
            first.close()
            second.close()

        assert record.status is SigningStatus.fully_signed
        assert record.buyer.signer_name == "Ann"

    def test_slot_is_write_once(self, store, open_record):
        store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)

        with pytest.raises(SlotAlreadySigned) as excinfo:
            store.submit_signature(OWNER, open_record, SignerRole.buyer, "Mallory", PNG_BYTES)

        assert excinfo.value.role is SignerRole.buyer
        assert store.load_signing_record(OWNER, open_record).buyer.signer_name == "Ann"

    def test_fully_signed_is_terminal(self, store, open_record):
        store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)
        store.submit_signature(OWNER, open_record, SignerRole.publisher, "Bo", PNG_BYTES)

        for role in SignerRole:
            with pytest.raises(SlotAlreadySigned):
                store.submit_signature(OWNER, open_record, role, "Again", PNG_BYTES)

    def test_lost_race_reports_slot_already_signed(self, db_session, store, open_record):
        """The conditional update refuses a slot filled after the pre-check."""
        original_load = store.load_signing_record

        def load_then_fill(owner_id, document_id):
            record = original_load(owner_id, document_id)
            db_session.execute(
                update(ContractDocument)
                .where(ContractDocument.id == document_id)
                .values(
                    buyer_signer_name="Winner",
                    buyer_signature_key="k",
                    buyer_signed_at=datetime(2026, 1, 1),
                )
            )
            db_session.commit()
            return record

        store.load_signing_record = load_then_fill
        with pytest.raises(SlotAlreadySigned):
            store.submit_signature(OWNER, open_record, SignerRole.buyer, "Loser", PNG_BYTES)

    @pytest.mark.parametrize(
        "name, image",
        [("", PNG_BYTES), ("   ", PNG_BYTES), ("Ann", b""), ("Ann", b"   ")],
    )
    def test_invalid_signature(self, store, open_record, memory_storage, name, image):
        with pytest.raises(InvalidSignature):
            store.submit_signature(OWNER, open_record, SignerRole.buyer, name, image)
        assert memory_storage.objects == {}

    def test_unknown_document(self, store):
        with pytest.raises(NotFound):
            store.submit_signature(OWNER, "missing", SignerRole.buyer, "Ann", PNG_BYTES)

    def test_no_signing_record(self, store, document_id):
        with pytest.raises(InvalidState):
            store.submit_signature(OWNER, document_id, SignerRole.buyer, "Ann", PNG_BYTES)

    def test_image_stored_in_signatures_bucket(self, store, open_record, memory_storage):
        record = store.submit_signature(OWNER, open_record, SignerRole.publisher, "Bo", JPEG_BYTES)

        key = record.publisher.image_key
        assert key.startswith(f"{OWNER}/{open_record}/publisher-")
        assert key.endswith(".jpeg")
        assert memory_storage.objects[(settings.S3_BUCKET_SIGNATURES, key)] == JPEG_BYTES
        assert memory_storage.content_types[(settings.S3_BUCKET_SIGNATURES, key)] == "image/jpeg"

    def test_storage_failure_is_store_unavailable(self, store, open_record, memory_storage):
        memory_storage.fail_with = StorageError("put", "signatures", "k", "connection refused")

        with pytest.raises(StoreUnavailable):
            store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)

        assert store.load_signing_record(OWNER, open_record).buyer is None

    def test_database_failure_is_store_unavailable(self, memory_storage):
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        store = SigningStore(db, memory_storage)

        with pytest.raises(StoreUnavailable):
            store.load_signing_record(OWNER, "doc")


class TestLoadSigningRecord:
    def test_status_recomputed_from_slots(self, db_session, store, open_record):
        """A stale stored status is ignored in favour of the slots."""
        store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)
        db_session.execute(
            update(ContractDocument)
            .where(ContractDocument.id == open_record)
            .values(signing_status=SigningStatus.fully_signed.value)
        )
        db_session.commit()

        record = store.load_signing_record(OWNER, open_record)
        assert record.status is SigningStatus.awaiting_publisher

    def test_stored_status_kept_in_sync(self, db_session, store, open_record):
        store.submit_signature(OWNER, open_record, SignerRole.publisher, "Bo", PNG_BYTES)
        doc = db_session.get(ContractDocument, open_record)
        db_session.refresh(doc)
        assert doc.signing_status == SigningStatus.awaiting_buyer.value

        store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)
        db_session.refresh(doc)
        assert doc.signing_status == SigningStatus.fully_signed.value

    def test_not_found(self, store):
        with pytest.raises(NotFound):
            store.load_signing_record(OWNER, "missing")

    def test_invalid_state_without_record(self, store, document_id):
        with pytest.raises(InvalidState):
            store.load_signing_record(OWNER, document_id)


class TestLoadSignatureImages:
    def test_images_per_slot(self, store, open_record):
        store.submit_signature(OWNER, open_record, SignerRole.publisher, "Bo", JPEG_BYTES)
        record = store.load_signing_record(OWNER, open_record)

        assert store.load_signature_images(record) == (None, JPEG_BYTES)

    def test_storage_failure(self, store, open_record, memory_storage):
        store.submit_signature(OWNER, open_record, SignerRole.buyer, "Ann", PNG_BYTES)
        record = store.load_signing_record(OWNER, open_record)
        memory_storage.fail_with = StorageError("get", "signatures", "k", "timeout")

        with pytest.raises(StoreUnavailable):
            store.load_signature_images(record)
