"""Two-party signing record persisted on the contract document.

Each signature slot is written by one conditional single-row UPDATE
(``WHERE <role>_signed_at IS NULL``), so buyer and publisher can sign in any
order and concurrently without losing each other's write. The stored
``signing_status`` is recomputed in SQL after every write and again from the
slots on every read.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ppc_contracts.core.config import settings
from ppc_contracts.db.models import ContractDocument, SigningStatus
from ppc_contracts.services.assembly.formatting import image_mime
from ppc_contracts.storage.contracts import ObjectStorage, StorageError, signature_key

logger = logging.getLogger(__name__)


class SignerRole(str, enum.Enum):
    buyer = "buyer"
    publisher = "publisher"


class SigningError(Exception):
    """Base class for signing store failures."""


class NotFound(SigningError):
    """No such document for this owner."""


class InvalidState(SigningError):
    """The document cannot take this signing operation in its current state."""


class SlotAlreadySigned(SigningError):
    """The role's signature slot is already filled."""

    def __init__(self, document_id: str, role: SignerRole):
        self.document_id = document_id
        self.role = role
        super().__init__(f"{role.value} has already signed contract {document_id}")


class InvalidSignature(SigningError):
    """Signer name or signature image is missing."""


class StoreUnavailable(SigningError):
    """Database or object storage failed."""


@dataclass(frozen=True, slots=True)
class SignatureSlot:
    signer_name: str
    image_key: str
    signed_at: datetime


@dataclass(frozen=True, slots=True)
class SigningRecord:
    owner_id: str
    document_id: str
    unsigned_body: str
    buyer_label: str
    publisher_label: str
    buyer: Optional[SignatureSlot] = None
    publisher: Optional[SignatureSlot] = None

    @property
    def status(self) -> SigningStatus:
        return derive_status(self.buyer is not None, self.publisher is not None)

    @property
    def signed_roles(self) -> tuple[str, ...]:
        return tuple(role.value for role in SignerRole if self.slot(role) is not None)

    def slot(self, role: SignerRole) -> Optional[SignatureSlot]:
        return self.buyer if role is SignerRole.buyer else self.publisher

    def label(self, role: SignerRole) -> str:
        return self.buyer_label if role is SignerRole.buyer else self.publisher_label


def derive_status(buyer_signed: bool, publisher_signed: bool) -> SigningStatus:
    """Status as a function of slot presence only, never of arrival order."""
    if not buyer_signed:
        return SigningStatus.awaiting_buyer
    if not publisher_signed:
        return SigningStatus.awaiting_publisher
    return SigningStatus.fully_signed


def _signed_at_column(role: SignerRole):
    return getattr(ContractDocument, f"{role.value}_signed_at")


_STATUS_FROM_SLOTS = case(
    (ContractDocument.buyer_signed_at.is_(None), SigningStatus.awaiting_buyer.value),
    (ContractDocument.publisher_signed_at.is_(None), SigningStatus.awaiting_publisher.value),
    else_=SigningStatus.fully_signed.value,
)


def _slot_from(doc: ContractDocument, role: SignerRole) -> Optional[SignatureSlot]:
    signed_at = getattr(doc, f"{role.value}_signed_at")
    if signed_at is None:
        return None
    return SignatureSlot(
        signer_name=getattr(doc, f"{role.value}_signer_name") or "",
        image_key=getattr(doc, f"{role.value}_signature_key") or "",
        signed_at=signed_at,
    )


class SigningStore:
    """Signing operations over one DB session and the signatures bucket.

    Writes are committed here; the caller's pending changes on the same
    session are committed with them.
    """

    def __init__(self, db: Session, storage: ObjectStorage, *, bucket: Optional[str] = None):
        self._db = db
        self._storage = storage
        self._bucket = bucket or settings.S3_BUCKET_SIGNATURES

    def create_signing_record(
        self,
        owner_id: str,
        document_id: str,
        unsigned_body: str,
        party_labels: tuple[str, str],
    ) -> SigningRecord:
        """Attach an empty signing record. Fails once anyone has signed."""
        buyer_label, publisher_label = party_labels
        stmt = (
            update(ContractDocument)
            .where(
                ContractDocument.id == document_id,
                ContractDocument.owner_id == owner_id,
                ContractDocument.buyer_signed_at.is_(None),
                ContractDocument.publisher_signed_at.is_(None),
            )
            .values(
                signing_unsigned_body=unsigned_body,
                signing_status=SigningStatus.awaiting_buyer.value,
                buyer_label=buyer_label,
                publisher_label=publisher_label,
                buyer_signer_name=None,
                buyer_signature_key=None,
                publisher_signer_name=None,
                publisher_signature_key=None,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = self._db.execute(stmt)
            if result.rowcount == 0:
                doc = self._fetch(owner_id, document_id)
                if doc is None:
                    raise NotFound(f"contract {document_id} not found")
                raise InvalidState(f"contract {document_id} already carries signatures")
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreUnavailable(f"could not create signing record: {exc}") from exc

        logger.info("Signing record created for contract %s", document_id)
        return self.load_signing_record(owner_id, document_id)

    def submit_signature(
        self,
        owner_id: str,
        document_id: str,
        role: SignerRole,
        signer_name: str,
        signature_image: bytes,
    ) -> SigningRecord:
        """Fill ``role``'s slot once.

        Raises:
            InvalidSignature: Blank name or image.
            NotFound: No such document.
            InvalidState: The document has no signing record.
            SlotAlreadySigned: The slot is already filled.
            StoreUnavailable: Database or object storage failure.
        """
        role = SignerRole(role)
        name = (signer_name or "").strip()
        if not name:
            raise InvalidSignature("signer name is required")
        if not signature_image or not signature_image.strip():
            raise InvalidSignature("signature image is required")

        current = self.load_signing_record(owner_id, document_id)
        if current.slot(role) is not None:
            raise SlotAlreadySigned(document_id, role)

        mime = image_mime(signature_image)
        key = signature_key(owner_id, document_id, role.value, ext=mime.split("/", 1)[1])
        try:
            self._storage.put_bytes(
                self._bucket,
                key,
                signature_image,
                content_type=mime,
                metadata={"document-id": document_id, "role": role.value},
            )
        except StorageError as exc:
            raise StoreUnavailable(str(exc)) from exc

        fill = (
            update(ContractDocument)
            .where(
                ContractDocument.id == document_id,
                ContractDocument.owner_id == owner_id,
                ContractDocument.signing_unsigned_body.is_not(None),
                _signed_at_column(role).is_(None),
            )
            .values(
                {
                    f"{role.value}_signer_name": name,
                    f"{role.value}_signature_key": key,
                    f"{role.value}_signed_at": func.now(),
                }
            )
            .execution_options(synchronize_session=False)
        )
        recompute = (
            update(ContractDocument)
            .where(ContractDocument.id == document_id, ContractDocument.owner_id == owner_id)
            .values(signing_status=_STATUS_FROM_SLOTS)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self._db.execute(fill)
            if result.rowcount == 0:
                self._db.rollback()
                logger.info(
                    "Lost race for %s slot on contract %s; image %s left unreferenced",
                    role.value,
                    document_id,
                    key,
                )
                self._raise_for_rejected_fill(owner_id, document_id, role)
            self._db.execute(recompute)
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreUnavailable(f"could not record signature: {exc}") from exc

        record = self.load_signing_record(owner_id, document_id)
        logger.info(
            "Contract %s signed by %s; status=%s", document_id, role.value, record.status.value
        )
        return record

    def load_signing_record(self, owner_id: str, document_id: str) -> SigningRecord:
        try:
            doc = self._fetch(owner_id, document_id)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"could not load contract: {exc}") from exc
        if doc is None:
            raise NotFound(f"contract {document_id} not found")
        if doc.signing_unsigned_body is None:
            raise InvalidState(f"contract {document_id} has no signing record")

        record = SigningRecord(
            owner_id=doc.owner_id,
            document_id=doc.id,
            unsigned_body=doc.signing_unsigned_body,
            buyer_label=doc.buyer_label or "",
            publisher_label=doc.publisher_label or "",
            buyer=_slot_from(doc, SignerRole.buyer),
            publisher=_slot_from(doc, SignerRole.publisher),
        )
        if doc.signing_status != record.status.value:
            logger.warning(
                "Stored signing status %r for contract %s disagrees with slots (%s); using slots",
                doc.signing_status,
                doc.id,
                record.status.value,
            )
        return record

    def load_signature_images(
        self, record: SigningRecord
    ) -> tuple[Optional[bytes], Optional[bytes]]:
        """(buyer, publisher) image bytes; None for an empty slot."""
        images: list[Optional[bytes]] = []
        for slot in (record.buyer, record.publisher):
            if slot is None or not slot.image_key:
                images.append(None)
                continue
            try:
                data, _ = self._storage.get_bytes(self._bucket, slot.image_key)
            except StorageError as exc:
                raise StoreUnavailable(str(exc)) from exc
            images.append(data)
        return images[0], images[1]

    def _fetch(self, owner_id: str, document_id: str) -> Optional[ContractDocument]:
        return self._db.execute(
            select(ContractDocument)
            .where(ContractDocument.id == document_id, ContractDocument.owner_id == owner_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _raise_for_rejected_fill(self, owner_id: str, document_id: str, role: SignerRole) -> None:
        doc = self._fetch(owner_id, document_id)
        if doc is None:
            raise NotFound(f"contract {document_id} not found")
        if doc.signing_unsigned_body is None:
            raise InvalidState(f"contract {document_id} has no signing record")
        raise SlotAlreadySigned(document_id, role)


__all__ = [
    "InvalidSignature",
    "InvalidState",
    "NotFound",
    "SignatureSlot",
    "SignerRole",
    "SigningError",
    "SigningRecord",
    "SigningStore",
    "SlotAlreadySigned",
    "StoreUnavailable",
    "derive_status",
]
