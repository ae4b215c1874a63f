"""Repository helpers for contract documents and their lifecycle."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ppc_contracts.db.models import ContractDocument, ContractStatus
from ppc_contracts.schemas.agreement import AgreementRequest


class InvalidTransition(Exception):
    """Lifecycle operation not allowed from the document's current status."""

    def __init__(self, document_id: str, status: ContractStatus, operation: str):
        self.document_id = document_id
        self.status = status
        self.operation = operation
        super().__init__(f"cannot {operation} contract {document_id} in status {status.value}")


_GENERATE_FROM = {ContractStatus.draft, ContractStatus.generated, ContractStatus.negotiation_requested}
_NEGOTIATE_FROM = {ContractStatus.generated, ContractStatus.negotiation_requested}
_FINALIZE_FROM = {ContractStatus.generated, ContractStatus.negotiation_requested}


def _has_signatures(doc: ContractDocument) -> bool:
    return doc.buyer_signed_at is not None or doc.publisher_signed_at is not None


def create_contract(
    db: Session,
    *,
    owner_id: str,
    request: AgreementRequest,
) -> ContractDocument:
    doc = ContractDocument(
        id=str(uuid4()),
        owner_id=owner_id,
        contract_type=request.contract_type.value,
        request_snapshot=request.model_dump(mode="json", by_alias=True),
        effective_date=request.effective_date,
        status=ContractStatus.draft,
        negotiation_notes=[],
    )
    db.add(doc)
    db.flush()
    db.refresh(doc)
    return doc


def get_contract(db: Session, owner_id: str, document_id: str) -> Optional[ContractDocument]:
    return db.execute(
        select(ContractDocument).where(
            ContractDocument.id == document_id,
            ContractDocument.owner_id == owner_id,
        )
    ).scalar_one_or_none()


def list_contracts(
    db: Session,
    owner_id: str,
    *,
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[ContractDocument], int]:
    """Owner's contracts, newest first, with the total count."""
    total = db.execute(
        select(func.count(ContractDocument.id)).where(ContractDocument.owner_id == owner_id)
    ).scalar() or 0
    if total == 0:
        return [], 0
    rows = db.execute(
        select(ContractDocument)
        .where(ContractDocument.owner_id == owner_id)
        .order_by(ContractDocument.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).scalars().all()
    return list(rows), total


def update_request(db: Session, doc: ContractDocument, request: AgreementRequest) -> ContractDocument:
    """Replace the wizard snapshot; the body is rebuilt on the next generate.

    Refused once finalized or once either party has signed.
    """
    if doc.status is ContractStatus.finalized:
        raise InvalidTransition(doc.id, doc.status, "edit")
    if _has_signatures(doc):
        raise InvalidTransition(doc.id, doc.status, "edit signed")
    doc.contract_type = request.contract_type.value
    doc.request_snapshot = request.model_dump(mode="json", by_alias=True)
    doc.effective_date = request.effective_date or doc.effective_date
    db.flush()
    return doc


def generate_contract(
    db: Session,
    doc: ContractDocument,
    *,
    body: str,
    effective_date: date,
) -> ContractDocument:
    """Store the assembled body. Not allowed once anyone has signed."""
    if doc.status not in _GENERATE_FROM:
        raise InvalidTransition(doc.id, doc.status, "generate")
    if _has_signatures(doc):
        raise InvalidTransition(doc.id, doc.status, "regenerate signed")
    doc.body = body
    doc.effective_date = effective_date
    doc.status = ContractStatus.generated
    db.flush()
    return doc


def add_negotiation_note(
    db: Session,
    doc: ContractDocument,
    *,
    note: str,
    author: Optional[str] = None,
) -> ContractDocument:
    if doc.status not in _NEGOTIATE_FROM:
        raise InvalidTransition(doc.id, doc.status, "request negotiation on")
    entry = {
        "note": note,
        "author": author,
        "created_at": datetime.utcnow().isoformat(timespec="seconds"),
    }
    # Reassign so the JSON column is marked dirty
    doc.negotiation_notes = [*(doc.negotiation_notes or []), entry]
    doc.status = ContractStatus.negotiation_requested
    db.flush()
    return doc


def finalize_contract(db: Session, doc: ContractDocument) -> ContractDocument:
    if doc.status not in _FINALIZE_FROM:
        raise InvalidTransition(doc.id, doc.status, "finalize")
    doc.status = ContractStatus.finalized
    db.flush()
    return doc


def delete_contract(db: Session, owner_id: str, document_id: str) -> bool:
    doc = get_contract(db, owner_id, document_id)
    if doc is None:
        return False
    if doc.status is ContractStatus.finalized:
        raise InvalidTransition(doc.id, doc.status, "delete")
    db.delete(doc)
    db.flush()
    return True
