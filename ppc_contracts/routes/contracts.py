"""Contract authoring endpoints: preview, drafts, generation and lifecycle."""

import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from ppc_contracts.core.config import settings
from ppc_contracts.db import repository
from ppc_contracts.db.models import ContractDocument
from ppc_contracts.db.repository import InvalidTransition
from ppc_contracts.db.session import get_db_dependency
from ppc_contracts.deps import get_owner_id, get_storage
from ppc_contracts.routes.errors import http_error
from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.schemas.api import (
    ContractListResponse,
    ContractResponse,
    ContractSummary,
    ExecutedContractResponse,
    NegotiationRequest,
    PreviewResponse,
)
from ppc_contracts.services.assembly import party_labels, select_variant
from ppc_contracts.services.contracts import render_contract, request_from_snapshot
from ppc_contracts.services.dispatch import start_signing_notifications
from ppc_contracts.services.links import signing_links
from ppc_contracts.services.signing import SigningError, SigningStore
from ppc_contracts.storage.contracts import StorageError, executed_contract_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contracts", tags=["contracts"])


def _variant_name(request: AgreementRequest) -> str:
    variant = select_variant(request)
    if variant.subtype is None:
        return variant.family.value
    return f"{variant.family.value}:{variant.subtype.value}"


def _build_summary(doc: ContractDocument) -> ContractSummary:
    return ContractSummary(
        id=doc.id,
        contract_type=doc.contract_type,
        status=doc.status.value,
        signing_status=doc.signing_status,
        effective_date=doc.effective_date,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def _build_contract_response(doc: ContractDocument) -> ContractResponse:
    links = {}
    if doc.signing_unsigned_body is not None:
        links = signing_links(doc.owner_id, doc.id)
    return ContractResponse(
        id=doc.id,
        contract_type=doc.contract_type,
        status=doc.status.value,
        signing_status=doc.signing_status,
        effective_date=doc.effective_date,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
        request=request_from_snapshot(doc.request_snapshot),
        body=doc.body,
        negotiation_notes=doc.negotiation_notes or [],
        signing_links=links,
    )


def _load(db: Session, owner_id: str, document_id: str) -> ContractDocument:
    doc = repository.get_contract(db, owner_id, document_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Contract not found")
    return doc


@router.post("/preview", response_model=PreviewResponse)
def preview(body: AgreementRequest):
    """Assemble without persisting anything."""
    effective_date = body.effective_date or date.today()
    return PreviewResponse(
        contract_type=body.contract_type.value,
        variant=_variant_name(body),
        effective_date=effective_date,
        body=render_contract(body, effective_date),
    )


@router.post("", response_model=ContractResponse, status_code=201)
def create_draft(
    body: AgreementRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    doc = repository.create_contract(db, owner_id=owner_id, request=body)
    db.commit()
    logger.info("Created draft contract %s (%s) for owner %s", doc.id, doc.contract_type, owner_id)
    return _build_contract_response(doc)


@router.get("", response_model=ContractListResponse)
def list_contracts(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    """Owner's contracts, newest first."""
    rows, total = repository.list_contracts(db, owner_id, page=page, page_size=page_size)
    return ContractListResponse(
        items=[_build_summary(doc) for doc in rows],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{document_id}", response_model=ContractResponse)
def get_contract(
    document_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    return _build_contract_response(_load(db, owner_id, document_id))


@router.put("/{document_id}", response_model=ContractResponse)
def update_contract(
    document_id: str,
    body: AgreementRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    doc = _load(db, owner_id, document_id)
    try:
        repository.update_request(db, doc, body)
    except InvalidTransition as exc:
        raise http_error(exc) from exc
    db.commit()
    return _build_contract_response(doc)


@router.delete("/{document_id}", status_code=204)
def delete_contract(
    document_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    try:
        deleted = repository.delete_contract(db, owner_id, document_id)
    except InvalidTransition as exc:
        raise http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Contract not found")
    db.commit()
    return Response(status_code=204)


@router.post("/{document_id}/generate", response_model=ContractResponse)
def generate(
    document_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
    storage=Depends(get_storage),
):
    """Assemble the body, open it for signing and notify the signers."""
    doc = _load(db, owner_id, document_id)
    agreement = request_from_snapshot(doc.request_snapshot)
    effective_date = agreement.effective_date or date.today()
    body = render_contract(agreement, effective_date)

    try:
        repository.generate_contract(db, doc, body=body, effective_date=effective_date)
        record = SigningStore(db, storage).create_signing_record(
            owner_id, document_id, body, party_labels(agreement)
        )
    except (InvalidTransition, SigningError) as exc:
        db.rollback()
        raise http_error(exc) from exc

    logger.info("Generated contract %s (%d chars)", document_id, len(body))
    background_tasks.add_task(
        start_signing_notifications,
        getattr(request.app.state, "temporal", None),
        owner_id,
        document_id,
        record.status.value,
        record.signed_roles,
    )
    return _build_contract_response(doc)


@router.post("/{document_id}/negotiation", response_model=ContractResponse)
def request_negotiation(
    document_id: str,
    body: NegotiationRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    doc = _load(db, owner_id, document_id)
    try:
        repository.add_negotiation_note(db, doc, note=body.note, author=body.author)
    except InvalidTransition as exc:
        raise http_error(exc) from exc
    db.commit()
    return _build_contract_response(doc)


@router.post("/{document_id}/finalize", response_model=ContractResponse)
def finalize(
    document_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
):
    doc = _load(db, owner_id, document_id)
    try:
        repository.finalize_contract(db, doc)
    except InvalidTransition as exc:
        raise http_error(exc) from exc
    db.commit()
    logger.info("Finalized contract %s", document_id)
    return _build_contract_response(doc)


@router.get("/{document_id}/executed", response_model=ExecutedContractResponse)
def executed_contract(
    document_id: str,
    ttl_seconds: int = Query(900, ge=60, le=86400),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db_dependency),
    storage=Depends(get_storage),
):
    """Temporary download URL for the archived, fully signed contract."""
    _load(db, owner_id, document_id)
    key = executed_contract_key(owner_id, document_id)
    try:
        if not storage.exists(settings.S3_BUCKET_CONTRACTS, key):
            raise HTTPException(status_code=404, detail="Executed contract not archived yet")
        url = storage.presign_get(settings.S3_BUCKET_CONTRACTS, key, ttl_seconds=ttl_seconds)
    except StorageError as exc:
        raise http_error(exc) from exc
    return ExecutedContractResponse(document_id=document_id, url=url)
