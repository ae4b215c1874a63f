"""Public signing endpoints, addressed by the shareable link token."""

import base64
import binascii
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ppc_contracts.core.config import settings
from ppc_contracts.db.session import get_db_dependency
from ppc_contracts.deps import get_storage
from ppc_contracts.routes.errors import http_error
from ppc_contracts.schemas.api import (
    SignatureSlotView,
    SignatureSubmission,
    SigningRecordResponse,
)
from ppc_contracts.services.contracts import render_signed_document
from ppc_contracts.services.dispatch import start_signing_notifications
from ppc_contracts.services.links import decode_token
from ppc_contracts.services.signing import (
    InvalidSignature,
    SignatureSlot,
    SignerRole,
    SigningError,
    SigningRecord,
    SigningStore,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sign", tags=["signing"])


def _slot_view(slot: SignatureSlot | None) -> SignatureSlotView | None:
    if slot is None:
        return None
    return SignatureSlotView(signer_name=slot.signer_name, signed_at=slot.signed_at)


def _build_record_response(record: SigningRecord) -> SigningRecordResponse:
    return SigningRecordResponse(
        document_id=record.document_id,
        status=record.status.value,
        buyer_label=record.buyer_label,
        publisher_label=record.publisher_label,
        buyer=_slot_view(record.buyer),
        publisher=_slot_view(record.publisher),
        unsigned_body=record.unsigned_body,
    )


def decode_signature_image(value: str) -> bytes:
    """Bytes of a base64 image, accepting an optional ``data:`` URL prefix."""
    payload = (value or "").strip()
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")
    if not payload:
        raise InvalidSignature("signature image is required")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSignature("signature image is not valid base64") from exc


@router.get("/{token}", response_model=SigningRecordResponse)
def get_signing_record(
    token: str,
    db: Session = Depends(get_db_dependency),
    storage=Depends(get_storage),
):
    try:
        owner_id, document_id = decode_token(token)
        record = SigningStore(db, storage).load_signing_record(owner_id, document_id)
    except SigningError as exc:
        raise http_error(exc) from exc
    return _build_record_response(record)


@router.post("/{token}/{role}", response_model=SigningRecordResponse)
def submit_signature(
    token: str,
    role: SignerRole,
    body: SignatureSubmission,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db_dependency),
    storage=Depends(get_storage),
):
    """Fill one signature slot. Each slot accepts exactly one submission."""
    try:
        owner_id, document_id = decode_token(token)
        image = decode_signature_image(body.signature_image)
        if len(image) > settings.MAX_SIGNATURE_SIZE_KB * 1024:
            raise HTTPException(
                status_code=413,
                detail=f"Signature image exceeds {settings.MAX_SIGNATURE_SIZE_KB}KB limit",
            )
        record = SigningStore(db, storage).submit_signature(
            owner_id, document_id, role, body.signer_name, image
        )
    except SigningError as exc:
        raise http_error(exc) from exc

    background_tasks.add_task(
        start_signing_notifications,
        getattr(request.app.state, "temporal", None),
        owner_id,
        document_id,
        record.status.value,
        record.signed_roles,
    )
    return _build_record_response(record)


@router.get("/{token}/document", response_class=HTMLResponse)
def signed_document(
    token: str,
    db: Session = Depends(get_db_dependency),
    storage=Depends(get_storage),
):
    """Contract body as generated, with whatever signatures have been captured so far."""
    try:
        owner_id, document_id = decode_token(token)
        store = SigningStore(db, storage)
        record = store.load_signing_record(owner_id, document_id)
        buyer_image, publisher_image = store.load_signature_images(record)
    except SigningError as exc:
        raise http_error(exc) from exc

    return HTMLResponse(render_signed_document(record, buyer_image, publisher_image))
