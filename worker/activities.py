"""Temporal Activities for the signing notification workflow.

- prepare_notifications: load the signing record and compose the emails due
- send_email: deliver one composed email through Resend
- archive_executed_contract: store the fully signed contract in MinIO
"""

from __future__ import annotations

import logging
from typing import Any

from temporalio import activity

from ppc_contracts.core.config import settings
from ppc_contracts.db.models import SigningStatus
from ppc_contracts.db.repository import get_contract
from ppc_contracts.db.session import get_sync_db
from ppc_contracts.deps import get_storage
from ppc_contracts.services.contracts import render_signed_document, request_from_snapshot
from ppc_contracts.services.notifications import compose_notifications
from ppc_contracts.services.signing import InvalidState, NotFound, SigningStore
from ppc_contracts.storage.contracts import executed_contract_key
from worker.email_sender import send_email as deliver_email

logger = logging.getLogger(__name__)


@activity.defn
def prepare_notifications(owner_id: str, document_id: str) -> dict[str, Any]:
    """Compose the emails due for the contract's current signing state.

    Returns:
        Dict with 'status' (signing status value) and 'messages' (list of
        dicts with 'to', 'subject' and 'html').

    Raises:
        NotFound: The contract no longer exists.
        InvalidState: The contract has no signing record.
    """
    with get_sync_db() as db:
        record = SigningStore(db, get_storage()).load_signing_record(owner_id, document_id)
        doc = get_contract(db, owner_id, document_id)
        if doc is None:
            raise NotFound(f"contract {document_id} not found")
        request = request_from_snapshot(doc.request_snapshot)

    messages = compose_notifications(request, record)
    logger.info(
        "Prepared %d notification(s) for contract %s (status=%s)",
        len(messages),
        document_id,
        record.status.value,
    )
    return {"status": record.status.value, "messages": messages}


@activity.defn
def send_email(message: dict[str, Any]) -> str:
    """Send one composed message; returns the provider message id.

    Raises:
        EmailSendError: Let the workflow decide on retries.
    """
    result = deliver_email(message.get("to"), message.get("subject"), message.get("html"))
    return str(result.get("id", ""))


@activity.defn
def archive_executed_contract(owner_id: str, document_id: str) -> str:
    """Render the signed contract and store it in the contracts bucket.

    Overwrites the same key on retry.

    Returns:
        Object key of the archived HTML.

    Raises:
        InvalidState: The contract is not fully signed.
        StoreUnavailable: Database or MinIO failure.
    """
    storage = get_storage()
    with get_sync_db() as db:
        store = SigningStore(db, storage)
        record = store.load_signing_record(owner_id, document_id)
        if record.status is not SigningStatus.fully_signed:
            raise InvalidState(f"contract {document_id} is not fully signed")
        buyer_image, publisher_image = store.load_signature_images(record)

    body = render_signed_document(record, buyer_image, publisher_image)

    key = executed_contract_key(owner_id, document_id)
    storage.put_bytes(
        settings.S3_BUCKET_CONTRACTS,
        key,
        body.encode("utf-8"),
        content_type="text/html; charset=utf-8",
        metadata={"document-id": document_id},
    )
    logger.info("Archived executed contract: %s/%s", settings.S3_BUCKET_CONTRACTS, key)
    return key


__all__ = ["archive_executed_contract", "prepare_notifications", "send_email"]
