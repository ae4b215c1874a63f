"""Glue between persisted contract documents and the assembler."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ppc_contracts.core.config import settings
from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.services.assembly import assemble
from ppc_contracts.services.assembly.layout import fill_signature
from ppc_contracts.services.signing import SignerRole, SigningRecord


def request_from_snapshot(snapshot: dict) -> AgreementRequest:
    return AgreementRequest.model_validate(snapshot or {})


def render_contract(
    request: AgreementRequest,
    effective_date: date,
    buyer_signature: Optional[bytes] = None,
    publisher_signature: Optional[bytes] = None,
) -> str:
    """Assemble with the configured fallback governing-law state."""
    return assemble(
        request,
        effective_date,
        buyer_signature,
        publisher_signature,
        default_state=settings.DEFAULT_GOVERNING_STATE,
    )


def render_signed_document(
    record: SigningRecord,
    buyer_signature: Optional[bytes],
    publisher_signature: Optional[bytes],
) -> str:
    """The body the parties were asked to sign, with captured signatures filled in.

    Only the stored unsigned body is used; the current request snapshot and
    settings play no part.
    """
    body = record.unsigned_body
    for role, image in ((SignerRole.buyer, buyer_signature), (SignerRole.publisher, publisher_signature)):
        slot = record.slot(role)
        if slot is None or not image:
            continue
        body = fill_signature(body, role.value, record.label(role), image, slot.signer_name, slot.signed_at)
    return body


__all__ = ["render_contract", "render_signed_document", "request_from_snapshot"]
