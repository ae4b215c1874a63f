"""Email content for signing requests and executed contracts."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Optional

from ppc_contracts.db.models import SigningStatus
from ppc_contracts.schemas.agreement import AgreementRequest, ContractType
from ppc_contracts.services.links import build_signing_link
from ppc_contracts.services.signing import SignerRole, SigningRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Contact:
    name: str
    email: Optional[str]


def party_contacts(request: AgreementRequest) -> dict[SignerRole, Contact]:
    """Name and email address for each signer of ``request``."""
    if request.contract_type is ContractType.llc_operating_agreement:
        buyer_side, publisher_side = request.llc_investor, request.llc_managing_member
        return {
            SignerRole.buyer: Contact(buyer_side.name or "", buyer_side.email),
            SignerRole.publisher: Contact(publisher_side.name or "", publisher_side.email),
        }
    contacts = {}
    for role, party in ((SignerRole.buyer, request.buyer), (SignerRole.publisher, request.publisher)):
        contacts[role] = Contact(party.contact_name or party.company_name or "", party.email)
    return contacts


def _greeting(name: str) -> str:
    return f"Hello {html.escape(name)}," if name.strip() else "Hello,"


def signing_request_email(contact: Contact, label: str, link: str) -> dict:
    body = (
        f"<p>{_greeting(contact.name)}</p>"
        f"<p>A contract is ready for your signature as <strong>{html.escape(label)}</strong>.</p>"
        f'<p><a href="{html.escape(link)}">Review and sign the contract</a></p>'
        "<p>This link is unique to you. Please do not forward it.</p>"
    )
    return {"to": [contact.email], "subject": f"Signature requested: {label}", "html": body}


def executed_email(contact: Contact, link: str) -> dict:
    body = (
        f"<p>{_greeting(contact.name)}</p>"
        "<p>All parties have signed. The executed contract is available at the link below.</p>"
        f'<p><a href="{html.escape(link)}">View the executed contract</a></p>'
    )
    return {"to": [contact.email], "subject": "Contract fully executed", "html": body}


def compose_notifications(
    request: AgreementRequest,
    record: SigningRecord,
    *,
    base_url: Optional[str] = None,
) -> list[dict]:
    """Messages due for ``record``'s current state.

    Every party with an empty slot is asked to sign; once fully signed every
    party is told so. Parties without an email address are skipped.
    """
    contacts = party_contacts(request)
    fully_signed = record.status is SigningStatus.fully_signed
    messages = []
    for role in SignerRole:
        contact = contacts[role]
        if not contact.email:
            logger.info("No email for %s on contract %s; skipping", role.value, record.document_id)
            continue
        link = build_signing_link(record.owner_id, record.document_id, role, base_url=base_url)
        if fully_signed:
            messages.append(executed_email(contact, link))
        elif record.slot(role) is None:
            messages.append(signing_request_email(contact, record.label(role), link))
    return messages


__all__ = [
    "Contact",
    "compose_notifications",
    "executed_email",
    "party_contacts",
    "signing_request_email",
]
