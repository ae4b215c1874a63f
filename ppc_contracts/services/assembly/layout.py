"""Markup scaffolding used by every contract renderer."""

from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ppc_contracts.schemas.agreement import PartyInfo
from ppc_contracts.services.assembly.formatting import (
    SIGNATURE_WIDTH_PX,
    long_date,
    signature_slot,
    text,
)

BUYER_SLOT = "buyer"
PUBLISHER_SLOT = "publisher"
BLANK_LINE = "______________________________"


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Inputs every renderer needs besides the request itself."""

    effective_date: date
    default_state: str
    buyer_signature: Optional[bytes] = None
    publisher_signature: Optional[bytes] = None


@dataclass(frozen=True, slots=True)
class Signatory:
    """One column of the signature block."""

    label: str
    organisation: str
    name: str
    title: str
    image: Optional[bytes]


def document(title: str, effective_date: date, *parts: str) -> str:
    return (
        '<div class="contract">'
        f'<h1 class="contract-title">{html.escape(title)}</h1>'
        f'<p class="effective-date">Effective Date: {long_date(effective_date)}</p>'
        + "".join(parts)
        + "</div>"
    )


def article(heading: str, *paragraphs: str) -> str:
    body = "".join(paragraphs)
    return f'<section class="article"><h2>{html.escape(heading)}</h2>{body}</section>'


def clause(heading: str, *paragraphs: str) -> str:
    body = "".join(f"<p>{p}</p>" if not p.startswith("<") else p for p in paragraphs)
    return f'<div class="clause"><h3>{html.escape(heading)}</h3>{body}</div>'


def table(rows: list[tuple[str, str]]) -> str:
    """Two-column exhibit table; values must already be escaped."""
    body = "".join(f"<tr><th>{html.escape(label)}</th><td>{value}</td></tr>" for label, value in rows)
    return f'<table class="exhibit">{body}</table>'


def party_details(label: str, party: PartyInfo) -> str:
    return (
        f'<div class="party"><h4>{html.escape(label)}</h4>'
        f"<p><strong>{text(party.company_name)}</strong>, a {text(party.entity_type)}</p>"
        f"<p>Address: {text(party.address)}</p>"
        f"<p>Email: {text(party.email)}</p>"
        f"<p>Phone: {text(party.phone)}</p>"
        "</div>"
    )


def party_signatory(label: str, party: PartyInfo, image: Optional[bytes]) -> Signatory:
    return Signatory(
        label=label,
        organisation=text(party.company_name),
        name=text(party.contact_name),
        title=text(party.title),
        image=image,
    )


def signature_block(intro: str, left: Signatory, right: Signatory) -> str:
    """Two signature columns; the left one is the buyer-side slot."""
    columns = _signature_column(left, BUYER_SLOT) + _signature_column(right, PUBLISHER_SLOT)
    return (
        '<section class="signatures">'
        f"<p>{intro}</p>"
        f'<div class="signature-columns">{columns}</div>'
        "</section>"
    )


def signature_line(kind: str, slot: str, value: Optional[str] = None) -> str:
    """Fixed-width ``By``/``Date`` entry; a blank rule until the slot is signed."""
    style = f"display:inline-block;width:{SIGNATURE_WIDTH_PX}px;"
    return f'<span class="signed-{kind}" style="{style}" data-slot="{slot}">{value or BLANK_LINE}</span>'


def signed_timestamp(value: datetime) -> str:
    return f"{long_date(value.date())} {value:%H:%M} UTC"


def fill_signature(
    body: str,
    slot: str,
    label: str,
    image: bytes,
    signer_name: str,
    signed_at: datetime,
) -> str:
    """Write one captured signature into the stored body's empty slot markup."""
    filled = (
        (signature_slot(None, label, slot), signature_slot(image, label, slot)),
        (signature_line("by", slot), signature_line("by", slot, html.escape(signer_name))),
        (signature_line("on", slot), signature_line("on", slot, signed_timestamp(signed_at))),
    )
    for blank, signed in filled:
        body = body.replace(blank, signed, 1)
    return body


def _signature_column(signatory: Signatory, slot: str) -> str:
    return (
        '<div class="signature-column">'
        f"<h4>{html.escape(signatory.label.upper())}</h4>"
        f"<p>{signatory.organisation}</p>"
        f"{signature_slot(signatory.image, signatory.label, slot)}"
        f"<p>By: {signature_line('by', slot)}</p>"
        f"<p>Name: {signatory.name}</p>"
        f"<p>Title: {signatory.title}</p>"
        f"<p>Date: {signature_line('on', slot)}</p>"
        "</div>"
    )
