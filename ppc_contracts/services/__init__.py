"""Business logic services."""

from ppc_contracts.services.assembly import assemble, party_labels, select_variant
from ppc_contracts.services.links import build_signing_link, decode_token, encode_token, signing_links
from ppc_contracts.services.signing import (
    InvalidSignature,
    InvalidState,
    NotFound,
    SignerRole,
    SigningError,
    SigningRecord,
    SigningStore,
    SlotAlreadySigned,
    StoreUnavailable,
)

__all__ = [
    "InvalidSignature",
    "InvalidState",
    "NotFound",
    "SignerRole",
    "SigningError",
    "SigningRecord",
    "SigningStore",
    "SlotAlreadySigned",
    "StoreUnavailable",
    "assemble",
    "build_signing_link",
    "decode_token",
    "encode_token",
    "party_labels",
    "select_variant",
    "signing_links",
]
