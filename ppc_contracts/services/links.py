"""Shareable signing links.

A link token is the unpadded URL-safe base64 of ``"<owner_id>:<document_id>"``.
Links carry no expiry; possession of the link is the capability to sign.
"""

from __future__ import annotations

import base64
import binascii
from urllib.parse import urlencode

from ppc_contracts.core.config import settings
from ppc_contracts.services.signing import NotFound, SignerRole


def encode_token(owner_id: str, document_id: str) -> str:
    raw = f"{owner_id}:{document_id}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_token(token: str) -> tuple[str, str]:
    """Return ``(owner_id, document_id)``; a malformed token is treated as not found."""
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise NotFound("malformed signing link") from exc
    # Document ids are uuids, so the last colon separates the two parts
    owner_id, sep, document_id = raw.rpartition(":")
    if not sep or not owner_id or not document_id:
        raise NotFound("malformed signing link")
    return owner_id, document_id


def build_signing_link(
    owner_id: str,
    document_id: str,
    role: SignerRole,
    *,
    base_url: str | None = None,
) -> str:
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    query = urlencode({"contract": encode_token(owner_id, document_id), "role": SignerRole(role).value})
    return f"{base}/sign?{query}"


def signing_links(owner_id: str, document_id: str, *, base_url: str | None = None) -> dict[str, str]:
    return {
        role.value: build_signing_link(owner_id, document_id, role, base_url=base_url)
        for role in SignerRole
    }


__all__ = ["build_signing_link", "decode_token", "encode_token", "signing_links"]
