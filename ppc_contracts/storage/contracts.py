"""Object storage interface and key layout.

Two buckets are used: signature images (``S3_BUCKET_SIGNATURES``) and archived
executed contracts (``S3_BUCKET_CONTRACTS``). Keys are namespaced by owner and
document so one owner's objects never share a prefix with another's.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable
from uuid import uuid4


class StorageError(Exception):
    """A storage call failed; ``op`` names the call, ``message`` the cause."""

    def __init__(self, op: str, bucket: str | None, key: str | None, message: str):
        self.op = op
        self.bucket = bucket
        self.key = key
        self.message = message
        location = f"{bucket or '?'}/{key}" if key else (bucket or "?")
        super().__init__(f"storage {op} {location}: {message}")


@runtime_checkable
class ObjectStorage(Protocol):
    def put_bytes(
        self,
        bucket: str,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        """Store ``data``; returns ``"<bucket>/<key>"``."""
        ...

    def get_bytes(self, bucket: str, key: str) -> tuple[bytes, Mapping[str, str]]:
        """Object body and response headers."""
        ...

    def exists(self, bucket: str, key: str) -> bool:
        ...

    def ensure_bucket(self, name: str) -> None:
        ...


@runtime_checkable
class Presigner(Protocol):
    """Temporary download URLs for executed contracts."""

    def presign_get(self, bucket: str, key: str, ttl_seconds: int = 900) -> str:
        ...


def signature_key(owner_id: str, document_id: str, role: str, ext: str = "png") -> str:
    # Fresh name per upload; a losing concurrent submit cannot overwrite the winner's image
    return f"{owner_id}/{document_id}/{role}-{uuid4().hex}.{ext}"


def executed_contract_key(owner_id: str, document_id: str) -> str:
    """Stable key, so re-archiving overwrites."""
    return f"{owner_id}/{document_id}/executed.html"


__all__ = [
    "ObjectStorage",
    "Presigner",
    "StorageError",
    "executed_contract_key",
    "signature_key",
]
