"""Shared dependencies for FastAPI routes and workers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Header, HTTPException

if TYPE_CHECKING:
    from ppc_contracts.storage.minio_impl import MinioStorage

_storage: "MinioStorage | None" = None


def get_storage() -> "MinioStorage":
    """Storage singleton, built on first use so imports never touch MinIO."""
    global _storage
    if _storage is None:
        from ppc_contracts.storage.factory import build_storage

        _storage = build_storage()
    return _storage


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """Authenticated owner, supplied by the fronting gateway."""
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-Owner-Id header")
    return x_owner_id.strip()


__all__ = ["get_owner_id", "get_storage"]
