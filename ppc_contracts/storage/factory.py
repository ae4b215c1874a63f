"""Build the storage backend from application settings."""

from __future__ import annotations

from urllib.parse import urlparse

from minio import Minio

from ppc_contracts.core.config import settings
from ppc_contracts.storage.minio_impl import MinioStorage


def _normalize_endpoint(endpoint: str) -> tuple[str, bool]:
    """Return ``(host:port, secure)`` for a MinIO endpoint URL."""
    parsed = urlparse(endpoint)
    secure = parsed.scheme == "https"
    host = parsed.netloc or parsed.path.rstrip("/")
    return host, secure


def build_minio_client() -> Minio:
    host, secure = _normalize_endpoint(settings.S3_ENDPOINT)
    return Minio(
        host,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        secure=secure,
    )


def build_storage() -> MinioStorage:
    """MinioStorage with the signatures and contracts buckets in place."""
    storage = MinioStorage(build_minio_client())
    storage.ensure_bucket(settings.S3_BUCKET_SIGNATURES)
    storage.ensure_bucket(settings.S3_BUCKET_CONTRACTS)
    return storage


__all__ = ["build_minio_client", "build_storage"]
