"""MinIO adapter for signature images and executed contracts."""

from __future__ import annotations

import io
from datetime import timedelta
from typing import Callable, Mapping, TypeVar

from minio import Minio
from minio.error import S3Error

from ppc_contracts.storage.contracts import ObjectStorage, Presigner, StorageError

T = TypeVar("T")

# S3 error codes meaning "no such object"
_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "ResourceNotFound"})


class MinioStorage(ObjectStorage, Presigner):
    """Every client failure surfaces as ``StorageError``."""

    def __init__(self, client: Minio):
        self._client = client

    def _call(self, op: str, bucket: str | None, key: str | None, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(op=op, bucket=bucket, key=key, message=str(exc)) from exc

    def put_bytes(
        self,
        bucket: str,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        self._call(
            "put",
            bucket,
            key,
            lambda: self._client.put_object(
                bucket_name=bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type or "application/octet-stream",
                metadata=dict(metadata) if metadata else None,
            ),
        )
        return f"{bucket}/{key}"

    def get_bytes(self, bucket: str, key: str) -> tuple[bytes, Mapping[str, str]]:
        def read() -> tuple[bytes, Mapping[str, str]]:
            response = self._client.get_object(bucket, key)
            try:
                return response.read(), response.headers or {}
            finally:
                response.close()
                response.release_conn()

        return self._call("get", bucket, key, read)

    def exists(self, bucket: str, key: str) -> bool:
        def stat() -> bool:
            try:
                self._client.stat_object(bucket, key)
            except S3Error as exc:
                if exc.code in _MISSING_CODES:
                    return False
                raise
            return True

        return self._call("stat", bucket, key, stat)

    def ensure_bucket(self, name: str) -> None:
        def ensure() -> None:
            if not self._client.bucket_exists(name):
                self._client.make_bucket(name)

        self._call("ensure_bucket", name, None, ensure)

    def presign_get(self, bucket: str, key: str, ttl_seconds: int = 900) -> str:
        return self._call(
            "presign_get",
            bucket,
            key,
            lambda: self._client.get_presigned_url(
                method="GET",
                bucket_name=bucket,
                object_name=key,
                expires=timedelta(seconds=ttl_seconds),
            ),
        )


__all__ = ["MinioStorage"]
