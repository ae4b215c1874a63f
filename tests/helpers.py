"""Shared test data and doubles."""

from datetime import date
from typing import Mapping

from ppc_contracts.storage.contracts import StorageError

# Smallest valid PNG: 1x1 transparent pixel
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082"
)
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16

EFFECTIVE_DATE = date(2026, 3, 1)


class InMemoryStorage:
    """ObjectStorage double that keeps objects in a dict."""

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str | None] = {}
        self.fail_with: Exception | None = None

    def put_bytes(
        self,
        bucket: str,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.objects[(bucket, key)] = data
        self.content_types[(bucket, key)] = content_type
        return f"{bucket}/{key}"

    def get_bytes(self, bucket: str, key: str) -> tuple[bytes, Mapping[str, str]]:
        if self.fail_with is not None:
            raise self.fail_with
        try:
            return self.objects[(bucket, key)], {}
        except KeyError:
            raise StorageError("get", bucket, key, "NoSuchKey") from None

    def exists(self, bucket: str, key: str) -> bool:
        return (bucket, key) in self.objects

    def ensure_bucket(self, name: str) -> None:
        pass

    def presign_get(self, bucket: str, key: str, ttl_seconds: int = 900) -> str:
        return f"http://minio.test/{bucket}/{key}?ttl={ttl_seconds}"
