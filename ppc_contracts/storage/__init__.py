"""Object storage for signature images and executed contracts."""

from ppc_contracts.storage.contracts import (
    ObjectStorage,
    Presigner,
    StorageError,
    executed_contract_key,
    signature_key,
)
from ppc_contracts.storage.minio_impl import MinioStorage

__all__ = [
    "ObjectStorage",
    "Presigner",
    "StorageError",
    "MinioStorage",
    "executed_contract_key",
    "signature_key",
]
