"""API request and response models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ppc_contracts.schemas.agreement import AgreementRequest


class PreviewResponse(BaseModel):
    contract_type: str
    variant: str
    effective_date: date
    body: str


class NegotiationNote(BaseModel):
    note: str
    author: Optional[str] = None
    created_at: Optional[str] = None


class NegotiationRequest(BaseModel):
    note: str = Field(min_length=1)
    author: Optional[str] = None


class ContractSummary(BaseModel):
    """Contract document without its body."""

    id: str
    contract_type: str
    status: str
    signing_status: Optional[str] = None
    effective_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ContractResponse(ContractSummary):
    request: AgreementRequest
    body: Optional[str] = None
    negotiation_notes: list[NegotiationNote] = []
    signing_links: dict[str, str] = {}


class ContractListResponse(BaseModel):
    """Paginated contract list response."""

    items: list[ContractSummary]
    total: int
    page: int
    page_size: int


class SignatureSlotView(BaseModel):
    signer_name: str
    signed_at: datetime


class SigningRecordResponse(BaseModel):
    document_id: str
    status: str
    buyer_label: str
    publisher_label: str
    buyer: Optional[SignatureSlotView] = None
    publisher: Optional[SignatureSlotView] = None
    unsigned_body: str


class SignatureSubmission(BaseModel):
    """Captured signature: raw base64 or a ``data:image/...;base64,`` URL."""

    signer_name: str
    signature_image: str


class ExecutedContractResponse(BaseModel):
    document_id: str
    url: str
