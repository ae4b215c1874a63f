from __future__ import annotations

"""SQLAlchemy models for contract documents and their embedded signing record."""

import enum
from datetime import date, datetime
from uuid import uuid4
from typing import Optional

from sqlalchemy import JSON, Date, DateTime, Enum as SAEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ppc_contracts.db.session import Base


class ContractStatus(str, enum.Enum):
    draft = "draft"
    generated = "generated"
    negotiation_requested = "negotiation_requested"
    finalized = "finalized"


class SigningStatus(str, enum.Enum):
    awaiting_buyer = "awaiting_buyer"
    awaiting_publisher = "awaiting_publisher"
    fully_signed = "fully_signed"


class ContractDocument(Base):
    """A generated agreement owned by one user.

    The ``signing_*`` / ``buyer_*`` / ``publisher_*`` columns form the embedded
    signing record. It exists once ``signing_unsigned_body`` is set; each
    signature slot is filled by its own single-row UPDATE.
    """

    __tablename__ = "contract_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    contract_type: Mapped[str] = mapped_column(String(40), nullable=False)  # e.g., "CPL", "Employment"
    request_snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)  # AgreementRequest JSON
    effective_date: Mapped[Optional[date]] = mapped_column(Date)
    body: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[ContractStatus] = mapped_column(
        SAEnum(ContractStatus), nullable=False, default=ContractStatus.draft
    )
    negotiation_notes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Signing record
    signing_unsigned_body: Mapped[Optional[str]] = mapped_column(Text)
    signing_status: Mapped[Optional[str]] = mapped_column(String(32))  # derived, see SigningStatus
    buyer_label: Mapped[Optional[str]] = mapped_column(String(64))
    publisher_label: Mapped[Optional[str]] = mapped_column(String(64))
    buyer_signer_name: Mapped[Optional[str]] = mapped_column(String(255))
    buyer_signature_key: Mapped[Optional[str]] = mapped_column(String(512))
    buyer_signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    publisher_signer_name: Mapped[Optional[str]] = mapped_column(String(255))
    publisher_signature_key: Mapped[Optional[str]] = mapped_column(String(512))
    publisher_signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("idx_contract_documents_owner_created", "owner_id", "created_at"),
    )
