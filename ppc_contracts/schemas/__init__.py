"""Wizard input and API schemas."""

from ppc_contracts.schemas.agreement import (
    AcaSubType,
    AgreementRequest,
    CampaignSubType,
    ContractType,
    MemberInfo,
    PartyInfo,
)

__all__ = [
    "AcaSubType",
    "AgreementRequest",
    "CampaignSubType",
    "ContractType",
    "MemberInfo",
    "PartyInfo",
]
