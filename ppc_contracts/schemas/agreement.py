"""Agreement request models (wizard form state).

The wizard posts camelCase JSON; attributes are snake_case. Every field is
optional: completeness is enforced by the wizard, and the assembler renders a
placeholder for anything left empty.
"""

import enum
from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Monetary and numeric inputs arrive as numbers or free text from the form
Amount = Optional[Union[float, str]]
Count = Optional[Union[int, str]]


class ContractType(str, enum.Enum):
    pay_per_call = "PayPerCall"
    cpl = "CPL"
    cpa = "CPA"
    aca_health = "ACAHealth"
    employment = "Employment"
    llc_operating_agreement = "LLCOperatingAgreement"


class CampaignSubType(str, enum.Enum):
    cpl = "CPL"
    cpa = "CPA"


class AcaSubType(str, enum.Enum):
    cpl = "CPL"
    cpa = "CPA"
    partnership = "Partnership"


class _WizardModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _coerce_list(value):
    """Accept null, a newline/comma separated string, or a list."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.replace(",", "\n").splitlines()
        return [p.strip() for p in parts if p.strip()]
    return value


class PartyInfo(_WizardModel):
    """A commercial party (buyer/publisher, employer/employee)."""

    company_name: Optional[str] = None
    entity_type: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_name: Optional[str] = None
    title: Optional[str] = None


class MemberInfo(_WizardModel):
    """An LLC member (investor, managing member or additional member)."""

    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    capital_contribution: Amount = None
    ownership_percentage: Amount = None


class AgreementRequest(_WizardModel):
    """Complete wizard state for one agreement."""

    contract_type: ContractType = ContractType.pay_per_call
    vertical: Optional[str] = None
    campaign_sub_type: Optional[CampaignSubType] = None
    effective_date: Optional[date] = None

    buyer: PartyInfo = Field(default_factory=PartyInfo)
    publisher: PartyInfo = Field(default_factory=PartyInfo)

    # Pay-per-call
    payout: Amount = None
    buffer_time: Count = None
    billing_cycle: Optional[str] = None
    payment_terms: Count = None
    chargeback_period: Count = None
    daily_call_cap: Count = None
    hours_of_operation: Optional[str] = None
    targeted_states: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    datapass_fields: list[str] = Field(default_factory=list)
    traffic_sources: list[str] = Field(default_factory=list)
    duplicate_window: Count = None
    termination_notice: Count = None

    # ACA Health
    aca_sub_type: Optional[AcaSubType] = None
    aca_cpl_payout: Amount = None
    aca_cpl_buffer_time: Count = None
    aca_cpa_payout: Amount = None
    aca_cpa_chargeback_period: Count = None
    aca_enrollment_window: Optional[str] = None
    aca_partnership_agent_fee: Amount = None
    aca_partnership_revenue_share: Amount = None
    aca_partnership_minimum_agents: Count = None
    aca_licensed_states: list[str] = Field(default_factory=list)

    # Employment
    job_title: Optional[str] = None
    employment_start_date: Optional[str] = None
    employment_type: Optional[str] = None
    compensation_amount: Amount = None
    compensation_frequency: Optional[str] = None
    commission_rate: Amount = None
    work_location: Optional[str] = None
    probation_period: Count = None
    pto_days: Count = None
    non_compete_months: Count = None
    benefits: list[str] = Field(default_factory=list)

    # LLC operating agreement
    llc_company_name: Optional[str] = None
    llc_state_of_formation: Optional[str] = None
    llc_principal_office: Optional[str] = None
    llc_business_purpose: Optional[str] = None
    llc_management_structure: Optional[str] = None
    llc_fiscal_year_end: Optional[str] = None
    llc_distribution_frequency: Optional[str] = None
    llc_tax_classification: Optional[str] = None
    llc_investor: MemberInfo = Field(default_factory=MemberInfo)
    llc_managing_member: MemberInfo = Field(default_factory=MemberInfo)
    llc_additional_members: list[MemberInfo] = Field(default_factory=list)

    @field_validator(
        "targeted_states",
        "requirements",
        "datapass_fields",
        "traffic_sources",
        "aca_licensed_states",
        "benefits",
        mode="before",
    )
    @classmethod
    def _lists(cls, value):
        return _coerce_list(value)

    @field_validator("llc_additional_members", mode="before")
    @classmethod
    def _members(cls, value):
        return [] if value is None else value

    @field_validator("buyer", "publisher", mode="before")
    @classmethod
    def _party(cls, value):
        return {} if value is None else value

    @field_validator("llc_investor", "llc_managing_member", mode="before")
    @classmethod
    def _member(cls, value):
        return {} if value is None else value

    @field_validator("campaign_sub_type", "aca_sub_type", mode="before")
    @classmethod
    def _blank_sub_type(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
