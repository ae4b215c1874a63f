"""Contract assembly: maps an AgreementRequest to one contract variant and renders it.

Pure and deterministic. The effective date and the fallback governing-law
state are explicit inputs; nothing here reads the clock or the settings.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from ppc_contracts.schemas.agreement import (
    AcaSubType,
    AgreementRequest,
    CampaignSubType,
    ContractType,
)
from ppc_contracts.services.assembly import aca_health, employment, llc_operating, pay_per_call
from ppc_contracts.services.assembly.layout import RenderContext

DEFAULT_GOVERNING_STATE = "Delaware"


class ContractFamily(str, enum.Enum):
    pay_per_call = "pay_per_call"
    aca_health = "aca_health"
    employment = "employment"
    llc_operating = "llc_operating"


class Subtype(str, enum.Enum):
    cpl = "cpl"
    cpa = "cpa"
    partnership = "partnership"


@dataclass(frozen=True, slots=True)
class ContractVariant:
    """Contract family plus campaign subtype (None for single-variant families)."""

    family: ContractFamily
    subtype: Optional[Subtype] = None


Renderer = Callable[[AgreementRequest, RenderContext], str]

_RENDERERS: dict[ContractVariant, Renderer] = {
    ContractVariant(ContractFamily.pay_per_call, Subtype.cpl): pay_per_call.render_cpl,
    ContractVariant(ContractFamily.pay_per_call, Subtype.cpa): pay_per_call.render_cpa,
    ContractVariant(ContractFamily.aca_health, Subtype.cpl): aca_health.render_cpl,
    ContractVariant(ContractFamily.aca_health, Subtype.cpa): aca_health.render_cpa,
    ContractVariant(ContractFamily.aca_health, Subtype.partnership): aca_health.render_partnership,
    ContractVariant(ContractFamily.employment): employment.render,
    ContractVariant(ContractFamily.llc_operating): llc_operating.render,
}

_PARTY_LABELS: dict[ContractVariant, tuple[str, str]] = {
    ContractVariant(ContractFamily.aca_health, Subtype.partnership): (
        aca_health.AGENCY,
        aca_health.RECRUITER,
    ),
    ContractVariant(ContractFamily.employment): (employment.EMPLOYER, employment.EMPLOYEE),
    ContractVariant(ContractFamily.llc_operating): (
        llc_operating.INVESTOR,
        llc_operating.MANAGING_MEMBER,
    ),
}
_DEFAULT_LABELS = (pay_per_call.BUYER, pay_per_call.PUBLISHER)


def _is_aca_vertical(vertical: Optional[str]) -> bool:
    return bool(vertical) and vertical.strip().lower().startswith("aca")


def select_variant(request: AgreementRequest) -> ContractVariant:
    """Pick exactly one contract variant; fields of other branches are ignored."""
    if request.contract_type is ContractType.employment:
        return ContractVariant(ContractFamily.employment)
    if request.contract_type is ContractType.llc_operating_agreement:
        return ContractVariant(ContractFamily.llc_operating)

    if request.contract_type is ContractType.aca_health or _is_aca_vertical(request.vertical):
        if request.aca_sub_type is AcaSubType.partnership:
            return ContractVariant(ContractFamily.aca_health, Subtype.partnership)
        if request.aca_sub_type is AcaSubType.cpa:
            return ContractVariant(ContractFamily.aca_health, Subtype.cpa)
        if request.aca_sub_type is None and _wants_cpa(request):
            return ContractVariant(ContractFamily.aca_health, Subtype.cpa)
        return ContractVariant(ContractFamily.aca_health, Subtype.cpl)

    subtype = Subtype.cpa if _wants_cpa(request) else Subtype.cpl
    return ContractVariant(ContractFamily.pay_per_call, subtype)


def _wants_cpa(request: AgreementRequest) -> bool:
    if request.campaign_sub_type is not None:
        return request.campaign_sub_type is CampaignSubType.cpa
    return request.contract_type is ContractType.cpa


def party_labels(request: AgreementRequest) -> tuple[str, str]:
    """(buyer-side, publisher-side) signer labels for the request's variant."""
    return _PARTY_LABELS.get(select_variant(request), _DEFAULT_LABELS)


def assemble(
    request: AgreementRequest,
    effective_date: date,
    buyer_signature: Optional[bytes] = None,
    publisher_signature: Optional[bytes] = None,
    *,
    default_state: str = DEFAULT_GOVERNING_STATE,
) -> str:
    """Render the full contract body for ``request``.

    Args:
        request: Wizard state.
        effective_date: Date printed as the Effective Date.
        buyer_signature: Captured buyer-side signature image, if signed.
        publisher_signature: Captured publisher-side signature image, if signed.
        default_state: Governing-law state when no address yields one.

    Returns:
        Contract body markup. Missing data renders as placeholder text; this
        function does not raise for incomplete requests.
    """
    ctx = RenderContext(
        effective_date=effective_date,
        default_state=default_state,
        buyer_signature=buyer_signature or None,
        publisher_signature=publisher_signature or None,
    )
    return _RENDERERS[select_variant(request)](request, ctx)


__all__ = [
    "DEFAULT_GOVERNING_STATE",
    "ContractFamily",
    "ContractVariant",
    "Subtype",
    "assemble",
    "party_labels",
    "select_variant",
]
