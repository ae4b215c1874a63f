"""LLC operating agreement.

Signed by the investor (buyer slot) and the managing member (publisher
slot); additional members are listed in the capital schedule only.
"""

from __future__ import annotations

import html

from ppc_contracts.schemas.agreement import AgreementRequest, MemberInfo
from ppc_contracts.services.assembly.formatting import (
    governing_state,
    is_blank,
    long_date,
    money,
    percent,
    resolve_state_name,
    text,
)
from ppc_contracts.services.assembly.layout import (
    RenderContext,
    Signatory,
    article,
    clause,
    document,
    signature_block,
)

INVESTOR = "Investor"
MANAGING_MEMBER = "Managing Member"


def render(request: AgreementRequest, ctx: RenderContext) -> str:
    investor, manager = request.llc_investor, request.llc_managing_member
    company = text(request.llc_company_name)
    state = resolve_state_name(request.llc_state_of_formation) or governing_state(
        [request.llc_principal_office, manager.address, investor.address], ctx.default_state
    )
    members = [(MANAGING_MEMBER, manager), (INVESTOR, investor)] + [
        ("Member", m) for m in request.llc_additional_members
    ]

    preamble = article(
        "OPERATING AGREEMENT",
        f"<p>This Operating Agreement (the \"Agreement\") of {company} (the \"Company\") is "
        f"made and entered into as of {long_date(ctx.effective_date)} by and among the "
        "members listed in Schedule A (each a \"Member\").</p>",
    )
    formation = article(
        "ARTICLE I. FORMATION AND ORGANIZATION",
        clause(
            "1.1 Formation",
            f"The Company was formed as a limited liability company under the laws of the "
            f"State of {state}.",
        ),
        clause("1.2 Name", f"The name of the Company is {company}."),
        clause(
            "1.3 Principal Office",
            f"The principal office of the Company is {text(request.llc_principal_office)}.",
        ),
        clause(
            "1.4 Purpose",
            f"The purpose of the Company is {text(request.llc_business_purpose)}, and any "
            "lawful activity related to it.",
        ),
        clause(
            "1.5 Tax Classification",
            f"The Company shall be classified for federal income tax purposes as "
            f"{text(request.llc_tax_classification)}.",
        ),
    )
    capital = article(
        "ARTICLE II. CAPITAL CONTRIBUTIONS AND OWNERSHIP",
        clause(
            "2.1 Initial Contributions",
            "Each Member has contributed the capital set out opposite the Member's name in "
            "Schedule A and holds the ownership percentage stated there.",
        ),
        clause(
            "2.2 Additional Contributions",
            "No Member is required to make additional capital contributions without the "
            "written consent of that Member.",
        ),
        clause(
            "2.3 Investor Protections",
            f"The Investor, {text(investor.name)}, shall receive quarterly financial "
            "statements and may inspect the Company's books on reasonable notice.",
        ),
    )
    management = article(
        "ARTICLE III. MANAGEMENT",
        clause(
            "3.1 Management Structure",
            f"The Company is {text(request.llc_management_structure)}. "
            f"{text(manager.name)} is appointed Managing Member and manages the day-to-day "
            "business of the Company.",
        ),
        clause(
            "3.2 Major Decisions",
            "The sale of substantially all assets, admission of new Members, incurring debt "
            "above ordinary course, and amendment of this Agreement require the consent of "
            "Members holding a majority of ownership percentages, including the Investor.",
        ),
    )
    distributions = article(
        "ARTICLE IV. ALLOCATIONS AND DISTRIBUTIONS",
        clause(
            "4.1 Allocations",
            "Profits and losses are allocated among the Members in proportion to their "
            "ownership percentages.",
        ),
        clause(
            "4.2 Distributions",
            f"Available cash is distributed {text(request.llc_distribution_frequency)} in "
            "proportion to ownership percentages, after reasonable reserves.",
        ),
        clause(
            "4.3 Fiscal Year",
            f"The fiscal year of the Company ends on {text(request.llc_fiscal_year_end)}.",
        ),
    )
    transfers = article(
        "ARTICLE V. TRANSFERS, DISSOLUTION AND GOVERNING LAW",
        clause(
            "5.1 Transfer Restrictions",
            "No Member may transfer any interest in the Company without first offering it to "
            "the other Members on the same terms.",
        ),
        clause(
            "5.2 Dissolution",
            "The Company dissolves on the written consent of all Members or as required by "
            "law. On dissolution, assets are applied to creditors and then distributed to "
            "Members according to their capital accounts.",
        ),
        clause(
            "5.3 Governing Law",
            f"This Agreement is governed by the laws of the State of {state}.",
        ),
    )
    schedule = article("SCHEDULE A. MEMBERS AND CAPITAL", _member_schedule(members))
    signatures = signature_block(
        "IN WITNESS WHEREOF, the Members have executed this Operating Agreement as of the "
        "Effective Date.",
        _member_signatory(INVESTOR, investor, company, ctx.buyer_signature),
        _member_signatory(MANAGING_MEMBER, manager, company, ctx.publisher_signature),
    )
    return document(
        _title(request.llc_company_name),
        ctx.effective_date,
        preamble,
        formation,
        capital,
        management,
        distributions,
        transfers,
        schedule,
        signatures,
    )


def _title(company_name) -> str:
    if is_blank(company_name):
        return "LIMITED LIABILITY COMPANY OPERATING AGREEMENT"
    return f"OPERATING AGREEMENT OF {company_name.strip().upper()}"


def _member_schedule(members: list[tuple[str, MemberInfo]]) -> str:
    # Investor and managing member always get a row; empty extras are dropped
    rows = [
        (
            f"<tr><td>{html.escape(role)}</td><td>{text(m.name)}</td><td>{text(m.address)}</td>"
            f"<td>{money(m.capital_contribution)}</td><td>{percent(m.ownership_percentage)}</td></tr>"
        )
        for role, m in members
        if not _member_is_empty(m) or role != "Member"
    ]
    header = (
        "<tr><th>Role</th><th>Name</th><th>Address</th>"
        "<th>Capital Contribution</th><th>Ownership</th></tr>"
    )
    return f'<table class="members">{header}{"".join(rows)}</table>'


def _member_is_empty(member: MemberInfo) -> bool:
    return all(
        is_blank(v)
        for v in (member.name, member.address, member.capital_contribution, member.ownership_percentage)
    )


def _member_signatory(label, member: MemberInfo, company: str, image) -> Signatory:
    return Signatory(
        label=label,
        organisation=company,
        name=text(member.name),
        title=label,
        image=image,
    )
