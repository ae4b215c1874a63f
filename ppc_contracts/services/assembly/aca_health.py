"""ACA Health agreements: CPL calls, CPA enrollments and agent-recruitment partnerships.

The CPL and CPA variants extend the call-delivery obligations with ACA
specific clauses 5.6 through 5.9; the partnership variant is a separate
recruitment agreement between an agency and a recruiter.
"""

from __future__ import annotations

from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.services.assembly.formatting import (
    bullet_list,
    governing_state,
    inline_list,
    long_date,
    money,
    percent,
    quantity,
    text,
)
from ppc_contracts.services.assembly.layout import (
    RenderContext,
    article,
    clause,
    document,
    party_details,
    party_signatory,
    signature_block,
    table,
)

BUYER = "Buyer"
PUBLISHER = "Publisher"
AGENCY = "Agency"
RECRUITER = "Recruiter"


def render_cpl(request: AgreementRequest, ctx: RenderContext) -> str:
    buffer_time = quantity(request.aca_cpl_buffer_time, "second")
    payout = money(request.aca_cpl_payout)
    aca_clauses = [
        clause(
            "5.6 ACA HEALTH CPL CALL REQUIREMENTS",
            "A Qualified Call is an inbound call from a consumer seeking individual or family "
            "health coverage through the Health Insurance Marketplace who resides in a state in "
            "which Buyer's agents are licensed, and who remains connected to Buyer's licensed "
            f"agent for a minimum of {buffer_time} (the \"Buffer Time\").",
            "Calls from existing Buyer customers, Medicare-eligible consumers and consumers "
            "enrolled in employer coverage are not Qualified Calls.",
        ),
        clause(
            "5.7 PAYMENT TERMS",
            f"Buyer shall pay Publisher {payout} per Qualified Call, invoiced on a "
            f"{text(request.billing_cycle)} basis and payable within "
            f"{quantity(request.payment_terms, 'day')} of the invoice date.",
        ),
        clause(
            "5.8 DISPUTED CALLS",
            "Buyer may dispute a billed call within "
            f"{quantity(request.chargeback_period, 'day')} of the call date. Calls shown by "
            "call recordings to fall short of the Buffer Time are credited.",
        ),
        _marketplace_compliance("5.9"),
    ]
    return _render_call_agreement(
        request,
        ctx,
        title="ACA HEALTH PAY-PER-CALL AGREEMENT (CPL)",
        aca_clauses=aca_clauses,
        exhibit_rows=[
            ("Payout Model", "Cost Per Lead (per Qualified Call)"),
            ("Payout", payout),
            ("Buffer Time", buffer_time),
        ],
    )


def render_cpa(request: AgreementRequest, ctx: RenderContext) -> str:
    chargeback = quantity(request.aca_cpa_chargeback_period, "day")
    payout = money(request.aca_cpa_payout)
    aca_clauses = [
        clause(
            "5.6 ACA HEALTH CPA ENROLLMENT REQUIREMENTS",
            "An Acquisition is a Qualified Call that results in a completed Marketplace "
            "application and plan selection submitted by Buyer's licensed agent during the "
            f"enrollment window of {text(request.aca_enrollment_window)}.",
        ),
        clause(
            "5.7 PAYMENT TERMS",
            f"Buyer shall pay Publisher {payout} per Acquisition, invoiced on a "
            f"{text(request.billing_cycle)} basis and payable within "
            f"{quantity(request.payment_terms, 'day')} of the invoice date.",
        ),
        clause(
            "5.8 CHARGEBACK LIABILITY PERIOD",
            "If an enrollment is cancelled, terminated for non-payment of the binder premium, "
            f"or rejected by the Marketplace within {chargeback} of submission, Publisher is "
            "liable for the full payout for that Acquisition, deducted from the next invoice.",
        ),
        _marketplace_compliance("5.9"),
    ]
    return _render_call_agreement(
        request,
        ctx,
        title="ACA HEALTH PAY-PER-CALL AGREEMENT (CPA)",
        aca_clauses=aca_clauses,
        exhibit_rows=[
            ("Payout Model", "Cost Per Acquisition (per enrollment)"),
            ("Payout", payout),
            ("Chargeback Liability Period", chargeback),
            ("Enrollment Window", text(request.aca_enrollment_window)),
        ],
    )


def render_partnership(request: AgreementRequest, ctx: RenderContext) -> str:
    """Recruitment partnership: the recruiter sources licensed agents for the agency."""
    agency, recruiter = request.buyer, request.publisher
    state = governing_state([agency.address, recruiter.address], ctx.default_state)
    agent_fee = money(request.aca_partnership_agent_fee)
    revenue_share = percent(request.aca_partnership_revenue_share)

    recitals = article(
        "PARTIES AND RECITALS",
        f"<p>This ACA Health Agent Recruitment Partnership Agreement (the \"Agreement\") is "
        f"entered into as of {long_date(ctx.effective_date)} by and between "
        f"{text(agency.company_name)} (\"{AGENCY}\") and {text(recruiter.company_name)} "
        f"(\"{RECRUITER}\").</p>",
        party_details(AGENCY, agency),
        party_details(RECRUITER, recruiter),
        "<p>Agency operates an ACA Health insurance sales floor and wishes to engage Recruiter "
        "to identify and onboard licensed health insurance agents.</p>",
    )
    definitions = article(
        "ARTICLE 1. DEFINITIONS",
        clause(
            '1.1 "Recruited Agent"',
            "A Recruited Agent is an individual introduced by Recruiter who holds an active "
            "health insurance license in at least one Licensed State, completes Agency's "
            "Marketplace certification, and is contracted by Agency.",
        ),
        clause("1.2 \"Licensed States\"", inline_list(request.aca_licensed_states)),
    )
    compensation = article(
        "ARTICLE 2. COMPENSATION",
        clause(
            "2.1 Placement Fee",
            f"Agency shall pay Recruiter {agent_fee} for each Recruited Agent who remains "
            "contracted with Agency for thirty (30) days.",
        ),
        clause(
            "2.2 Revenue Share",
            f"Agency shall pay Recruiter {revenue_share} of the commissions Agency receives on "
            "enrollments written by Recruited Agents during the term of this Agreement.",
        ),
        clause(
            "2.3 Minimum Commitment",
            f"Recruiter shall introduce at least {text(request.aca_partnership_minimum_agents)} "
            "Recruited Agents per calendar quarter.",
        ),
        clause(
            "2.4 Payment Terms",
            f"Fees are invoiced on a {text(request.billing_cycle)} basis and payable within "
            f"{quantity(request.payment_terms, 'day')} of the invoice date.",
        ),
    )
    obligations = article(
        "ARTICLE 3. OBLIGATIONS",
        clause(
            "3.1 Recruiter Standards",
            "Recruiter shall verify each candidate's license status through the National "
            "Insurance Producer Registry before introduction.",
        ),
        clause("3.2 Additional Requirements", bullet_list(request.requirements)),
        _marketplace_compliance("3.3"),
    )
    general = article(
        "ARTICLE 4. TERM, NON-SOLICITATION AND GOVERNING LAW",
        clause(
            "4.1 Term and Termination",
            f"Either party may terminate on {quantity(request.termination_notice, 'day')} "
            "written notice. Revenue share accrued before termination remains payable.",
        ),
        clause(
            "4.2 Non-Solicitation",
            "During the term and for twelve (12) months after, Recruiter shall not solicit "
            "Recruited Agents to leave Agency.",
        ),
        clause(
            "4.3 Governing Law",
            f"This Agreement is governed by the laws of the State of {state}.",
        ),
    )
    exhibit = article(
        "EXHIBIT A. PARTNERSHIP TERMS",
        table(
            [
                ("Placement Fee", agent_fee),
                ("Revenue Share", revenue_share),
                ("Minimum Agents per Quarter", text(request.aca_partnership_minimum_agents)),
                ("Licensed States", inline_list(request.aca_licensed_states)),
            ]
        ),
    )
    signatures = signature_block(
        "IN WITNESS WHEREOF, the parties have executed this Agreement as of the Effective Date.",
        party_signatory(AGENCY, agency, ctx.buyer_signature),
        party_signatory(RECRUITER, recruiter, ctx.publisher_signature),
    )
    return document(
        "ACA HEALTH AGENT RECRUITMENT PARTNERSHIP AGREEMENT",
        ctx.effective_date,
        recitals,
        definitions,
        compensation,
        obligations,
        general,
        exhibit,
        signatures,
    )


def _marketplace_compliance(number: str) -> str:
    return clause(
        f"{number} CMS AND MARKETPLACE COMPLIANCE",
        "Each party shall comply with 45 C.F.R. 155.220, the CMS agent and broker "
        "agreements, and state insurance marketing rules. Marketing shall not state or imply "
        "affiliation with HealthCare.gov or any government agency.",
    )


def _render_call_agreement(
    request: AgreementRequest,
    ctx: RenderContext,
    *,
    title: str,
    aca_clauses: list[str],
    exhibit_rows: list[tuple[str, str]],
) -> str:
    buyer, publisher = request.buyer, request.publisher
    state = governing_state([buyer.address, publisher.address], ctx.default_state)

    recitals = article(
        "PARTIES AND RECITALS",
        f"<p>This ACA Health Pay-Per-Call Agreement (the \"Agreement\") is entered into as of "
        f"{long_date(ctx.effective_date)} by and between {text(buyer.company_name)} "
        f"(\"{BUYER}\") and {text(publisher.company_name)} (\"{PUBLISHER}\").</p>",
        party_details(BUYER, buyer),
        party_details(PUBLISHER, publisher),
        "<p>Buyer employs licensed health insurance agents who enroll consumers in Affordable "
        "Care Act plans, and Publisher generates inbound calls from consumers seeking such "
        "coverage.</p>",
    )
    scope = article(
        "ARTICLE 1. SCOPE",
        clause(
            "1.1 Services",
            "Publisher shall deliver inbound ACA Health consumer calls to Buyer's designated "
            f"number during {text(request.hours_of_operation)}, up to "
            f"{text(request.daily_call_cap)} calls per day.",
        ),
        clause("1.2 Licensed States", inline_list(request.aca_licensed_states)),
        clause("1.3 Approved Traffic Sources", bullet_list(request.traffic_sources)),
    )
    confidentiality = article(
        "ARTICLE 2. CONFIDENTIALITY AND CONSUMER DATA",
        clause(
            "2.1 Protected Information",
            "Consumer information exchanged under this Agreement is personally identifiable "
            "information and shall be used solely to provide health coverage quotes and "
            "enrollments.",
        ),
    )
    buyer_duties = article(
        "ARTICLE 3. BUYER OBLIGATIONS",
        clause(
            "3.1 Licensed Agents",
            "Buyer shall answer calls only with agents licensed in the consumer's state and "
            "registered with the Marketplace for the current plan year.",
        ),
        clause(
            "3.2 Call Routing",
            "Buyer shall keep its designated number staffed during the hours of operation and "
            "notify Publisher promptly of any capacity reduction.",
        ),
    )
    liability = article(
        "ARTICLE 4. INDEMNIFICATION AND LIABILITY",
        clause(
            "4.1 Indemnification",
            "Each party shall indemnify the other against third-party claims arising from its "
            "breach of this Agreement or violation of law.",
        ),
        clause(
            "4.2 Limitation of Liability",
            "Neither party is liable for indirect or consequential damages.",
        ),
    )
    obligations = article(
        "ARTICLE 5. PUBLISHER OBLIGATIONS",
        clause(
            "5.1 TCPA and Telemarketing Laws",
            "Publisher shall comply with the Telephone Consumer Protection Act, the "
            "Telemarketing Sales Rule, and all state telemarketing and do-not-call laws.",
        ),
        clause("5.2 Campaign Requirements", bullet_list(request.requirements)),
        clause(
            "5.3 Data Pass",
            "Publisher shall pass the following consumer data with each call:",
            bullet_list(request.datapass_fields),
        ),
        clause(
            "5.4 Duplicate Calls",
            "A call from a number that reached Buyer through Publisher within the preceding "
            f"{quantity(request.duplicate_window, 'day')} is not billable.",
        ),
        clause(
            "5.5 Call Recordings",
            "Buyer may record calls and shall provide recordings of disputed calls on request.",
        ),
        *aca_clauses,
    )
    term = article(
        "ARTICLE 6. TERM AND GOVERNING LAW",
        clause(
            "6.1 Termination",
            f"Either party may terminate on {quantity(request.termination_notice, 'day')} "
            "written notice. Calls delivered before termination remain payable.",
        ),
        clause(
            "6.2 Governing Law",
            f"This Agreement is governed by the laws of the State of {state}, without regard to "
            "its conflict-of-laws rules.",
        ),
    )
    rows = exhibit_rows + [
        ("Billing Cycle", text(request.billing_cycle)),
        ("Payment Terms", quantity(request.payment_terms, "day")),
        ("Licensed States", inline_list(request.aca_licensed_states)),
    ]
    exhibit = article("EXHIBIT A. CAMPAIGN SPECIFICATIONS", table(rows))
    signatures = signature_block(
        "IN WITNESS WHEREOF, the parties have executed this Agreement as of the Effective Date.",
        party_signatory(BUYER, buyer, ctx.buyer_signature),
        party_signatory(PUBLISHER, publisher, ctx.publisher_signature),
    )
    return document(
        title,
        ctx.effective_date,
        recitals,
        scope,
        confidentiality,
        buyer_duties,
        liability,
        obligations,
        term,
        exhibit,
        signatures,
    )
