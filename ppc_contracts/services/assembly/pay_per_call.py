"""Standard pay-per-call publisher agreement (CPL and CPA campaigns)."""

from __future__ import annotations

from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.services.assembly.formatting import (
    bullet_list,
    governing_state,
    inline_list,
    long_date,
    money,
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


def render_cpl(request: AgreementRequest, ctx: RenderContext) -> str:
    """Pay-per-call agreement paid per qualified (duration-based) call."""
    buffer_time = quantity(request.buffer_time, "second")
    definitions = article(
        "ARTICLE 1. DEFINITIONS",
        clause(
            '1.1 "Qualified Call"',
            "A Qualified Call is an inbound telephone call from a unique consumer located in a "
            "Targeted State that is delivered by Publisher to Buyer's designated number, "
            f"remains connected for at least the Buffer Time of {buffer_time}, and is not a "
            "Duplicate Call.",
        ),
        clause(
            '1.2 "Buffer Time"',
            f"The minimum connected call duration of {buffer_time}, measured by Buyer's "
            "call-tracking platform from the moment the call is answered.",
        ),
        _duplicate_definition(request),
        _campaign_definition(request),
    )
    compensation = article(
        "ARTICLE 3. COMPENSATION",
        clause(
            "3.1 Payout per Qualified Call",
            f"Buyer shall pay Publisher {money(request.payout)} for each Qualified Call. "
            "Calls that do not meet the Buffer Time are not billable.",
        ),
        clause(
            "3.2 Call Records",
            "Buyer's call-tracking platform is the system of record for call counts and "
            "durations. Publisher may request call logs for any billing period.",
        ),
    )
    refunds = article(
        "ARTICLE 6. DISPUTED CALLS, REFUNDS AND CREDITS",
        clause(
            "6.1 Dispute Window",
            "Buyer may dispute a billed call within "
            f"{quantity(request.chargeback_period, 'day')} of the call date if the call was "
            "fraudulent, a Duplicate Call, or originated outside the Targeted States.",
        ),
        clause(
            "6.2 Credits",
            "Amounts for disputed calls that Publisher does not rebut with call records within "
            "five (5) business days are credited against the next invoice. No cash refunds "
            "are issued for credited calls.",
        ),
    )
    return _render(
        request,
        ctx,
        title="PAY-PER-CALL PUBLISHER AGREEMENT (CPL)",
        definitions=definitions,
        compensation=compensation,
        refunds=refunds,
        exhibit_rows=[
            ("Payout Model", "Cost Per Lead (per Qualified Call)"),
            ("Payout", money(request.payout)),
            ("Buffer Time", buffer_time),
        ],
    )


def render_cpa(request: AgreementRequest, ctx: RenderContext) -> str:
    """Pay-per-call agreement paid per completed acquisition."""
    chargeback = quantity(request.chargeback_period, "day")
    definitions = article(
        "ARTICLE 1. DEFINITIONS",
        clause(
            '1.1 "Qualified Call"',
            "A Qualified Call is an inbound telephone call from a unique consumer located in a "
            "Targeted State that is delivered by Publisher to Buyer's designated number and is "
            "not a Duplicate Call.",
        ),
        clause(
            '1.2 "Acquisition"',
            "An Acquisition is a Qualified Call that results in a completed sale, enrollment or "
            "application accepted by Buyer, as recorded in Buyer's systems.",
        ),
        _duplicate_definition(request),
        _campaign_definition(request),
    )
    compensation = article(
        "ARTICLE 3. COMPENSATION",
        clause(
            "3.1 Payout per Acquisition",
            f"Buyer shall pay Publisher {money(request.payout)} for each Acquisition. "
            "Qualified Calls that do not convert into an Acquisition are not billable.",
        ),
        clause(
            "3.2 Conversion Reporting",
            "Buyer shall report Acquisitions to Publisher no later than the close of each "
            "billing cycle, identifying the originating call for each Acquisition.",
        ),
    )
    refunds = article(
        "ARTICLE 6. CHARGEBACKS, REFUNDS AND CREDITS",
        clause(
            "6.1 Chargeback Liability Period",
            f"If an Acquisition is cancelled, refunded or reversed within {chargeback} of the "
            "Acquisition date, Publisher is liable for the full payout for that Acquisition.",
        ),
        clause(
            "6.2 Recovery",
            "Chargebacks are deducted from the next invoice. If no further invoices are due, "
            "Publisher shall repay chargebacks within fifteen (15) days of written notice.",
        ),
    )
    return _render(
        request,
        ctx,
        title="PAY-PER-CALL PUBLISHER AGREEMENT (CPA)",
        definitions=definitions,
        compensation=compensation,
        refunds=refunds,
        exhibit_rows=[
            ("Payout Model", "Cost Per Acquisition"),
            ("Payout", money(request.payout)),
            ("Chargeback Liability Period", chargeback),
        ],
    )


def _duplicate_definition(request: AgreementRequest) -> str:
    return clause(
        '1.3 "Duplicate Call"',
        "A call from a telephone number that already reached Buyer through Publisher within "
        f"the preceding {quantity(request.duplicate_window, 'day')}.",
    )


def _campaign_definition(request: AgreementRequest) -> str:
    return clause(
        '1.4 "Campaign"',
        f"The {text(request.vertical)} call campaign described in Exhibit A, limited to the "
        f"following Targeted States: {inline_list(request.targeted_states)}.",
    )


def _render(
    request: AgreementRequest,
    ctx: RenderContext,
    *,
    title: str,
    definitions: str,
    compensation: str,
    refunds: str,
    exhibit_rows: list[tuple[str, str]],
) -> str:
    buyer, publisher = request.buyer, request.publisher
    state = governing_state([buyer.address, publisher.address], ctx.default_state)

    recitals = article(
        "PARTIES AND RECITALS",
        f"<p>This Pay-Per-Call Publisher Agreement (the \"Agreement\") is entered into as of "
        f"{long_date(ctx.effective_date)} by and between {text(buyer.company_name)} "
        f"(\"{BUYER}\") and {text(publisher.company_name)} (\"{PUBLISHER}\").</p>",
        party_details(BUYER, buyer),
        party_details(PUBLISHER, publisher),
        "<p>Publisher operates marketing channels that generate inbound consumer telephone "
        "calls, and Buyer wishes to purchase such calls on the terms below.</p>",
    )
    scope = article(
        "ARTICLE 2. SCOPE OF SERVICES",
        clause(
            "2.1 Call Delivery",
            f"Publisher shall deliver calls for the {text(request.vertical)} vertical during "
            f"the hours of operation of {text(request.hours_of_operation)}.",
        ),
        clause(
            "2.2 Daily Cap",
            f"Buyer will accept up to {text(request.daily_call_cap)} calls per day. Calls above "
            "the cap are not billable unless Buyer accepts them in writing.",
        ),
        clause("2.3 Approved Traffic Sources", bullet_list(request.traffic_sources)),
    )
    billing = article(
        "ARTICLE 4. BILLING AND PAYMENT",
        clause(
            "4.1 Billing Cycle",
            f"Publisher shall invoice Buyer on a {text(request.billing_cycle)} billing cycle.",
        ),
        clause(
            "4.2 Payment Terms",
            f"Buyer shall pay each undisputed invoice within "
            f"{quantity(request.payment_terms, 'day')} of receipt. Late amounts accrue interest "
            "at one percent (1%) per month.",
        ),
    )
    compliance = article(
        "ARTICLE 5. PUBLISHER OBLIGATIONS AND COMPLIANCE",
        clause(
            "5.1 TCPA and Telemarketing Laws",
            "Publisher shall comply with the Telephone Consumer Protection Act, the "
            "Telemarketing Sales Rule, and all state telemarketing and do-not-call laws, and "
            "shall obtain prior express written consent where required.",
        ),
        clause("5.2 Campaign Requirements", bullet_list(request.requirements)),
        clause(
            "5.3 Data Pass",
            "Publisher shall pass the following consumer data with each call:",
            bullet_list(request.datapass_fields),
        ),
        clause(
            "5.4 Prohibited Practices",
            "Publisher shall not use automated dialing to generate inbound calls, misrepresent "
            "Buyer or its products, or incentivize consumers to call.",
        ),
        clause(
            "5.5 Call Recordings",
            "Buyer may record calls for quality assurance and shall make recordings of "
            "disputed calls available to Publisher on request.",
        ),
    )
    term = article(
        "ARTICLE 7. TERM AND TERMINATION",
        clause(
            "7.1 Term",
            "This Agreement begins on the Effective Date and continues until terminated.",
        ),
        clause(
            "7.2 Termination for Convenience",
            f"Either party may terminate this Agreement on "
            f"{quantity(request.termination_notice, 'day')} written notice. Calls delivered "
            "before termination remain payable.",
        ),
    )
    general = article(
        "ARTICLE 8. GENERAL TERMS",
        clause(
            "8.1 Confidentiality",
            "Each party shall keep the other's pricing, call data and business information "
            "confidential and use it only to perform this Agreement.",
        ),
        clause(
            "8.2 Indemnification",
            "Each party shall indemnify the other against third-party claims arising from its "
            "breach of this Agreement or violation of law.",
        ),
        clause(
            "8.3 Limitation of Liability",
            "Neither party is liable for indirect or consequential damages. Each party's "
            "aggregate liability is limited to the amounts paid in the prior three months.",
        ),
        clause(
            "8.4 Governing Law",
            f"This Agreement is governed by the laws of the State of {state}, without regard to "
            "its conflict-of-laws rules.",
        ),
    )
    rows = exhibit_rows + [
        ("Vertical", text(request.vertical)),
        ("Billing Cycle", text(request.billing_cycle)),
        ("Payment Terms", quantity(request.payment_terms, "day")),
        ("Daily Call Cap", text(request.daily_call_cap)),
        ("Hours of Operation", text(request.hours_of_operation)),
        ("Targeted States", inline_list(request.targeted_states)),
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
        definitions,
        scope,
        compensation,
        billing,
        compliance,
        refunds,
        term,
        general,
        exhibit,
        signatures,
    )
