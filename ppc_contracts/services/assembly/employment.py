"""Employment agreement between an employer (buyer slot) and an employee (publisher slot)."""

from __future__ import annotations

from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.services.assembly.formatting import (
    bullet_list,
    governing_state,
    long_date,
    money,
    percent,
    quantity,
    text,
)
from ppc_contracts.services.assembly.layout import (
    RenderContext,
    Signatory,
    article,
    clause,
    document,
    party_details,
    party_signatory,
    signature_block,
    table,
)

EMPLOYER = "Employer"
EMPLOYEE = "Employee"


def render(request: AgreementRequest, ctx: RenderContext) -> str:
    employer, employee = request.buyer, request.publisher
    state = governing_state(
        [employer.address, request.work_location, employee.address], ctx.default_state
    )
    employee_name = text(employee.contact_name or employee.company_name)
    salary = money(request.compensation_amount)

    recitals = article(
        "PARTIES",
        f"<p>This Employment Agreement (the \"Agreement\") is entered into as of "
        f"{long_date(ctx.effective_date)} by and between {text(employer.company_name)} "
        f"(the \"{EMPLOYER}\") and {employee_name} (the \"{EMPLOYEE}\").</p>",
        party_details(EMPLOYER, employer),
        party_details(EMPLOYEE, employee),
    )
    position = article(
        "1. POSITION AND DUTIES",
        clause(
            "1.1 Position",
            f"Employer employs Employee as {text(request.job_title)} on a "
            f"{text(request.employment_type)} basis, starting on "
            f"{text(request.employment_start_date)}.",
        ),
        clause(
            "1.2 Place of Work",
            f"Employee's primary work location is {text(request.work_location)}.",
        ),
        clause(
            "1.3 Probationary Period",
            f"The first {quantity(request.probation_period, 'day')} of employment are a "
            "probationary period during which either party may end the employment on one "
            "day's notice.",
        ),
    )
    compensation = article(
        "2. COMPENSATION AND BENEFITS",
        clause(
            "2.1 Base Compensation",
            f"Employer shall pay Employee {salary} on a {text(request.compensation_frequency)} "
            "basis, less applicable withholdings, on Employer's regular payroll schedule.",
        ),
        clause(
            "2.2 Commission",
            f"Employee is eligible for commission of {percent(request.commission_rate)} of "
            "collected revenue attributable to Employee's sales, paid monthly in arrears.",
        ),
        clause(
            "2.3 Paid Time Off",
            f"Employee accrues {quantity(request.pto_days, 'day')} of paid time off per year.",
        ),
        clause("2.4 Benefits", bullet_list(request.benefits)),
    )
    covenants = article(
        "3. CONFIDENTIALITY AND RESTRICTIVE COVENANTS",
        clause(
            "3.1 Confidential Information",
            "Employee shall not disclose Employer's customer lists, pricing, call data or "
            "trade secrets during or after employment.",
        ),
        clause(
            "3.2 Non-Competition",
            "For "
            f"{quantity(request.non_compete_months, 'month')} after employment ends, Employee "
            "shall not perform competing services for Employer's customers, to the extent "
            "permitted by applicable law.",
        ),
        clause(
            "3.3 Work Product",
            "All work product created within the scope of employment belongs to Employer.",
        ),
    )
    termination = article(
        "4. TERMINATION",
        clause(
            "4.1 At-Will Employment",
            "Employment is at will. After the probationary period, either party may end the "
            f"employment on {quantity(request.termination_notice, 'day')} written notice.",
        ),
        clause(
            "4.2 Final Pay",
            "On termination Employer shall pay all earned compensation and accrued, unused "
            "paid time off as required by law.",
        ),
    )
    general = article(
        "5. GENERAL",
        clause(
            "5.1 Governing Law",
            f"This Agreement is governed by the laws of the State of {state}.",
        ),
        clause(
            "5.2 Entire Agreement",
            "This Agreement is the entire agreement of the parties regarding employment and "
            "may be amended only in writing signed by both parties.",
        ),
    )
    exhibit = article(
        "EXHIBIT A. SUMMARY OF TERMS",
        table(
            [
                ("Job Title", text(request.job_title)),
                ("Employment Type", text(request.employment_type)),
                ("Start Date", text(request.employment_start_date)),
                ("Base Compensation", salary),
                ("Pay Frequency", text(request.compensation_frequency)),
                ("Commission Rate", percent(request.commission_rate)),
            ]
        ),
    )
    signatures = signature_block(
        "IN WITNESS WHEREOF, the parties have executed this Agreement as of the Effective Date.",
        party_signatory(EMPLOYER, employer, ctx.buyer_signature),
        Signatory(
            label=EMPLOYEE,
            organisation=employee_name,
            name=employee_name,
            title=text(request.job_title),
            image=ctx.publisher_signature,
        ),
    )
    return document(
        "EMPLOYMENT AGREEMENT",
        ctx.effective_date,
        recitals,
        position,
        compensation,
        covenants,
        termination,
        general,
        exhibit,
        signatures,
    )
