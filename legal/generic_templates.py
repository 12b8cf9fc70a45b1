"""
Fixed-text and tabular sections of the generic narrative demand.

Prose sections are drafted; these are filled directly through the template
engine so that any missing case field shows up as a visible marker.
"""

from datetime import date

from config import AppConfig, get_config
from core.constants import DEMAND_TYPE_POLICY_LIMITS, DEMAND_TYPE_UIM, UNFILLED_NAME_TEMPLATE
from services.damages import add_business_days, format_currency, format_date
from utils.template_engine import fill

HEADER_TEMPLATE = """# SETTLEMENT DEMAND
**{{today}}**

## Addressee:
{{insurance_company}}
Claims Department
[Address]
[City, State ZIP]

| Re: | My Client | {{plaintiff_name}} |
| :-- | :-- | :-- |
|  | Your Insured: | {{defendant_name}} |
|  | Claim Number: | {{claim_number}} |
|  | Incident Date: | {{incident_date}} |

Dear Claims Representative:"""

INTRODUCTION_TEXT = (
    "Please consider this correspondence as my client's demand for the full and final "
    "resolution of the above referenced claim."
)

MEDICAL_EXPENSES_TEMPLATE = """The medical expenses for treatment of injuries that {{plaintiff_name}} suffered because of the collision amounted to **{{total_medical}}**. Copies of the medical bills are attached and itemized below:

"""

FUTURE_MEDICAL_TABLE_TEMPLATE = """The estimate of medical expenses in the future are as follows:

| Treatment Type | Estimated Cost |
| :-- | :-- |
| Total Future Medical Expenses | **{{future_medical}}** |
"""

SIGNATURE_TEMPLATE = """Sincerely,

{{attorney_name}}
[Law Firm Name]
[Contact Information]

Enclosures: Medical Records and Bills
cc: Client File"""


def _or_name(value: str, name: str) -> str:
    return value if value else UNFILLED_NAME_TEMPLATE.format(name=name)


def build_header(case, today: date = None) -> str:
    today = today or date.today()
    return fill(HEADER_TEMPLATE, {
        "today": format_date(today),
        "insurance_company": _or_name(case.insurance_company, "Insurance Company"),
        "plaintiff_name": case.plaintiff_name,
        "defendant_name": _or_name(case.defendant_name, "Defendant Name"),
        "claim_number": _or_name(case.claim_number, "Claim Number"),
        "incident_date": format_date(case.incident_date),
    })


def _provider_totals(billing_entries: list) -> dict:
    totals = {}
    for entry in billing_entries or []:
        provider = str(entry.get("provider") or "Unknown Provider")
        totals[provider] = totals.get(provider, 0) + float(entry.get("billed") or 0)
    return totals


def build_medical_expenses_table(case) -> str:
    total = format_currency(case.total_medical_expenses)
    lines = ["| Provider | Amount |", "| :-- | :-- |"]
    lines += [
        f"| {provider} | {format_currency(amount)} |"
        for provider, amount in _provider_totals(case.billing_entries).items()
    ]
    lines.append(f"| Total Medical Expenses | **{total}** |")
    intro = fill(MEDICAL_EXPENSES_TEMPLATE, {
        "plaintiff_name": case.plaintiff_name,
        "total_medical": total,
    })
    return intro + "\n".join(lines) + "\n"


def build_future_medical_table(case) -> str:
    return fill(FUTURE_MEDICAL_TABLE_TEMPLATE, {
        "future_medical": format_currency(case.future_medical_expenses),
    })


def build_damages_summary_table(case) -> str:
    rows = [
        ("Medical expenses", case.total_medical_expenses),
        ("Future medical expenses", case.future_medical_expenses),
        ("Past lost wages", case.past_lost_wages),
        ("Future loss of earning capacity", case.future_lost_wages),
        ("Property damage", case.property_damage),
    ]
    lines = ["| Category | Amount |", "| :-- | :-- |"]
    lines += [f"| {label} | {format_currency(amount)} |" for label, amount in rows if amount > 0]
    lines.append("| Lifestyle impact/loss of activities | $ |")
    lines.append("| Pain and suffering | $ |")
    return "\n".join(lines) + "\n"


def build_exhibits_list(case) -> str:
    lines = [
        "| Exhibit | Description |",
        "| :-- | :-- |",
        "| Exhibit 1 | Police Report / Accident Report |",
        "| Exhibit 2 | Medical Records |",
        "| Exhibit 3 | Medical Bills |",
    ]
    if case.past_lost_wages > 0:
        lines.append("| Exhibit 4 | Wage Loss Documentation |")
    if case.property_damage > 0:
        lines.append("| Exhibit 5 | Property Damage Estimates/Photos |")
    return "\n".join(lines) + "\n"


def build_conclusion(case, demand_type: str, today: date = None, config: AppConfig = None) -> str:
    """
    Closing demand paragraph. Policy-limits demands add the time-limit and
    excess-exposure language; UIM demands address the client's own carrier.
    """
    config = config or get_config()
    today = today or date.today()
    deadline = format_date(add_business_days(today, config.DEFAULT_DEADLINE_DAYS))
    amount = format_currency(case.demand_amount)

    content = ""
    if demand_type == DEMAND_TYPE_POLICY_LIMITS:
        content += (
            f"We recognize that your insured maintained policy limits of **{amount}** in available "
            f"liability coverage to respond to this incident. "
            f"This is a formal **policy limits demand** for the full policy limits. "
        )
    elif demand_type == DEMAND_TYPE_UIM:
        content += "This is a demand under the underinsured motorist (UIM) provision of my client's insurance policy. "
    elif case.demand_amount >= 100000:
        content += "We recognize that your insured maintained available liability coverage to respond to this incident. "

    content += (
        "In the spirit of compromise and in an effort to resolve this matter without the time and expense "
        "necessarily involved in formal litigation, I have been authorized by my client to demand settlement "
        f"in the amount of **{amount}** to fully and fairly resolve this claim.\n\n"
    )

    if demand_type == DEMAND_TYPE_POLICY_LIMITS:
        content += (
            f"**This is a time-limited offer.** If this demand is not accepted by {deadline}, this offer will "
            "be withdrawn and we will proceed with litigation. By rejecting this demand within policy limits, "
            "you expose your insured to personal liability for any judgment in excess of the policy limits.\n\n"
        )

    content += (
        "I trust that your reasonable evaluation of this file will lead to a settlement and you will not "
        "subject your insured to the litigation process. Please contact me directly to discuss this matter. "
        f"If we do not receive a satisfactory response by {deadline}, we are prepared to file a lawsuit to "
        "protect our client's rights.\n\n"
        "This letter is intended for settlement purposes only and shall not be deemed admissible pursuant "
        "to applicable rules of evidence.\n\n"
    )

    content += fill(SIGNATURE_TEMPLATE, {"attorney_name": _or_name(case.attorney_name, "Attorney Name")})
    return content
