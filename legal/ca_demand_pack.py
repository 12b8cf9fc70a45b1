"""
California policy-limits demand pack.

A time-limited policy-limits demand in California has to be unambiguous
about the offer, the deadline and service, and has to request policy
disclosure, for the carrier's duty to settle to attach (Comunale, Crisci).
CA Ins. Code § 790.03 governs fair claims practices and disclosure.
"""

from datetime import date, timedelta

from config import AppConfig, get_config
from legal.citations import COURT_ABBREVIATIONS, REPORTER_ABBREVIATIONS, CaseCitation, StatuteCitation
from legal.jurisdictions import JurisdictionRules, SectionCheck
from services.damages import calculate_damages, format_currency, format_date

# === Templates ===
CA_DEMAND_TEMPLATES = {
    "cover_letter": """**POLICY LIMITS DEMAND**
**TIME-LIMITED OFFER**

Date: {{current_date}}

{{insurance_company_name}}
{{insurance_company_address}}

RE: Claimant: {{plaintiff_name}}
    Insured: {{insured_name}}
    Claim Number: {{claim_number}}
    Date of Loss: {{accident_date}}
    Policy Limits Demand

Dear Claims Representative:

This letter constitutes a time-limited offer to settle all claims arising from the above-referenced incident for the full policy limits of **{{policy_limits}}**. This offer is made pursuant to your insured's liability policy and is contingent upon full policy disclosure as requested herein.

**This offer expires on {{deadline_date}} at 5:00 PM Pacific Time and is subject to immediate withdrawal or modification if additional information reveals higher available limits.**

We reserve all rights under California Insurance Bad Faith law should this matter not be resolved within the time specified.""",

    "policy_limits_demand": """## POLICY LIMITS SETTLEMENT OFFER

Our client, {{plaintiff_name}}, hereby offers to settle and release all claims against your insured, {{insured_name}}, for the **FULL AVAILABLE POLICY LIMITS** of **{{policy_limits}}** (or such greater amount as may be revealed through the policy disclosure requested below).

### Terms of Settlement:
- Payment of {{policy_limits}} within {{deadline_days}} days
- General release of insured {{insured_name}}
- Dismissal with prejudice of any pending litigation
- No waiver of bad faith claims against carrier if offer not timely accepted

### Time Limitation:
**This offer is irrevocable until {{deadline_date}} at 5:00 PM Pacific Time.** After this deadline, the offer is withdrawn and we will proceed with litigation for the full value of damages, which substantially exceed policy limits.

Your failure to accept this reasonable offer within policy limits may expose your company to bad faith liability under California law (*Comunale v. Traders & General Ins. Co.*, *Crisci v. Security Ins. Co.*).""",

    "liability": """## LIABILITY ANALYSIS

### Basis for Insured's Liability:
{{liability_basis}}

### Factual Summary:
On {{accident_date}}, your insured, {{insured_name}}, {{incident_description}}. This incident was caused solely by the negligent conduct of your insured including:

{{negligence_factors}}

### Legal Standards:
Under California law, your insured breached the duty of care owed to {{plaintiff_name}} by {{breach_description}}. This breach was the direct and proximate cause of substantial injuries and damages detailed herein.

### Evidence of Liability:
{{evidence_list}}

**Liability is clear and indisputable.** Any attempt to deny or undervalue this claim based on liability would constitute bad faith claims handling under California Insurance Code § 790.03(h).""",

    "medical_summary": """## MEDICAL TREATMENT SUMMARY

### Immediate Treatment:
Following the {{accident_date}} incident, {{plaintiff_name}} received immediate medical attention including:

{{emergency_treatment}}

### Ongoing Treatment:
{{treatment_summary}}

### Diagnoses:
{{diagnoses_list}}

### Permanent Injuries:
{{permanent_injuries}}

### Future Medical Care:
Medical professionals have opined that {{plaintiff_name}} will require:
{{future_treatment}}

**Total Medical Specials: {{medical_specials}}**

*Complete medical records and billing statements are enclosed as Exhibit A.*""",

    "damages_summary": """## DAMAGES SUMMARY

### Economic Damages (Special Damages):
- Medical expenses (past): {{past_medical}}
- Future medical care: {{future_medical}}
- Lost earnings: {{lost_earnings}}
- Loss of earning capacity: {{loss_earning_capacity}}
- Property damage: {{property_damage}}
**Total Economic Damages: {{total_economic}}**

### Non-Economic Damages (General Damages):
- Physical pain and suffering: {{pain_suffering}}
- Emotional distress: {{emotional_distress}}
- Loss of enjoyment of life: {{loss_enjoyment}}
- Permanent disability/disfigurement: {{permanent_disability}}
**Total Non-Economic Damages: {{total_noneconomic}}**

### Total Claimed Damages: {{total_damages}}

**The claimed damages substantially exceed the policy limits of {{policy_limits}}.** Settlement at policy limits represents a significant discount and is offered solely to achieve prompt resolution and avoid the time and expense of litigation.""",

    "bad_faith_notice": """## BAD FAITH NOTICE TO CARRIER

Please be advised that this time-limited policy limits demand creates specific duties under California law for your company:

### Carrier Obligations:
1. **Immediate Investigation**: You must promptly and thoroughly investigate this claim (*Egan v. Mutual of Omaha Ins. Co.*)
2. **Policy Limits Evaluation**: You must evaluate whether the claim value exceeds available limits (*Comunale v. Traders & General Ins. Co.*)
3. **Insured Protection**: Your duty to your insured to settle within policy limits takes precedence over your financial interests (*Crisci v. Security Ins. Co.*)
4. **Prompt Response**: Failure to timely respond to a reasonable settlement demand may constitute bad faith (*Graciano v. Mercury General Corp.*)

### Preservation of Bad Faith Claims:
**Notice is hereby given** that your handling of this claim is being documented. Should you fail to accept this reasonable policy limits demand, and should a subsequent judgment exceed policy limits, your insured will be notified of:
- Your opportunity to settle within policy limits
- Any unreasonable delay or denial
- Their potential personal exposure
- Their right to independent counsel regarding bad faith claims against you

We will recommend your insured retain independent coverage counsel to monitor your handling if this offer is not promptly accepted.""",

    "policy_disclosure_request": """## POLICY DISCLOSURE REQUEST

Pursuant to California Insurance Code § 790.03 and California Civil Code § 3295(c), and to ensure this settlement offer encompasses all available coverage, please provide **within 10 days**:

### Required Disclosures:
1. Complete certified copies of all insurance policies that may provide coverage:
   - Primary liability policy for {{insured_name}}
   - Any excess/umbrella policies
   - Any other policies (homeowner's, commercial, etc.) that may apply

2. Policy declarations pages showing:
   - Policy limits (per occurrence and aggregate)
   - Policy period and effective dates
   - Named insureds and additional insureds
   - Any applicable sublimits or exclusions

3. Claims made against the policy:
   - Other claims or lawsuits affecting available limits
   - Any erosion of policy limits from defense costs (if applicable)
   - Current available limits after any payments or allocations

### Legal Basis:
Your duty to disclose policy information arises from:
- California's comprehensive bad faith jurisprudence
- Fair claims practices regulations
- Your duty to your insured to make reasonable efforts to settle within policy limits

**Failure to provide complete policy disclosure may result in waiver of policy limits defenses and independent bad faith liability.**""",

    "deadline_language": """## ACCEPTANCE DEADLINE & TERMS

### Expiration:
**This offer expires on {{deadline_date}} at 5:00 PM Pacific Time** and is subject to immediate withdrawal or modification if:
- Additional policy limits are discovered
- Additional defendants or liable parties are identified
- Medical condition worsens or additional injuries manifest
- Any material information is discovered that was not available at time of offer

### Method of Acceptance:
Acceptance must be **unconditional** and communicated via:
- Written confirmation to: {{attorney_contact}}
- Accompanied by: Full policy disclosure (if not previously provided)
- Followed by: Policy limits payment within {{payment_days}} days

### Payment Terms:
- Certified check or wire transfer
- Made payable to: {{settlement_payee}}
- Delivered to: {{settlement_address}}
- In exchange for: Fully executed general release

### Conditions Precedent:
This settlement is contingent upon:
1. Verification that {{policy_limits}} represents **all available coverage**
2. Payment of full settlement amount within specified time
3. No liens or subrogation claims exceeding available funds (carrier must assist in resolution)

**Time is of the essence.** Any delay in response or payment may result in withdrawal of this offer.""",

    "proof_of_service": """## PROOF OF SERVICE CHECKLIST

**This section tracks service of the demand to establish timeline for bad faith purposes:**

### Service Details:
- **Date Mailed**: {{mail_date}}
- **Time Mailed**: {{mail_time}}
- **Method**: {{service_method}} (Certified Mail, Overnight, Email, etc.)
- **Tracking Number**: {{tracking_number}}

### Recipients:
- **Primary Claims Adjuster**: {{adjuster_name}} - {{adjuster_address}}
- **Claims Supervisor**: {{supervisor_name}} - {{supervisor_address}}
- **Insurance Company**: {{company_name}} - {{company_address}}
- **Insured (copy)**: {{insured_name}} - {{insured_address}}

### Enclosures Served:
☐ Demand Letter ({{page_count}} pages)
☐ Medical Records and Bills (Exhibit A)
☐ Accident/Police Reports (Exhibit B)
☐ Photographs (Exhibit C)
☐ Wage Loss Documentation (Exhibit D)
☐ Expert Reports/Opinions (Exhibit E)
☐ Other: {{other_exhibits}}

### Proof of Delivery:
- **Delivery Date**: {{delivery_date}}
- **Received By**: {{received_by}}
- **Delivery Confirmation**: {{confirmation_number}}

*Certified mail receipt and delivery confirmation attached as Exhibit {{exhibit_letter}}*

---

**Declaration of Service**: I declare under penalty of perjury under the laws of the State of California that I served the foregoing Policy Limits Demand and all exhibits on the above-listed parties on the date and by the method indicated.

Date: {{service_date}}
Served by: {{server_name}}
Title: {{server_title}}""",
}

# Without any one of these the demand may be treated as ambiguous and fail
# to trigger the carrier's duty to settle.
CA_REQUIRED_ELEMENTS = (
    "policy_limits_demand",
    "deadline_language",
    "proof_of_service",
    "policy_disclosure_request",
    "damages_summary",
    "liability",
)

CA_ADVISORY_SECTIONS = {
    "bad_faith_notice": 'Consider including "bad_faith_notice" section to document carrier obligations '
                        'and preserve insured rights.',
    "medical_summary": 'Consider including "medical_summary" to demonstrate injury severity and damages basis.',
}

CA_SECTION_CHECKS = (
    SectionCheck("policy_limits_demand", r"\$[\d,]+",
                 '"policy_limits_demand" should specify a dollar amount for the demand.'),
    SectionCheck("deadline_language", r"deadline|expire|expiration",
                 '"deadline_language" should include clear expiration deadline.', ignore_case=True),
    SectionCheck("proof_of_service", r"service|mailed|delivered|sent",
                 '"proof_of_service" should document method and date of service.', ignore_case=True),
)

CA_SECTION_TITLES = {
    "cover_letter": "COVER LETTER",
    "policy_limits_demand": "POLICY LIMITS SETTLEMENT OFFER",
    "liability": "LIABILITY ANALYSIS",
    "medical_summary": "MEDICAL TREATMENT SUMMARY",
    "damages_summary": "DAMAGES SUMMARY",
    "bad_faith_notice": "BAD FAITH NOTICE TO CARRIER",
    "policy_disclosure_request": "POLICY DISCLOSURE REQUEST",
    "deadline_language": "ACCEPTANCE DEADLINE & TERMS",
    "proof_of_service": "PROOF OF SERVICE",
}

CA_EMIT_ORDER = (
    "cover_letter",
    "policy_limits_demand",
    "liability",
    "medical_summary",
    "damages_summary",
    "bad_faith_notice",
    "policy_disclosure_request",
    "deadline_language",
    "proof_of_service",
)

# === Authorities ===
COMUNALE = CaseCitation("Comunale v. Traders & Gen. Ins. Co.", 50, REPORTER_ABBREVIATIONS["cal2d"], 654, 1958)
CRISCI = CaseCitation("Crisci v. Security Ins. Co.", 66, REPORTER_ABBREVIATIONS["cal2d"], 425, 1967)
EGAN = CaseCitation("Egan v. Mutual of Omaha Ins. Co.", 24, REPORTER_ABBREVIATIONS["cal3d"], 809, 1979)
GRACIANO = CaseCitation("Graciano v. Mercury General Corp.", 231, REPORTER_ABBREVIATIONS["calapp4th"], 414, 2014,
                        court=COURT_ABBREVIATIONS["cal_app_4th"])
INS_CODE_790_03 = StatuteCitation("Cal. Ins. Code", "790.03")
CIV_CODE_3295 = StatuteCitation("Cal. Civ. Code", "3295")

CA_SECTION_AUTHORITIES = {
    "policy_limits_demand": (COMUNALE, CRISCI),
    "liability": (INS_CODE_790_03,),
    "bad_faith_notice": (EGAN, COMUNALE, CRISCI, GRACIANO),
    "policy_disclosure_request": (INS_CODE_790_03, CIV_CODE_3295),
}

CA_LEGAL_RISKS = (
    "Allow carrier to reject demand as ambiguous or insufficient",
    "Fail to trigger bad faith duties under *Comunale v. Traders* and *Crisci v. Security*",
    "Prevent establishment of timeline for carrier's duty to settle",
)

CA_DESCRIPTION = (
    "California policy limits demand requirements include time-limited offers, policy disclosure "
    "requests, and proof of service documentation to establish bad faith timeline."
)


# === Proof of service ===
def build_ca_proof_of_service_checklist(case_info: dict) -> list:
    adjuster = case_info.get("adjuster_name") or "[Name TBD]"
    insured = case_info.get("insured_name") or "[Name TBD]"
    return [
        {
            "item": "Mailing Method Confirmed",
            "required": True,
            "description": "Use certified mail with return receipt OR overnight delivery with signature "
                           "confirmation. Email alone is insufficient for policy limits demands.",
        },
        {
            "item": "All Addresses Verified",
            "required": True,
            "description": f"Verify current addresses for: (1) Claims adjuster - {adjuster}, (2) Insurance "
                           f"company claims office, (3) Insured defendant - {insured}. Send to all three to "
                           f"avoid disputes over receipt.",
        },
        {
            "item": "Date/Time Documented",
            "required": True,
            "description": "Record exact date and time of mailing. This starts the deadline clock. Keep "
                           "tracking numbers and photographs of mailed package.",
        },
        {
            "item": "All Enclosures Included",
            "required": True,
            "description": "Verify demand includes: (1) Demand letter, (2) Medical records/bills, "
                           "(3) Accident reports, (4) Wage loss docs, (5) Photos of injuries/damage, "
                           "(6) Any expert reports. Incomplete demands may be rejected.",
        },
        {
            "item": "Exhibits Properly Marked",
            "required": True,
            "description": "Number all exhibits sequentially (A, B, C, etc.) and reference in demand letter. "
                           "Create index of exhibits for easy reference.",
        },
        {
            "item": "Delivery Confirmation Obtained",
            "required": True,
            "description": "Obtain signature confirmation showing date/time delivered and name of person who "
                           "signed. Follow up within 48 hours if not delivered.",
        },
        {
            "item": "Service Declaration Prepared",
            "required": False,
            "description": "Prepare declaration of service stating who served demand, when, where, and by "
                           "what method. Useful for later bad faith litigation.",
        },
        {
            "item": "Insured Copy Sent",
            "required": True,
            "description": f"Send courtesy copy to insured defendant ({insured}) at known address. This "
                           f"prevents carrier from claiming insured was unaware of excess exposure.",
        },
        {
            "item": "File Documentation Complete",
            "required": True,
            "description": "File should contain: (1) Copy of complete demand as sent, (2) Certified mail "
                           "receipts, (3) Delivery confirmations, (4) Proof insured was copied, (5) Calendar "
                           "entry for deadline date.",
        },
    ]


# === Case data → template tokens ===
def build_ca_template_data(case, config: AppConfig = None, today: date = None) -> dict:
    """
    Map a CaseData record onto the CA template tokens. Blank values are
    left blank so the template engine marks them [REQUIRED: token].
    Caller-supplied `template_fields` win over derived values.
    """
    config = config or get_config()
    today = today or date.today()

    economic_total = (
        case.total_medical_expenses
        + case.future_medical_expenses
        + case.past_lost_wages
        + case.future_lost_wages
        + case.property_damage
    )

    non_economic = {}
    if case.pain_suffering:
        non_economic["pain_suffering"] = case.pain_suffering
        non_economic["total"] = case.pain_suffering
    elif case.injury_severity and case.liability_strength:
        estimate = calculate_damages(
            case.total_medical_expenses,
            case.future_medical_expenses,
            case.past_lost_wages,
            case.future_lost_wages,
            case.property_damage,
            case.injury_severity,
            case.liability_strength,
            config=config,
        )["non_economic"]
        non_economic = {
            "pain_suffering": estimate["pain_suffering"],
            "emotional_distress": estimate["emotional_distress"],
            "loss_enjoyment": estimate["loss_of_enjoyment"],
            "total": estimate["total"],
        }

    if case.settlement_deadline:
        deadline = format_date(case.settlement_deadline)
    else:
        deadline = format_date(today + timedelta(days=config.DEFAULT_DEADLINE_DAYS))

    data = {
        "plaintiff_name": case.plaintiff_name,
        "insured_name": case.defendant_name,
        "insurance_company_name": case.insurance_company,
        "insurance_company_address": case.insurance_company_address,
        "company_name": case.insurance_company,
        "claim_number": case.claim_number,
        "current_date": format_date(today),
        "accident_date": format_date(case.incident_date),
        "policy_limits": format_currency(case.policy_limits),
        "medical_specials": format_currency(case.total_medical_expenses),
        "past_medical": format_currency(case.total_medical_expenses),
        "future_medical": format_currency(case.future_medical_expenses),
        "lost_earnings": format_currency(case.past_lost_wages),
        "loss_earning_capacity": format_currency(case.future_lost_wages),
        "property_damage": format_currency(case.property_damage),
        "total_economic": format_currency(economic_total),
        "total_damages": format_currency(
            case.total_damages or economic_total + non_economic.get("total", 0)
        ),
        "incident_description": case.incident_description,
        "treatment_summary": case.chronology_summary,
        "liability_basis": case.incident_description or "Defendant negligence",
        "deadline_date": deadline,
        "deadline_days": str(config.DEFAULT_DEADLINE_DAYS),
        "payment_days": str(config.PAYMENT_DAYS),
        "attorney_contact": case.attorney_firm or "[Attorney Contact Information]",
        "settlement_payee": case.plaintiff_name or "[Settlement Payee]",
        "settlement_address": "[Settlement Trust Account Address]",
    }
    for key in ("pain_suffering", "emotional_distress", "loss_enjoyment"):
        if key in non_economic:
            data[key] = format_currency(non_economic[key])
    if "total" in non_economic:
        data["total_noneconomic"] = format_currency(non_economic["total"])

    data.update({k: v for k, v in case.template_fields.items() if v})
    return data


def build_ca_rules() -> JurisdictionRules:
    return JurisdictionRules(
        code="CA",
        name="California",
        required_elements=CA_REQUIRED_ELEMENTS,
        templates=CA_DEMAND_TEMPLATES,
        advisory_sections=CA_ADVISORY_SECTIONS,
        section_checks=CA_SECTION_CHECKS,
        section_titles=CA_SECTION_TITLES,
        emit_order=CA_EMIT_ORDER,
        section_authorities=CA_SECTION_AUTHORITIES,
        narrative_authorities=(COMUNALE,),
        demand_label="policy limits demand",
        legal_risks=CA_LEGAL_RISKS,
        description=CA_DESCRIPTION,
        service_checklist=build_ca_proof_of_service_checklist,
        template_data=build_ca_template_data,
    )
