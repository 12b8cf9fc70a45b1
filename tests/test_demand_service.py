import asyncio

import pytest

from core.models import CaseData
from legal.jurisdictions import build_default_registry
from legal.validator import validate
from services.demand_service import (
    assemble_demand,
    build_compliance_banner,
    fill_jurisdiction_templates,
    generate_demand,
    is_policy_limits_request,
    select_strategy,
)


def _assemble(case, client, config, today, **kwargs):
    return asyncio.run(assemble_demand(case, drafting_client=client, config=config, today=today, **kwargs))


def _titles(demand):
    return [s.title for s in demand.sections]


# === Strategy ===
@pytest.mark.parametrize("overrides, expected", [
    ({}, "generic"),
    ({"demand_type": "policy_limits"}, "templated"),
    ({"demand_type": "Stowers"}, "templated"),
    ({"policy_limits_demand": True}, "templated"),
    ({"demand_type": "policy_limits", "jurisdiction": "ZZ"}, "generic"),
    ({"demand_type": "policy_limits", "jurisdiction": ""}, "generic"),
])
def test_select_strategy(case_record, overrides, expected):
    case = CaseData.from_dict(dict(case_record, **overrides))
    assert select_strategy(case, build_default_registry()) == expected


def test_is_policy_limits_request():
    assert is_policy_limits_request(CaseData(demand_type="policy_limits"))
    assert not is_policy_limits_request(CaseData(demand_type="uim"))


# === Generic narrative path ===
def test_generic_demand_sections_in_order(case_record, fake_client, config, today):
    demand = _assemble(case_record, fake_client, config, today)

    assert _titles(demand) == [
        "HEADER",
        "INTRODUCTION",
        "FACTS AND LIABILITY",
        "PROPERTY DAMAGE",
        "SUMMARY OF PHYSICAL INJURIES",
        "TREATMENT OF INJURIES",
        "MEDICAL EXPENSES",
        "REASONABLENESS OF CHARGES",
        "FUTURE MEDICAL EXPENSES",
        "LIFESTYLE IMPACT",
        "SUMMARY OF DAMAGES",
        "COMPARABLE OUTCOMES",
        "CONCLUSION",
        "EXHIBITS",
        "TABLE OF AUTHORITIES",
    ]
    orders = [s.order for s in demand.sections]
    assert orders == sorted(orders)
    assert demand.validation is None
    assert demand.warnings == []
    assert len(fake_client.prompts) == 6


def test_generic_demand_content(case_record, fake_client, config, today):
    demand = _assemble(case_record, fake_client, config, today)
    by_title = {s.title: s for s in demand.sections}

    assert by_title["FACTS AND LIABILITY"].content == "Drafted section text."
    assert by_title["SUMMARY OF PHYSICAL INJURIES"].content.startswith(
        "As a result of the collision, Maria Lopez sustained the following injuries:"
    )
    assert "| Total Future Medical Expenses | **$6,000** |" in by_title["FUTURE MEDICAL EXPENSES"].content
    assert by_title["PROPERTY DAMAGE"].required is False
    assert "## Comparable Outcomes (CA)" in by_title["COMPARABLE OUTCOMES"].content
    assert "Comunale v. Traders & Gen. Ins. Co., 50 Cal.2d 654 (1958)" in by_title["TABLE OF AUTHORITIES"].content
    assert demand.full_text.startswith("# HEADER\n\n# SETTLEMENT DEMAND")
    assert "\n\n---\n\n# INTRODUCTION" in demand.full_text


def test_generic_demand_skips_empty_optional_sections(case_record, fake_client, config, today):
    record = dict(case_record, property_damage=0, future_medical_expenses=0, billing_entries=[],
                  injuries="", jurisdiction="NY")
    demand = _assemble(record, fake_client, config, today)

    titles = _titles(demand)
    for title in ("PROPERTY DAMAGE", "FUTURE MEDICAL EXPENSES", "REASONABLENESS OF CHARGES",
                  "COMPARABLE OUTCOMES", "TABLE OF AUTHORITIES"):
        assert title not in titles
    assert len(fake_client.prompts) == 4
    assert demand.citations == []


def test_drafting_failure_is_isolated(case_record, make_client, config, today):
    client = make_client(fail_on=["**Treatment Of Injuries**"])
    demand = _assemble(case_record, client, config, today)
    by_title = {s.title: s for s in demand.sections}

    assert by_title["TREATMENT OF INJURIES"].content == "[Treatment narrative to be written from medical chronology]"
    assert by_title["LIFESTYLE IMPACT"].content == "Drafted section text."
    assert demand.warnings == [
        'Section "treatment" could not be drafted (RuntimeError); placeholder text used.'
    ]


def test_every_drafting_failure_still_assembles(case_record, make_client, config, today):
    demand = _assemble(case_record, make_client(fail_on=["You are drafting"]), config, today)
    by_title = {s.title: s for s in demand.sections}

    assert len(demand.warnings) == 6
    assert by_title["FACTS AND LIABILITY"].content == "[Liability section to be written]"
    assert by_title["PROPERTY DAMAGE"].content == "On June 15, 2023, property damage occurred in the amount of $7,300."
    assert by_title["FUTURE MEDICAL EXPENSES"].content.startswith("Maria Lopez will require additional medical treatment.")


def test_source_chips_and_anchor_log(case_record, fake_client, config, today):
    record = dict(
        case_record,
        liability_sources=[{"label": "Police Report", "page": 2, "line_start": 4}],
        treatment_sources=[
            {"label": "ER Records", "bates": "0023", "line_start": 7, "line_end": 19},
            {"label": "Unlocated note", "line_start": 3},
        ],
    )
    demand = _assemble(record, fake_client, config, today)
    by_title = {s.title: s for s in demand.sections}

    assert by_title["FACTS AND LIABILITY"].content.endswith("[p.2, L4]")
    assert by_title["TREATMENT OF INJURIES"].content == "Drafted section text. [Bates 0023, L7–L19]"
    assert [e.section_key for e in demand.anchors] == ["facts_liability", "treatment"]
    assert demand.warnings == [
        'Source "Unlocated note" in section "treatment" has no locating field and was omitted.'
    ]


def test_policy_limits_without_rules_uses_generic_conclusion(case_record, fake_client, config, today):
    record = dict(case_record, jurisdiction="ZZ", demand_type="policy_limits")
    demand = _assemble(record, fake_client, config, today)
    conclusion = {s.title: s for s in demand.sections}["CONCLUSION"]

    assert demand.validation is None
    assert "formal **policy limits demand**" in conclusion.content


# === Templated jurisdiction path ===
def test_filled_ca_demand_has_no_banner(case_record, fake_client, config, today):
    demand = _assemble(dict(case_record, demand_type="policy_limits"), fake_client, config, today)

    assert demand.validation.ok
    assert _titles(demand) == [
        "COVER LETTER",
        "POLICY LIMITS SETTLEMENT OFFER",
        "LIABILITY ANALYSIS",
        "MEDICAL TREATMENT SUMMARY",
        "DAMAGES SUMMARY",
        "BAD FAITH NOTICE TO CARRIER",
        "POLICY DISCLOSURE REQUEST",
        "ACCEPTANCE DEADLINE & TERMS",
        "PROOF OF SERVICE",
        "TABLE OF AUTHORITIES",
    ]
    assert [s.order for s in demand.sections] == list(range(1, 11))
    # unfilled template tokens surface as markers and warnings, not failures
    assert "[REQUIRED: negligence_factors]" in demand.full_text
    assert any("negligence_factors" in w for w in demand.validation.warnings)
    assert fake_client.prompts == []


def test_templated_citations_are_deduplicated(case_record, fake_client, config, today):
    demand = _assemble(dict(case_record, demand_type="policy_limits"), fake_client, config, today)

    assert [c.format() for c in demand.citations] == [
        "Comunale v. Traders & Gen. Ins. Co., 50 Cal.2d 654 (1958)",
        "Crisci v. Security Ins. Co., 66 Cal.2d 425 (1967)",
        "Cal. Ins. Code § 790.03",
        "Egan v. Mutual of Omaha Ins. Co., 24 Cal.3d 809 (1979)",
        "Graciano v. Mercury General Corp., 231 Cal.App.4th 414 (Cal. Ct. App. 4th Dist. 2014)",
        "Cal. Civ. Code § 3295",
    ]
    toa = demand.sections[-1].content
    assert toa.index("Graciano") < toa.index("## Statutes") < toa.index("§ 790.03")


def test_incomplete_ca_demand_gets_banner_first(case_record, fake_client, config, today):
    record = dict(case_record, demand_type="policy_limits",
                  section_overrides={"proof_of_service": "", "damages_summary": "  "})
    demand = _assemble(record, fake_client, config, today)

    assert not demand.validation.ok
    assert demand.validation.missing == ["proof_of_service", "damages_summary"]

    banner = demand.sections[0]
    assert banner.order == 0
    assert "> **CALIFORNIA LEGAL COMPLIANCE CHECK**" in banner.content
    assert "> **Missing Required Sections (2):**" in banner.content
    assert "> - `proof_of_service` - Required for valid CA policy limits demand" in banner.content
    assert "ACTION REQUIRED" in banner.content

    by_title = {s.title: s for s in demand.sections}
    assert by_title["PROOF OF SERVICE"].content == "[REQUIRED: proof_of_service]"
    assert by_title["DAMAGES SUMMARY"].content.startswith("| Category | Amount |")
    assert "> **Substituted Content:**" in banner.content
    assert "> - `damages_summary` was left blank; generic content was inserted below" in banner.content
    assert "> - `proof_of_service` was left blank" not in banner.content


def test_blank_liability_falls_back_to_drafted_facts(case_record, fake_client, config, today):
    record = dict(case_record, demand_type="policy_limits", section_overrides={"liability": ""},
                  liability_sources=[{"label": "Police Report", "exhibit": "B", "page": 3}])
    demand = _assemble(record, fake_client, config, today)
    by_title = {s.title: s for s in demand.sections}

    assert demand.validation.missing == ["liability"]
    assert by_title["LIABILITY ANALYSIS"].content == "Drafted section text. [Ex. B, p.3]"
    assert "> - `liability` was left blank; generic content was inserted below" in demand.sections[0].content
    assert len(fake_client.prompts) == 1


def test_blank_optional_section_is_omitted(case_record, fake_client, config, today):
    record = dict(case_record, demand_type="policy_limits", section_overrides={"bad_faith_notice": ""})
    demand = _assemble(record, fake_client, config, today)

    assert "BAD FAITH NOTICE TO CARRIER" not in _titles(demand)
    assert demand.validation.ok
    assert any("bad_faith_notice" in w for w in demand.validation.warnings)
    # Egan and Graciano are only cited from the omitted section
    assert all("Egan" not in c.format() for c in demand.citations)


def test_attorney_override_replaces_template(case_record, config, today):
    case = CaseData.from_dict(dict(case_record, section_overrides={"liability": "Custom liability text."}))
    rules = build_default_registry().get("CA")
    filled = fill_jurisdiction_templates(case, rules, config, today)

    assert filled["liability"] == "Custom liability text."
    assert "Maria Lopez" in filled["cover_letter"]


def test_compliance_banner_lists_warnings():
    rules = build_default_registry().get("CA")
    result = validate("CA", {"deadline_language": "Respond soon."})
    banner = build_compliance_banner(rules, result)

    assert "> **Missing Required Sections (5):**" in banner
    assert "> **Additional Warnings:**" in banner
    assert "> - Allow carrier to reject demand as ambiguous or insufficient" in banner
    assert "Substituted Content" not in banner


# === Runs ===
def test_concurrent_runs_do_not_share_state(case_record, make_client, config, today):
    async def both():
        return await asyncio.gather(
            assemble_demand(dict(case_record, demand_type="policy_limits"), drafting_client=make_client(),
                            config=config, today=today),
            assemble_demand(dict(case_record, jurisdiction="NY"), drafting_client=make_client(),
                            config=config, today=today),
        )

    ca_demand, ny_demand = asyncio.run(both())
    assert len(ca_demand.citations) == 6
    assert ny_demand.citations == []


def test_generate_demand_sync_wrapper(case_record, fake_client, config, today):
    demand = generate_demand(case_record, drafting_client=fake_client, config=config, today=today)
    payload = demand.to_dict()

    assert payload["validation"] is None
    assert payload["citations"] == ["Comunale v. Traders & Gen. Ins. Co., 50 Cal.2d 654 (1958)"]
    assert payload["sections"][0]["title"] == "HEADER"
