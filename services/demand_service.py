"""
Demand assembly.

`assemble_demand` picks a composition strategy per request:

* templated jurisdiction path: the jurisdiction has registered rules and the
  request is a policy-limits demand. Every template is filled, the filled map
  is validated, and a compliance banner is prepended when it is incomplete.
* generic narrative path: everything else. Prose sections are drafted
  concurrently; tables, header and conclusion are filled directly.

Per-run state (citations, anchors, warnings) lives in a RunContext created
for each call, so concurrent runs never share registries.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date

from config import AppConfig, get_config
from core.constants import (
    COMPLIANCE_BANNER_ORDER,
    COMPLIANCE_BANNER_TITLE,
    DEMAND_TYPE_POLICY_LIMITS,
    GENERIC_SECTIONS,
    SECTION_SEPARATOR,
    TABLE_OF_AUTHORITIES_TITLE,
)
from core.error_handling import InvalidAnchorError, log_info, log_warning
from core.models import AssembledDemand, CaseData, Section
from legal import generic_templates
from legal.anchors import AnchorLog
from legal.citations import CitationRegistry
from legal.jurisdictions import JurisdictionRegistry, JurisdictionRules, build_default_registry
from legal.validator import validate
from logger import log_metric, logger
from prompts.prompt_factory import build_section_prompt
from services.damages import format_currency, format_date
from services.drafting import draft_section, section_fallback
from services.openai_client import DraftingClient
from services.reasonableness import FeeSchedule, build_reasonableness_rows, build_reasonableness_section
from services.verdicts import VerdictCatalog, build_comparable_outcomes_section
from utils.template_engine import fill, required_marker

DRAFTED_SECTIONS = (
    "facts_liability",
    "property_damage",
    "injuries_summary",
    "treatment",
    "future_medical",
    "lifestyle_impact",
)


@dataclass
class RunContext:
    citations: CitationRegistry = field(default_factory=CitationRegistry)
    anchors: AnchorLog = field(default_factory=AnchorLog)
    warnings: list = field(default_factory=list)

    def register_all(self, citations):
        for citation in citations or ():
            self.citations.register(citation)

    def chips(self, section_key: str, sources: list) -> str:
        """Inline chips for a section's sources; invalid anchors are skipped with a warning."""
        rendered = []
        for cite in sources or []:
            try:
                rendered.append(self.anchors.cite(section_key, cite))
            except InvalidAnchorError as e:
                log_warning(f"Skipping source '{cite.label}' in {section_key}: {e.message}", code=e.code)
                self.warnings.append(f'Source "{cite.label}" in section "{section_key}" has no locating field and was omitted.')
        return " ".join(rendered)


def _with_chips(content: str, chips: str) -> str:
    return f"{content} {chips}" if chips else content


def is_policy_limits_request(case: CaseData) -> bool:
    return case.demand_type == DEMAND_TYPE_POLICY_LIMITS or case.policy_limits_demand


def select_strategy(case: CaseData, registry: JurisdictionRegistry) -> str:
    rules = registry.get(case.jurisdiction)
    if rules is not None and is_policy_limits_request(case):
        return "templated"
    return "generic"


def _generic_section(key: str, content: str, required: bool = True) -> Section:
    title, order = GENERIC_SECTIONS[key]
    return Section(title=title, content=content, order=order, required=required)


def _draft_fallbacks(case: CaseData) -> dict:
    return {
        "facts_liability": section_fallback("Liability section"),
        "property_damage": (
            f"On {format_date(case.incident_date) or '[Incident Date]'}, property damage occurred "
            f"in the amount of {format_currency(case.property_damage)}."
        ),
        "injuries_summary": "Injuries to be determined from medical records.",
        "treatment": "[Treatment narrative to be written from medical chronology]",
        "future_medical": f"{case.plaintiff_name or 'The client'} will require additional medical treatment.",
        "lifestyle_impact": section_fallback("Lifestyle impact section"),
    }


async def _draft_many(keys, case: CaseData, client, ctx: RunContext) -> dict:
    fallbacks = _draft_fallbacks(case)
    results = await asyncio.gather(*(
        draft_section(client, build_section_prompt(key, case), fallbacks[key], key, ctx.warnings)
        for key in keys
    ))
    return dict(zip(keys, results))


# === Generic narrative path ===
async def _assemble_generic(case, rules, ctx, client, fee_schedule, verdict_catalog, config, today) -> list:
    keys = [k for k in DRAFTED_SECTIONS if not (
        (k == "property_damage" and case.property_damage <= 0)
        or (k == "future_medical" and case.future_medical_expenses <= 0)
    )]
    drafted = await _draft_many(keys, case, client, ctx)

    sections = [
        _generic_section("header", generic_templates.build_header(case, today)),
        _generic_section("introduction", generic_templates.INTRODUCTION_TEXT),
    ]

    liability = _with_chips(drafted["facts_liability"], ctx.chips("facts_liability", case.liability_sources))
    if rules is not None:
        ctx.register_all(rules.narrative_authorities)
    sections.append(_generic_section("facts_liability", liability))

    if "property_damage" in drafted:
        sections.append(_generic_section("property_damage", drafted["property_damage"], required=False))

    injuries = (
        f"As a result of the collision, {case.plaintiff_name or '[Plaintiff Name]'} sustained the following "
        f"injuries:\n\n{drafted['injuries_summary']}"
    )
    sections.append(_generic_section("injuries_summary", injuries))

    treatment = _with_chips(drafted["treatment"], ctx.chips("treatment", case.treatment_sources))
    sections.append(_generic_section("treatment", treatment))
    sections.append(_generic_section("medical_expenses", generic_templates.build_medical_expenses_table(case)))

    reasonableness = _build_reasonableness(case, ctx, fee_schedule, config, today)
    if reasonableness:
        sections.append(_generic_section("reasonableness", reasonableness, required=False))

    if "future_medical" in drafted:
        future = f"{drafted['future_medical']}\n\n{generic_templates.build_future_medical_table(case)}"
        sections.append(_generic_section("future_medical", future, required=False))

    sections.append(_generic_section("lifestyle_impact", drafted["lifestyle_impact"]))
    sections.append(_generic_section("damages_summary", generic_templates.build_damages_summary_table(case)))

    comparables = _build_comparables(case, verdict_catalog, config)
    if comparables:
        sections.append(_generic_section("comparable_outcomes", comparables, required=False))

    demand_type = DEMAND_TYPE_POLICY_LIMITS if is_policy_limits_request(case) else case.demand_type
    sections.append(_generic_section(
        "conclusion", generic_templates.build_conclusion(case, demand_type, today, config)
    ))
    sections.append(_generic_section("exhibits", generic_templates.build_exhibits_list(case)))
    return sections


def _build_reasonableness(case, ctx, fee_schedule, config, today) -> str:
    if not case.billing_entries:
        return ""
    try:
        rows = build_reasonableness_rows(case.billing_entries, fee_schedule, config=config)
    except (TypeError, ValueError) as e:
        log_warning(f"Reasonableness analysis failed: {e}", code="REASONABLENESS_001")
        ctx.warnings.append("Reasonableness of charges could not be analyzed from the billing entries.")
        return ""
    if not any(r.variance_pct is not None for r in rows):
        return ""
    return build_reasonableness_section(rows, config=config, today=today)


def _build_comparables(case, verdict_catalog, config) -> str:
    if not case.jurisdiction or not case.injuries:
        return ""
    verdicts = verdict_catalog.find_comparable(
        case.jurisdiction, case.injuries, limit=config.COMPARABLE_VERDICT_LIMIT
    )
    if not verdicts:
        return ""
    return build_comparable_outcomes_section(case.jurisdiction, verdicts)


# === Templated jurisdiction path ===
def fill_jurisdiction_templates(case: CaseData, rules: JurisdictionRules, config: AppConfig = None,
                                today: date = None) -> dict:
    """
    Fill every template of the jurisdiction. Attorney-written
    `section_overrides` replace the fill; an empty override blanks the section.
    """
    data = rules.template_data(case, config=config, today=today) if rules.template_data else {}
    filled = {key: fill(template, data) for key, template in rules.templates.items()}
    for key, content in case.section_overrides.items():
        filled[key] = content
    return filled


def build_compliance_banner(rules: JurisdictionRules, result, substituted: list = None) -> str:
    lines = [
        f"> **{rules.name.upper()} LEGAL COMPLIANCE CHECK**",
        "> ",
        f"> ⚠️ This demand is **INCOMPLETE** and may not meet {rules.name} legal requirements "
        f"for {rules.demand_label}s.",
        "> ",
        f"> **Missing Required Sections ({len(result.missing)}):**",
        "> ",
    ]
    lines += [f"> - `{key}` - Required for valid {rules.code} {rules.demand_label}" for key in result.missing]
    if result.warnings:
        lines += ["> ", "> **Additional Warnings:**", "> "]
        lines += [f"> - {w}" for w in result.warnings]
    if substituted:
        lines += ["> ", "> **Substituted Content:**", "> "]
        lines += [f"> - `{key}` was left blank; generic content was inserted below and must be "
                  f"reviewed before serving" for key in substituted]
    lines += ["> ", "> **LEGAL RISK:** Sending an incomplete demand may:"]
    lines += [f"> - {risk}" for risk in rules.legal_risks]
    lines += ["> ", "> **ACTION REQUIRED:** Complete all missing sections before serving this demand."]
    return "\n".join(lines)


def _is_blank(content) -> bool:
    return content is None or not str(content).strip()


async def _assemble_templated(case, rules, registry, ctx, client, config, today):
    filled = fill_jurisdiction_templates(case, rules, config, today)
    result = validate(rules.code, filled, registry=registry)

    # Blank liability, medical summary and damages fall back to generic content,
    # after validation has seen the filled map.
    drafted_for = {"liability": "facts_liability", "medical_summary": "treatment"}
    to_draft = [draft_key for key, draft_key in drafted_for.items()
                if key in rules.emit_order and _is_blank(filled.get(key))]
    drafted = await _draft_many(to_draft, case, client, ctx) if to_draft else {}

    sections = []
    substituted = []
    sources = {"liability": case.liability_sources, "medical_summary": case.treatment_sources}
    for position, key in enumerate(rules.emit_order, start=1):
        content = filled.get(key)
        if _is_blank(content):
            if key in drafted_for and drafted_for[key] in drafted:
                content = drafted[drafted_for[key]]
                substituted.append(key)
            elif key == "damages_summary":
                content = generic_templates.build_damages_summary_table(case)
                substituted.append(key)
            elif key in rules.required_elements:
                content = required_marker(key)
            else:
                log_info(f"Omitting blank optional section {key}", code="DEMAND_ASSEMBLY")
                continue

        if key in sources:
            content = _with_chips(content, ctx.chips(key, sources[key]))
        ctx.register_all(rules.section_authorities.get(key, ()))
        sections.append(Section(
            title=rules.title_for(key),
            content=str(content).strip(),
            order=position,
            required=key in rules.required_elements,
        ))

    if not result.ok:
        sections.insert(0, Section(
            title=COMPLIANCE_BANNER_TITLE,
            content=build_compliance_banner(rules, result, substituted),
            order=COMPLIANCE_BANNER_ORDER,
            required=True,
        ))

    return sections, result


# === Entry point ===
def render_full_text(sections: list) -> str:
    return SECTION_SEPARATOR.join(f"# {s.title}\n\n{s.content}" for s in sections)


def _table_of_authorities_order(sections: list, strategy: str) -> float:
    if strategy == "generic":
        return GENERIC_SECTIONS["table_of_authorities"][1]
    return max((s.order for s in sections), default=0) + 1


async def assemble_demand(
    case,
    registry: JurisdictionRegistry = None,
    drafting_client=None,
    fee_schedule: FeeSchedule = None,
    verdict_catalog: VerdictCatalog = None,
    config: AppConfig = None,
    today: date = None,
) -> AssembledDemand:
    """
    Assemble one demand letter. Missing case data never aborts assembly; it
    shows up as bracketed markers in the text and, for templated
    jurisdictions, in the validation result and compliance banner.
    """
    if not isinstance(case, CaseData):
        case = CaseData.from_dict(case)
    config = config or get_config()
    registry = build_default_registry() if registry is None else registry
    drafting_client = drafting_client or DraftingClient(config)
    fee_schedule = fee_schedule or FeeSchedule()
    verdict_catalog = verdict_catalog or VerdictCatalog()
    today = today or date.today()
    ctx = RunContext()

    rules = registry.get(case.jurisdiction)
    strategy = select_strategy(case, registry)
    logger.info(
        f"[DEMAND_ASSEMBLY] 🚀 Assembling {strategy} demand for case {case.case_id or '(no id)'} "
        f"jurisdiction={case.jurisdiction or 'none'} type={case.demand_type}"
    )

    validation = None
    if strategy == "templated":
        sections, validation = await _assemble_templated(case, rules, registry, ctx, drafting_client, config, today)
    else:
        sections = await _assemble_generic(
            case, rules, ctx, drafting_client, fee_schedule, verdict_catalog, config, today
        )

    if ctx.citations:
        sections.append(Section(
            title=TABLE_OF_AUTHORITIES_TITLE,
            content=ctx.citations.to_table_of_authorities(include_heading=False),
            order=_table_of_authorities_order(sections, strategy),
            required=False,
        ))

    # stable: ties keep insertion order
    sections = sorted(sections, key=lambda s: s.order)

    log_metric("demand_sections", len(sections), {"strategy": strategy, "jurisdiction": case.jurisdiction})
    if ctx.warnings:
        log_metric("demand_run_warnings", len(ctx.warnings), {"strategy": strategy})
    logger.info(f"[DEMAND_ASSEMBLY] ✅ Assembled {len(sections)} sections ({len(ctx.citations)} citations)")

    return AssembledDemand(
        sections=sections,
        full_text=render_full_text(sections),
        validation=validation,
        citations=ctx.citations.all(),
        anchors=ctx.anchors.entries(),
        warnings=list(ctx.warnings),
    )


def generate_demand(case, **kwargs) -> AssembledDemand:
    """Synchronous wrapper for scripts; do not call from inside a running event loop."""
    return asyncio.run(assemble_demand(case, **kwargs))
