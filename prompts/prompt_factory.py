from jinja2 import Environment, BaseLoader

from core.constants import GENERIC_SECTIONS
from core.prompts.demand_example import SECTION_EXAMPLES
from core.prompts.demand_guidelines import FULL_SAFETY_PROMPT, SECTION_INSTRUCTIONS
from core.security import safe_log_text
from logger import logger
from services.damages import format_currency, format_date

# ==================== Jinja2 Environment ==================== #
jinja_env = Environment(loader=BaseLoader())

BASE_PROMPT_TEMPLATE = """
{{ safety_notes }}

You are drafting the **{{ section }}** section for {{ client_name }}.

Facts and content to use:
{{ summary }}

{% if example %}
Use the following as a tone/style example:
{{ example }}
{% endif %}

{{ extra_instructions }}
""".strip()

SECTION_FACTS_TEMPLATE = """
{% if case.incident_date %}Incident date: {{ incident_date }}
{% endif %}{% if case.incident_location %}Location: {{ case.incident_location }}
{% endif %}{% if case.defendant_name %}Defendant: {{ case.defendant_name }}
{% endif %}{% if section_key in ("facts_liability", "property_damage") %}Incident description: {{ case.incident_description or "Motor vehicle accident" }}
{% endif %}{% if section_key == "property_damage" %}Property damage amount: {{ money(case.property_damage) }}
{% endif %}{% if section_key in ("injuries_summary", "treatment", "lifestyle_impact") and case.chronology_summary %}Medical chronology:
{{ case.chronology_summary }}
{% endif %}{% if section_key in ("injuries_summary", "lifestyle_impact") and case.injuries %}Known injuries: {{ case.injuries | join("; ") }}
{% endif %}{% if section_key == "future_medical" %}Total future medical expenses: {{ money(case.future_medical_expenses) }}
{% endif %}
""".strip()


def build_prompt(
    section: str,
    summary: str,
    client_name: str = "the client",
    extra_instructions: str = "",
    example: str = "",
) -> str:
    template = jinja_env.from_string(BASE_PROMPT_TEMPLATE)
    return template.render(
        safety_notes=FULL_SAFETY_PROMPT,
        section=section,
        summary=summary.strip(),
        client_name=client_name.strip() or "the client",
        example=example.strip(),
        extra_instructions=extra_instructions.strip(),
    )


def build_section_facts(section_key: str, case) -> str:
    return jinja_env.from_string(SECTION_FACTS_TEMPLATE).render(
        case=case,
        section_key=section_key,
        incident_date=format_date(case.incident_date),
        money=format_currency,
    )


def build_section_prompt(section_key: str, case) -> str:
    """
    Drafting instructions for one narrative section of the generic demand.
    """
    title, _ = GENERIC_SECTIONS[section_key]
    prompt = build_prompt(
        section=title.title(),
        summary=build_section_facts(section_key, case) or "No additional facts provided.",
        client_name=case.first_name or case.plaintiff_name,
        extra_instructions=SECTION_INSTRUCTIONS.get(section_key, ""),
        example=SECTION_EXAMPLES.get(section_key, ""),
    )
    logger.debug(safe_log_text(f"[PROMPT_FACTORY] Built {section_key} prompt ({len(prompt)} chars)"))
    return prompt
