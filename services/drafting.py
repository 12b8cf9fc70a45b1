from core.constants import DRAFT_FALLBACK_TEMPLATE
from core.error_handling import log_warning
from logger import log_metric


def section_fallback(section_title: str) -> str:
    return DRAFT_FALLBACK_TEMPLATE.format(section=section_title)


async def draft_section(client, instructions: str, fallback: str, section_key: str,
                        warnings: list) -> str:
    """
    Ask the drafting collaborator for one section.

    Any failure, and an empty reply, yields `fallback`. The problem is logged
    and recorded in `warnings` (the run's list, not the document).
    """
    try:
        text = await client.draft(instructions)
    except Exception as e:
        log_warning(f"Drafting failed for {section_key}: {e}", code="DRAFT_001")
        log_metric("drafting_fallback", 1, {"section": section_key})
        warnings.append(f'Section "{section_key}" could not be drafted ({type(e).__name__}); placeholder text used.')
        return fallback

    text = (text or "").strip()
    if not text:
        log_warning(f"Drafting returned no text for {section_key}", code="DRAFT_002")
        warnings.append(f'Section "{section_key}" came back empty from drafting; placeholder text used.')
        return fallback
    return text
