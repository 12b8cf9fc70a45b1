"""
Compliance validation for jurisdiction-specific demand packs.

Structural omissions (a required section absent or blank) go to `missing`.
Everything else (unfilled placeholders, a missing dollar figure or
deadline keyword, absent advisory sections) is a non-blocking warning.
Nothing here raises for a bad document; validation issues are data.
"""

from core.models import ValidationResult
from legal.jurisdictions import JurisdictionRegistry, build_default_registry
from logger import logger
from utils.template_engine import find_required_markers, has_unresolved_placeholders


def _registry(registry: JurisdictionRegistry = None) -> JurisdictionRegistry:
    return build_default_registry() if registry is None else registry


def _is_blank(content) -> bool:
    return content is None or str(content).strip() == ""


def validate(jurisdiction: str, filled_sections: dict,
             registry: JurisdictionRegistry = None) -> ValidationResult:
    rules = _registry(registry).get(jurisdiction)
    if rules is None:
        logger.info(f"[VALIDATOR] No rules for jurisdiction {jurisdiction!r}; passing through")
        return ValidationResult(
            ok=True,
            missing=[],
            warnings=[f"no validation rules defined for {jurisdiction}"],
        )

    filled_sections = filled_sections or {}
    missing = []
    warnings = []

    for key in rules.required_elements:
        content = filled_sections.get(key)
        if _is_blank(content):
            missing.append(key)
            continue
        content = str(content).strip()

        if has_unresolved_placeholders(content):
            warnings.append(
                f'Section "{key}" contains unfilled placeholders ({{{{...}}}}). '
                f"Please complete all required fields."
            )

        blanks = find_required_markers(content)
        if blanks:
            warnings.append(f'Section "{key}" has required fields left blank: {", ".join(blanks)}.')

        for check in rules.section_checks:
            if check.section_key == key and not check.passes(content):
                warnings.append(check.message)

    for key, message in rules.advisory_sections.items():
        if _is_blank(filled_sections.get(key)):
            warnings.append(message)

    result = ValidationResult(ok=not missing, missing=missing, warnings=warnings)
    logger.info(
        f"[VALIDATOR] {rules.code}: ok={result.ok} missing={len(missing)} warnings={len(warnings)}"
    )
    return result


def format_validation_result(result: ValidationResult) -> str:
    if result.ok:
        message = "✓ Demand pack validation passed. All required sections present."
        if result.warnings:
            message += "\n\nWarnings:\n" + "\n".join(f"• {w}" for w in result.warnings)
        return message

    message = "✗ Demand pack validation failed.\n\n"
    message += f"Missing required sections ({len(result.missing)}):\n"
    message += "\n".join(f"• {m}" for m in result.missing)
    if result.warnings:
        message += "\n\nAdditional warnings:\n" + "\n".join(f"• {w}" for w in result.warnings)
    return message


def get_required_elements(jurisdiction: str, registry: JurisdictionRegistry = None) -> list:
    rules = _registry(registry).get(jurisdiction)
    return list(rules.required_elements) if rules else []


def is_supported_jurisdiction(jurisdiction: str, registry: JurisdictionRegistry = None) -> bool:
    return jurisdiction in _registry(registry)
