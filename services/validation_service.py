from core.error_handling import AppError, handle_error
from legal.jurisdictions import JurisdictionRegistry, build_default_registry, build_service_checklist
from legal.validator import validate
from logger import log_metric, logger


def validate_request(body: dict, registry: JurisdictionRegistry = None) -> dict:
    """
    Validate attorney-supplied sections for a jurisdiction.

    body: {"state": "CA", "sections": {key: content}, "case_info": {...}}
    Returns {ok, missing, warnings, checklist, message}. A malformed body
    raises AppError; an incomplete demand is a normal result.
    """
    body = body or {}
    state = str(body.get("state") or "").strip()
    sections = body.get("sections")

    if not state:
        raise AppError("VALIDATION_001", "State jurisdiction is required for validation.")
    if not isinstance(sections, dict):
        raise AppError(
            "VALIDATION_002",
            "Sections object is required with section names as keys and content as values.",
        )

    registry = build_default_registry() if registry is None else registry
    try:
        result = validate(state, sections, registry=registry)
        checklist = build_service_checklist(state, body.get("case_info") or {}, registry=registry)
    except Exception as e:
        handle_error(e, "VALIDATION_003", "Failed to validate demand pack.", raise_it=True,
                     context={"state": state})

    if result.ok:
        message = "Demand pack validation successful. All required sections present."
    else:
        message = f"Demand pack incomplete. Missing {len(result.missing)} required section(s)."

    log_metric("demand_validation", 1, {"state": state.upper(), "ok": result.ok, "missing": len(result.missing)})
    logger.info(f"[VALIDATION_SERVICE] {state.upper()}: {message}")

    return {
        "ok": result.ok,
        "missing": result.missing,
        "warnings": result.warnings,
        "checklist": checklist,
        "message": message,
    }


def get_requirements(state: str, registry: JurisdictionRegistry = None) -> dict:
    if not state or not str(state).strip():
        raise AppError("VALIDATION_001", "State jurisdiction is required for validation.")

    state = str(state).strip().upper()
    registry = build_default_registry() if registry is None else registry
    rules = registry.get(state)
    if rules is None:
        return {
            "state": state,
            "requiredElements": [],
            "description": f"No specific validation requirements defined for {state}. "
                           f"Standard demand letter best practices apply.",
            "supported": False,
        }
    return {
        "state": state,
        "requiredElements": list(rules.required_elements),
        "description": rules.description,
        "supported": True,
    }
