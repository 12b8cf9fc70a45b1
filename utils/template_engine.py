import re

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")
REQUIRED_MARKER_PATTERN = re.compile(r"\[REQUIRED: ([^\]]+)\]")


def required_marker(key: str) -> str:
    return f"[REQUIRED: {key}]"


def fill(template: str, data: dict) -> str:
    """
    Flat placeholder substitution.

    Every {{key}} is replaced by data[key] when present and non-empty,
    otherwise by a visible [REQUIRED: key] marker. Substituted values are
    not rescanned, so a value containing {{...}} is emitted verbatim.
    No escaping, conditionals or loops.
    Example: fill("Dear {{name}}", {}) → "Dear [REQUIRED: name]"
    """
    data = data or {}

    def _substitute(match):
        key = match.group(1).strip()
        value = data.get(key)
        if value is None or str(value).strip() == "":
            return required_marker(key)
        return str(value)

    return PLACEHOLDER_PATTERN.sub(_substitute, template or "")


def find_placeholders(text: str) -> list:
    """Ordered, unique keys of raw {{...}} tokens still present in `text`."""
    keys = []
    for match in PLACEHOLDER_PATTERN.finditer(text or ""):
        key = match.group(1).strip()
        if key not in keys:
            keys.append(key)
    return keys


def has_unresolved_placeholders(text: str) -> bool:
    return bool(PLACEHOLDER_PATTERN.search(text or ""))


def find_required_markers(text: str) -> list:
    keys = []
    for match in REQUIRED_MARKER_PATTERN.finditer(text or ""):
        key = match.group(1).strip()
        if key not in keys:
            keys.append(key)
    return keys
