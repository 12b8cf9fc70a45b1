import re

SECRET_PATTERN = r"(api|key|token|secret|sk-)[^\s\"']+"

# Case-data fields that identify a claimant or carry medical history.
PHI_FIELDS = [
    "client",
    "claimant",
    "plaintiff",
    "insured",
    "email",
    "phone",
    "summary",
    "chronology",
    "narrative",
]


def redact_log(text: str) -> str:
    """
    Strip anything that looks like a credential before it reaches a log line.
    """
    if not isinstance(text, str):
        text = str(text)
    return re.sub(SECRET_PATTERN, "***REDACTED***", text, flags=re.IGNORECASE)


def mask_phi(text: str) -> str:
    """
    Replace `field: value` / `field=value` pairs for identifying fields with
    [REDACTED]. Values run until the next comma or end of line.
    """
    if not isinstance(text, str):
        text = str(text)
    for field in PHI_FIELDS:
        text = re.sub(
            rf"({field}\w*\s*[:=][^,\n]*)", "[REDACTED]", text, flags=re.IGNORECASE
        )
    return text


def safe_log_text(text: str) -> str:
    return redact_log(mask_phi(text))
