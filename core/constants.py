# ----------------------------
# 📌 Demand Types
# ----------------------------
DEMAND_TYPE_STANDARD = "standard"
DEMAND_TYPE_UIM = "uim"
DEMAND_TYPE_POLICY_LIMITS = "policy_limits"

DEMAND_TYPES = [
    DEMAND_TYPE_STANDARD,
    DEMAND_TYPE_UIM,
    DEMAND_TYPE_POLICY_LIMITS,
]

# Legacy intake sheets call a time-limited policy-limits demand a "Stowers" demand
DEMAND_TYPE_ALIASES = {
    "stowers": DEMAND_TYPE_POLICY_LIMITS,
    "underinsured": DEMAND_TYPE_UIM,
    "underinsured_motorist": DEMAND_TYPE_UIM,
    "policy-limits": DEMAND_TYPE_POLICY_LIMITS,
}

# ----------------------------
# 📄 Document Layout
# ----------------------------
SECTION_SEPARATOR = "\n\n---\n\n"
COMPLIANCE_BANNER_TITLE = "⚠️ COMPLIANCE CHECK"
COMPLIANCE_BANNER_ORDER = 0
TABLE_OF_AUTHORITIES_TITLE = "TABLE OF AUTHORITIES"

# Generic narrative path: (title, order)
GENERIC_SECTIONS = {
    "header": ("HEADER", 1),
    "introduction": ("INTRODUCTION", 2),
    "facts_liability": ("FACTS AND LIABILITY", 3),
    "property_damage": ("PROPERTY DAMAGE", 4),
    "injuries_summary": ("SUMMARY OF PHYSICAL INJURIES", 5),
    "treatment": ("TREATMENT OF INJURIES", 6),
    "medical_expenses": ("MEDICAL EXPENSES", 7),
    "reasonableness": ("REASONABLENESS OF CHARGES", 7.5),
    "future_medical": ("FUTURE MEDICAL EXPENSES", 8),
    "lifestyle_impact": ("LIFESTYLE IMPACT", 9),
    "damages_summary": ("SUMMARY OF DAMAGES", 10),
    "comparable_outcomes": ("COMPARABLE OUTCOMES", 10.5),
    "conclusion": ("CONCLUSION", 11),
    "exhibits": ("EXHIBITS", 12),
    "table_of_authorities": (TABLE_OF_AUTHORITIES_TITLE, 13),
}

# ----------------------------
# ✍️ Drafting Fallbacks
# ----------------------------
DRAFT_FALLBACK_TEMPLATE = "[{section} to be written]"
UNFILLED_NAME_TEMPLATE = "[{name}]"

# ----------------------------
# 🔗 Document Viewer
# ----------------------------
DEFAULT_VIEWER_BASE_URL = "/documents/view"
