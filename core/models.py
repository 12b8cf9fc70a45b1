import re
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import List, Optional

from core.constants import DEMAND_TYPES, DEMAND_TYPE_ALIASES, DEMAND_TYPE_STANDARD
from core.error_handling import AppError, log_warning
from legal.anchors import InlineCite, inline_cite_from_dict


@dataclass(frozen=True)
class Section:
    title: str
    content: str
    order: float
    required: bool = True


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    missing: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"ok": self.ok, "missing": list(self.missing), "warnings": list(self.warnings)}


MONEY_FIELDS = (
    "total_medical_expenses",
    "future_medical_expenses",
    "past_lost_wages",
    "future_lost_wages",
    "property_damage",
    "pain_suffering",
    "total_damages",
    "policy_limits",
    "demand_amount",
)

TEXT_FIELDS = (
    "case_id",
    "case_number",
    "case_type",
    "plaintiff_name",
    "defendant_name",
    "attorney_name",
    "attorney_firm",
    "insurance_company",
    "insurance_company_address",
    "claim_number",
    "incident_date",
    "incident_location",
    "incident_description",
    "chronology_summary",
    "settlement_deadline",
    "jurisdiction",
    "injury_severity",
    "liability_strength",
)


def _normalize_key(key) -> str:
    return re.sub(r"[\s\-]+", "_", str(key).strip()).lower()


def _to_number(name: str, value) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise AppError("CASE_DATA_001", f"Field '{name}' must be a number, got a boolean.")
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = str(value).replace("$", "").replace(",", "").strip()
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError as e:
        raise AppError("CASE_DATA_001", f"Field '{name}' must be a number.", details=str(value)) from e


def _to_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _to_list(value) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        # Spreadsheet cells carry lists as "a; b; c"
        return [part.strip() for part in re.split(r"[;\n]", value) if part.strip()]
    return list(value)


def _to_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def normalize_demand_type(value) -> str:
    demand_type = _normalize_key(value) if value else DEMAND_TYPE_STANDARD
    demand_type = DEMAND_TYPE_ALIASES.get(demand_type, demand_type)
    if demand_type not in DEMAND_TYPES:
        log_warning(f"Unknown demand type '{value}', using standard.", code="CASE_DATA_002")
        return DEMAND_TYPE_STANDARD
    return demand_type


@dataclass
class CaseData:
    """
    Flat case record consumed by the assembler.

    Monetary fields default to 0 and text fields to "". Dates are ISO-8601
    strings. `template_fields` carries extra jurisdiction template tokens
    (service details, adjuster names, ...) that have no dedicated field.
    `section_overrides` holds attorney-written section text that replaces
    the template fill; an empty string leaves the section blank.
    """
    case_id: str = ""
    case_number: str = ""
    case_type: str = ""
    plaintiff_name: str = ""
    defendant_name: str = ""
    attorney_name: str = ""
    attorney_firm: str = ""
    insurance_company: str = ""
    insurance_company_address: str = ""
    claim_number: str = ""
    incident_date: str = ""
    incident_location: str = ""
    incident_description: str = ""
    chronology_summary: str = ""
    settlement_deadline: str = ""
    jurisdiction: str = ""
    injury_severity: str = ""
    liability_strength: str = ""

    total_medical_expenses: float = 0.0
    future_medical_expenses: float = 0.0
    past_lost_wages: float = 0.0
    future_lost_wages: float = 0.0
    property_damage: float = 0.0
    pain_suffering: float = 0.0
    total_damages: float = 0.0
    policy_limits: float = 0.0
    demand_amount: float = 0.0

    demand_type: str = DEMAND_TYPE_STANDARD
    policy_limits_demand: bool = False
    injuries: List[str] = field(default_factory=list)
    billing_entries: List[dict] = field(default_factory=list)
    treatment_sources: List[InlineCite] = field(default_factory=list)
    liability_sources: List[InlineCite] = field(default_factory=list)
    template_fields: dict = field(default_factory=dict)
    section_overrides: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CaseData":
        data = {_normalize_key(k): v for k, v in (data or {}).items()}

        kwargs = {}
        for name in MONEY_FIELDS:
            kwargs[name] = _to_number(name, data.get(name))
        for name in TEXT_FIELDS:
            kwargs[name] = _to_text(data.get(name))

        kwargs["jurisdiction"] = kwargs["jurisdiction"].upper()
        kwargs["demand_type"] = normalize_demand_type(data.get("demand_type"))
        kwargs["policy_limits_demand"] = _to_flag(data.get("policy_limits_demand", False))
        kwargs["injuries"] = _to_list(data.get("injuries"))
        kwargs["billing_entries"] = [dict(b) for b in (data.get("billing_entries") or [])]
        kwargs["treatment_sources"] = [inline_cite_from_dict(a) for a in (data.get("treatment_sources") or [])]
        kwargs["liability_sources"] = [inline_cite_from_dict(a) for a in (data.get("liability_sources") or [])]
        kwargs["template_fields"] = {
            str(k): _to_text(v) for k, v in (data.get("template_fields") or {}).items()
        }
        kwargs["section_overrides"] = {
            str(k): _to_text(v) for k, v in (data.get("section_overrides") or {}).items()
        }
        return cls(**kwargs)

    @property
    def first_name(self) -> str:
        return self.plaintiff_name.split()[0] if self.plaintiff_name.strip() else ""


@dataclass
class AssembledDemand:
    sections: List[Section]
    full_text: str
    validation: Optional[ValidationResult] = None
    citations: list = field(default_factory=list)
    anchors: list = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "sections": [asdict(s) for s in self.sections],
            "full_text": self.full_text,
            "validation": self.validation.to_dict() if self.validation else None,
            "citations": [c.format() for c in self.citations],
            "anchors": [entry.to_dict() for entry in self.anchors],
            "warnings": list(self.warnings),
        }
