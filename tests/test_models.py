from datetime import datetime

import pytest

from core.error_handling import AppError
from core.models import AssembledDemand, CaseData, Section, ValidationResult, normalize_demand_type
from legal.anchors import SourceAnchor


def test_from_dict_defaults():
    case = CaseData.from_dict({})
    assert case.plaintiff_name == ""
    assert case.total_medical_expenses == 0.0
    assert case.demand_type == "standard"
    assert case.injuries == []
    assert case.section_overrides == {}


def test_from_dict_normalizes_spreadsheet_values():
    case = CaseData.from_dict({
        "Plaintiff Name": " Maria Lopez ",
        "Total Medical Expenses": "$18,500.00",
        "Incident Date": datetime(2023, 6, 15, 9, 30),
        "Jurisdiction": "ca",
        "Injuries": "cervical strain; lumbar sprain\nconcussion",
        "Policy Limits Demand": "Yes",
    })
    assert case.plaintiff_name == "Maria Lopez"
    assert case.total_medical_expenses == 18500.0
    assert case.incident_date == "2023-06-15"
    assert case.jurisdiction == "CA"
    assert case.injuries == ["cervical strain", "lumbar sprain", "concussion"]
    assert case.policy_limits_demand is True
    assert case.first_name == "Maria"


def test_from_dict_rejects_non_numeric_money():
    with pytest.raises(AppError) as exc:
        CaseData.from_dict({"policy_limits": "a lot"})
    assert exc.value.code == "CASE_DATA_001"


def test_from_dict_parses_sources_and_overrides():
    case = CaseData.from_dict({
        "treatment_sources": [{"label": "ER Records", "bates": "0023", "line_start": 7}],
        "section_overrides": {"liability": None, "damages_summary": "Custom table"},
    })
    assert case.treatment_sources[0].label == "ER Records"
    assert case.treatment_sources[0].anchor == SourceAnchor(bates_start="0023", line_start=7)
    assert case.section_overrides == {"liability": "", "damages_summary": "Custom table"}


@pytest.mark.parametrize("raw, expected", [
    ("Stowers", "policy_limits"),
    ("policy limits", "policy_limits"),
    ("UIM", "uim"),
    ("", "standard"),
    ("something else", "standard"),
])
def test_normalize_demand_type(raw, expected):
    assert normalize_demand_type(raw) == expected


def test_assembled_demand_to_dict():
    demand = AssembledDemand(
        sections=[Section("HEADER", "text", 1)],
        full_text="# HEADER\n\ntext",
        validation=ValidationResult(ok=False, missing=["liability"]),
    )
    payload = demand.to_dict()
    assert payload["sections"][0] == {"title": "HEADER", "content": "text", "order": 1, "required": True}
    assert payload["validation"] == {"ok": False, "missing": ["liability"], "warnings": []}
    assert payload["warnings"] == []
