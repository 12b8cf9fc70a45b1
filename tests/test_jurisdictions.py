from datetime import date

import pytest

from core.models import CaseData
from legal.ca_demand_pack import (
    CA_EMIT_ORDER,
    CA_REQUIRED_ELEMENTS,
    build_ca_proof_of_service_checklist,
    build_ca_rules,
    build_ca_template_data,
)
from legal.jurisdictions import (
    GENERIC_SERVICE_CHECKLIST,
    JurisdictionRegistry,
    JurisdictionRules,
    build_default_registry,
    build_service_checklist,
)
from legal.validator import validate


def _ny_rules():
    return JurisdictionRules(
        code="ny",
        name="New York",
        required_elements=("offer",),
        templates={"offer": "We offer to settle for {{amount}}."},
    )


def test_default_registry_has_california():
    registry = build_default_registry()
    rules = registry.get(" ca ")
    assert rules.code == "CA"
    assert rules.required_elements == CA_REQUIRED_ELEMENTS
    assert rules.emit_order == CA_EMIT_ORDER
    assert "ZZ" not in registry


def test_register_returns_new_registry():
    base = build_default_registry()
    extended = base.register(_ny_rules())

    assert "NY" in extended
    assert "NY" not in base
    assert len(extended) == len(base) + 1


def test_validator_uses_registered_rules():
    registry = JurisdictionRegistry([_ny_rules()])
    result = validate("NY", {}, registry=registry)
    assert result.missing == ["offer"]
    assert validate("CA", {}, registry=registry).ok


def test_rules_defaults():
    rules = _ny_rules()
    assert rules.emit_order == ("offer",)
    assert rules.title_for("offer") == "OFFER"
    assert rules.title_for("policy_disclosure") == "POLICY DISCLOSURE"


def test_ca_checklist_names_parties():
    checklist = build_ca_proof_of_service_checklist({"adjuster_name": "Pat Doe", "insured_name": "John Smith"})
    assert len(checklist) == 9
    assert "Pat Doe" in checklist[1]["description"]
    assert "John Smith" in checklist[7]["description"]
    assert [c["required"] for c in checklist].count(False) == 1


def test_service_checklist_falls_back_to_generic():
    checklist = build_service_checklist("TX")
    assert checklist == [dict(item) for item in GENERIC_SERVICE_CHECKLIST]
    assert len(build_service_checklist("CA", {})) == 9


def test_ca_template_data(config):
    case = CaseData.from_dict({
        "plaintiff_name": "Maria Lopez",
        "defendant_name": "John Smith",
        "incident_date": "2023-06-15",
        "policy_limits": 100000,
        "total_medical_expenses": 20000,
        "injury_severity": "moderate",
        "liability_strength": "clear",
        "template_fields": {"adjuster_name": "Pat Doe", "deadline_date": "April 30, 2024"},
    })
    data = build_ca_template_data(case, config=config, today=date(2024, 3, 4))

    assert data["insured_name"] == "John Smith"
    assert data["accident_date"] == "June 15, 2023"
    assert data["policy_limits"] == "$100,000"
    assert data["current_date"] == "March 4, 2024"
    assert data["pain_suffering"] == "$50,000"
    assert data["total_noneconomic"] == "$75,000"
    assert data["total_damages"] == "$95,000"
    assert data["adjuster_name"] == "Pat Doe"
    assert data["deadline_date"] == "April 30, 2024"


def test_ca_template_data_default_deadline(config):
    data = build_ca_template_data(CaseData(), config=config, today=date(2024, 3, 4))
    assert data["deadline_date"] == "April 3, 2024"
    assert data["settlement_payee"] == "[Settlement Payee]"
    assert "pain_suffering" not in data


def test_ca_rules_are_read_only():
    rules = build_ca_rules()
    with pytest.raises(TypeError):
        rules.templates["cover_letter"] = "changed"
    assert "POLICY LIMITS DEMAND" in rules.templates["cover_letter"]
