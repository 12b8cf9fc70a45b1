import pytest

from core.error_handling import AppError
from services.validation_service import get_requirements, validate_request


def test_validate_request_incomplete():
    response = validate_request({"state": "ca", "sections": {"liability": "Clear liability."}})

    assert response["ok"] is False
    assert "liability" not in response["missing"]
    assert len(response["missing"]) == 5
    assert response["message"] == "Demand pack incomplete. Missing 5 required section(s)."
    assert len(response["checklist"]) == 9


def test_validate_request_complete():
    sections = {
        "policy_limits_demand": "Policy limits of $50,000.",
        "deadline_language": "This offer expires Friday.",
        "proof_of_service": "Sent by certified mail.",
        "policy_disclosure_request": "Disclose all policies.",
        "damages_summary": "Damages exceed limits.",
        "liability": "Clear liability.",
    }
    response = validate_request({"state": "CA", "sections": sections,
                                 "case_info": {"insured_name": "John Smith"}})

    assert response["ok"] is True
    assert response["message"] == "Demand pack validation successful. All required sections present."
    assert "John Smith" in response["checklist"][7]["description"]


def test_validate_request_unknown_state():
    response = validate_request({"state": "TX", "sections": {}})
    assert response["ok"] is True
    assert response["warnings"] == ["no validation rules defined for TX"]
    assert len(response["checklist"]) == 3


@pytest.mark.parametrize("body, code", [
    ({"sections": {}}, "VALIDATION_001"),
    ({"state": "  ", "sections": {}}, "VALIDATION_001"),
    ({"state": "CA"}, "VALIDATION_002"),
    ({"state": "CA", "sections": ["liability"]}, "VALIDATION_002"),
    (None, "VALIDATION_001"),
])
def test_validate_request_rejects_malformed_body(body, code):
    with pytest.raises(AppError) as exc:
        validate_request(body)
    assert exc.value.code == code


def test_get_requirements():
    supported = get_requirements("ca")
    assert supported["state"] == "CA"
    assert supported["supported"] is True
    assert supported["requiredElements"][0] == "policy_limits_demand"

    unsupported = get_requirements("tx")
    assert unsupported["supported"] is False
    assert unsupported["requiredElements"] == []
    assert unsupported["description"].startswith("No specific validation requirements defined for TX.")

    with pytest.raises(AppError):
        get_requirements("")
