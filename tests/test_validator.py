from legal.ca_demand_pack import CA_REQUIRED_ELEMENTS
from legal.validator import (
    format_validation_result,
    get_required_elements,
    is_supported_jurisdiction,
    validate,
)

COMPLETE_CA_SECTIONS = {
    "policy_limits_demand": "Offer to settle for the policy limits of $100,000.",
    "deadline_language": "This offer expires on April 3, 2024.",
    "proof_of_service": "Mailed by certified mail on March 4, 2024.",
    "policy_disclosure_request": "Please disclose all policies.",
    "damages_summary": "Total damages: $250,000.",
    "liability": "Your insured ran a red light.",
    "bad_faith_notice": "Notice of carrier obligations.",
    "medical_summary": "ER visit and physical therapy.",
}


def test_empty_ca_demand_lists_every_required_section_in_order():
    result = validate("CA", {})
    assert not result.ok
    assert result.missing == list(CA_REQUIRED_ELEMENTS)
    assert len(result.missing) == 6


def test_complete_ca_demand_passes_without_warnings():
    result = validate("ca", COMPLETE_CA_SECTIONS)
    assert result.ok
    assert result.missing == []
    assert result.warnings == []


def test_partial_ca_demand():
    sections = {
        "policy_limits_demand": "We demand the full policy limits.",
        "deadline_language": "Please respond promptly.",
        "proof_of_service": "   ",
        "liability": "Clear liability.",
    }
    result = validate("CA", sections)

    assert not result.ok
    assert result.missing == ["proof_of_service", "policy_disclosure_request", "damages_summary"]
    assert '"policy_limits_demand" should specify a dollar amount for the demand.' in result.warnings
    assert '"deadline_language" should include clear expiration deadline.' in result.warnings
    # absent advisory sections are warned about, never promoted to missing
    assert any("bad_faith_notice" in w for w in result.warnings)
    assert "bad_faith_notice" not in result.missing


def test_offer_and_liability_only_lists_remaining_required_in_declaration_order():
    sections = {
        "policy_limits_demand": "We demand the full policy limits of $100,000.",
        "liability": "Your insured ran a red light.",
    }
    result = validate("CA", sections)

    assert not result.ok
    assert result.missing == [
        "deadline_language",
        "proof_of_service",
        "policy_disclosure_request",
        "damages_summary",
    ]


def test_unfilled_placeholder_is_a_warning():
    sections = dict(COMPLETE_CA_SECTIONS, liability="Your insured {{breach_description}}.")
    result = validate("CA", sections)
    assert result.ok
    assert any("unfilled placeholders" in w and '"liability"' in w for w in result.warnings)


def test_required_marker_is_a_warning():
    sections = dict(COMPLETE_CA_SECTIONS, liability="Factors: [REQUIRED: negligence_factors]")
    result = validate("CA", sections)
    assert result.ok
    assert result.warnings == ['Section "liability" has required fields left blank: negligence_factors.']


def test_unknown_jurisdiction_passes_through():
    result = validate("ZZ", {})
    assert result.ok
    assert result.missing == []
    assert result.warnings == ["no validation rules defined for ZZ"]


def test_supported_jurisdiction_helpers():
    assert is_supported_jurisdiction("ca")
    assert not is_supported_jurisdiction("NY")
    assert get_required_elements("NY") == []
    assert get_required_elements("CA")[0] == "policy_limits_demand"


def test_format_validation_result():
    failed = format_validation_result(validate("CA", {}))
    assert failed.startswith("✗ Demand pack validation failed.")
    assert "Missing required sections (6):" in failed

    passed = format_validation_result(validate("CA", COMPLETE_CA_SECTIONS))
    assert passed.startswith("✓")
