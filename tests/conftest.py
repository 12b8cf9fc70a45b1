from datetime import date

import pytest

from config import AppConfig


class FakeDraftingClient:
    """Records prompts and returns canned text; `fail_on` sections raise."""

    def __init__(self, text="Drafted section text.", fail_on=()):
        self.text = text
        self.fail_on = tuple(fail_on)
        self.prompts = []

    async def draft(self, instructions):
        self.prompts.append(instructions)
        for marker in self.fail_on:
            if marker in instructions:
                raise RuntimeError(f"drafting unavailable for {marker}")
        return self.text


@pytest.fixture
def config(monkeypatch):
    for var in ("ENV", "AZURE_KEYVAULT_URL", "OPENAI_API_KEY", "SEVERITY_MULTIPLIERS",
                "LIABILITY_MULTIPLIERS", "REASONABLE_VARIANCE_PCT", "HIGH_VARIANCE_PCT"):
        monkeypatch.delenv(var, raising=False)
    return AppConfig()


@pytest.fixture
def today():
    return date(2024, 3, 4)


@pytest.fixture
def fake_client():
    return FakeDraftingClient()


@pytest.fixture
def make_client():
    return FakeDraftingClient


@pytest.fixture
def case_record():
    return {
        "case_id": "case-123",
        "plaintiff_name": "Maria Lopez",
        "defendant_name": "John Smith",
        "attorney_name": "Alex Carter",
        "attorney_firm": "Carter Law Group",
        "insurance_company": "Acme Insurance",
        "insurance_company_address": "100 Main St, Los Angeles, CA 90012",
        "claim_number": "CLM-889",
        "incident_date": "2023-06-15",
        "incident_location": "Wilshire Blvd and Vermont Ave",
        "incident_description": "rear-ended the claimant's vehicle while it was stopped at a red light",
        "chronology_summary": "ER visit on 2023-06-15, MRI on 2023-07-01, 12 weeks of physical therapy.",
        "jurisdiction": "CA",
        "demand_type": "standard",
        "total_medical_expenses": 18500,
        "future_medical_expenses": 6000,
        "past_lost_wages": 4200,
        "property_damage": 7300,
        "policy_limits": 100000,
        "demand_amount": 100000,
        "injuries": "cervical strain; lumbar sprain",
        "billing_entries": [
            {"id": "b1", "cpt": "99213", "provider": "Dr. Smith Primary Care", "billed": 250},
            {"id": "b2", "cpt": "72148", "provider": "Radiology Associates", "billed": 1200},
        ],
    }
