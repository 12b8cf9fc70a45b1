from core.models import CaseData
from prompts.prompt_factory import build_prompt, build_section_facts, build_section_prompt


def test_build_prompt_includes_safety_notes():
    prompt = build_prompt("Facts And Liability", "Plaintiff was injured while exiting the truck.", "Jane Roe")

    assert "Facts And Liability" in prompt
    assert "Jane Roe" in prompt
    assert "Plaintiff was injured" in prompt

    assert "Do not fabricate, assume, or infer any facts not provided." in prompt
    assert "Write as if you are a senior trial attorney" in prompt
    assert "Avoid weak or speculative words" in prompt
    assert "Write exclusively in active voice." in prompt


def test_build_prompt_defaults_blank_client_name():
    assert "for the client." in build_prompt("Treatment", "facts", client_name="  ")


def test_liability_facts(case_record):
    facts = build_section_facts("facts_liability", CaseData.from_dict(case_record))
    assert "Incident date: June 15, 2023" in facts
    assert "Location: Wilshire Blvd and Vermont Ave" in facts
    assert "Incident description: rear-ended" in facts
    assert "Medical chronology" not in facts


def test_treatment_facts_use_chronology(case_record):
    facts = build_section_facts("treatment", CaseData.from_dict(case_record))
    assert "Medical chronology:\nER visit on 2023-06-15" in facts
    assert "Incident description" not in facts


def test_property_damage_and_future_medical_amounts(case_record):
    case = CaseData.from_dict(case_record)
    assert "Property damage amount: $7,300" in build_section_facts("property_damage", case)
    assert "Total future medical expenses: $6,000" in build_section_facts("future_medical", case)


def test_injury_facts_list_known_injuries(case_record):
    facts = build_section_facts("injuries_summary", CaseData.from_dict(case_record))
    assert "Known injuries: cervical strain; lumbar sprain" in facts


def test_section_prompt_uses_title_example_and_instructions(case_record):
    prompt = build_section_prompt("lifestyle_impact", CaseData.from_dict(case_record))
    assert "**Lifestyle Impact**" in prompt
    assert "for Maria." in prompt
    assert "Use the following as a tone/style example:" in prompt
    assert "Describe the client's life before the incident" in prompt


def test_section_prompt_without_facts():
    prompt = build_section_prompt("treatment", CaseData())
    assert "No additional facts provided." in prompt
    assert "tone/style example" not in prompt
