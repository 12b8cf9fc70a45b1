import asyncio

from services.drafting import draft_section, section_fallback


def test_section_fallback():
    assert section_fallback("Liability section") == "[Liability section to be written]"


def test_draft_section_returns_drafted_text(make_client):
    warnings = []
    text = asyncio.run(draft_section(make_client("  Drafted.  "), "prompt", "fallback", "treatment", warnings))
    assert text == "Drafted."
    assert warnings == []


def test_draft_section_failure_uses_fallback(make_client):
    warnings = []
    client = make_client(fail_on=["prompt"])
    text = asyncio.run(draft_section(client, "prompt", "[Fallback]", "facts_liability", warnings))

    assert text == "[Fallback]"
    assert warnings == ['Section "facts_liability" could not be drafted (RuntimeError); placeholder text used.']


def test_draft_section_empty_reply_uses_fallback(make_client):
    warnings = []
    text = asyncio.run(draft_section(make_client("   "), "prompt", "[Fallback]", "treatment", warnings))

    assert text == "[Fallback]"
    assert warnings == ['Section "treatment" came back empty from drafting; placeholder text used.']
