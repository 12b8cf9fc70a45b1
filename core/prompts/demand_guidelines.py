# === Demand Letter Prompt Guidelines ===

NO_HALLUCINATION_NOTE = """
Do not fabricate, assume, or infer any facts not provided. Use only the information given, even if incomplete.
Never add headings, greetings, or signoffs — the assembled letter controls those elements.
Maintain consistent names, pronouns, and chronology throughout.
Do not present multiple versions of the same event or injury — use only one version of the incident.
"""

STRUCTURE_GUIDE_NOTE = """
You are drafting ONE section of a settlement demand letter. Other sections are written separately:
- Liability covers duty, breach, and causation only. Leave damages detail to later sections.
- Injury and treatment sections describe the medical course. Do NOT re-argue liability.
- Lifestyle impact describes how the injuries changed daily life. Do NOT re-list every injury.
- Never state the settlement demand amount; the conclusion handles it.
"""

LEGAL_FLUENCY_NOTE = """
Write as if you are a senior trial attorney addressing an insurance claims representative.
Use the negligence framework (duty, breach, causation, harm) clearly and persuasively.
Be precise, assertive, and legally confident — avoid vague, clinical, or apologetic language.
Reference corroborating evidence (police reports, witnesses, photographs, video, etc.) only once for maximum impact.
"""

LEGAL_TRANSITION_NOTE = """
Use strong legal transitions to connect facts and conclusions:
- "This breach of duty directly caused…"
- "Accordingly, liability is clearly established under…"
- "These injuries have profoundly disrupted…"

Never hedge with tentative or speculative transitions.
"""

NO_PASSIVE_LANGUAGE_NOTE = """
Write exclusively in active voice.
Example:
❌ "Jane was struck by the vehicle."
✅ "The vehicle struck Jane."
"""

BAN_PHRASES_NOTE = """
Avoid weak or speculative words such as: "might," "potential," "appears to," "possibly," "believes that."
Replace them with confident terms: "is," "will show," "demonstrates," "establishes."
"""

FINAL_POLISH_NOTE = """
Each paragraph must advance the legal theory or the damages claim — no filler sentences.
Trim unnecessary clinical or technical details unless they directly strengthen causation or damages.
Return plain paragraphs (or bullets where asked) with no markdown headings.
"""

FULL_SAFETY_PROMPT = "\n\n".join([
    NO_HALLUCINATION_NOTE,
    STRUCTURE_GUIDE_NOTE,
    LEGAL_FLUENCY_NOTE,
    LEGAL_TRANSITION_NOTE,
    NO_PASSIVE_LANGUAGE_NOTE,
    BAN_PHRASES_NOTE,
    FINAL_POLISH_NOTE
])

# === Per-section drafting instructions ===

SECTION_INSTRUCTIONS = {
    "facts_liability": """
Write 2-3 paragraphs that:
1. Describe how the incident occurred
2. Explain the defendant's negligence or fault
3. Establish causation (the defendant's actions caused the injuries)
4. Cite applicable legal standards only where relevant
""",
    "property_damage": """
Describe the property damage sustained (vehicle damage, personal property, etc.).
Keep it to 1-2 sentences. Be factual and specific.
""",
    "injuries_summary": """
Extract a bulleted list of injuries with ICD-10 codes from the medical chronology.
Format each line as:
- ICD-10 CODE Description of injury

Example:
- M54.2 Cervicalgia
- S13.4XXA Sprain of cervical spine

Return only the list.
""",
    "treatment": """
Write one paragraph per significant visit, in date order. Each paragraph:
1. Starts with the date
2. Names the provider and facility
3. Describes complaints, examination findings, and diagnoses
4. Describes treatment provided and follow-up recommendations

Write in past tense, third person, with proper medical terminology.
""",
    "future_medical": """
Write one paragraph describing the future treatment the client will need
(consultations, therapy, procedures, medications). Be specific about the types
of providers and treatments. Do not restate the dollar estimate; a table follows.
""",
    "lifestyle_impact": """
Write 2-3 paragraphs that:
1. Describe the client's life before the incident
2. Explain ongoing pain and suffering despite treatment
3. Detail specific limitations in daily activities, work, hobbies, sleep, and relationships
4. Describe the emotional distress the injuries caused

Be persuasive while remaining professional.
""",
}
