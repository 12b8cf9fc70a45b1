LIABILITY_EXAMPLE = """
The defendant owed every motorist on Wilshire Boulevard a duty to keep a proper lookout and to maintain a safe following distance. He breached that duty when he drove into the rear of Maria's stopped vehicle while looking at his phone. The responding officer cited him for following too closely, and an independent witness confirmed that Maria's brake lights were on. This breach of duty directly caused the cervical and lumbar injuries described below.
"""

LIFESTYLE_EXAMPLE = """
Before the collision, Maria ran three mornings a week and coached her daughter's soccer team. Four months of therapy later, she continues to suffer from neck pain that wakes her at night and makes long shifts at her desk an ordeal. She has given up running entirely and now watches her daughter's games from the sideline. These injuries have profoundly disrupted the active life she built, at no fault of her own.
"""

SECTION_EXAMPLES = {
    "facts_liability": LIABILITY_EXAMPLE,
    "lifestyle_impact": LIFESTYLE_EXAMPLE,
}
