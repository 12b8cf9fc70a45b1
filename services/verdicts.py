"""
Comparable verdicts and settlements for the comparable-outcomes section.

The catalog is an injected, read-only collection. The bundled demo data
covers California motor-vehicle cases only; other jurisdictions match
nothing until a real catalog is supplied.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from logger import logger


@dataclass(frozen=True)
class VerdictItem:
    title: str
    amount: float
    state: str = "CA"
    court: str = ""
    year: Optional[int] = None
    cite: str = ""
    summary: str = ""
    injury_types: Tuple[str, ...] = ()
    incident_type: str = ""
    treatment: str = ""
    is_settlement: bool = True


DEMO_CA_VERDICTS = (
    VerdictItem(
        title="Rear-end collision – cervical strain with herniation",
        amount=135000,
        court="Los Angeles Superior Court",
        year=2019,
        cite="Jane Doe v. ABC Transport, Case No. BC-2019-45678",
        summary="Soft-tissue injuries with MRI-confirmed disc herniation at C5-C6. Conservative care "
                "including 4 months physical therapy. Plaintiff age 42, office worker.",
        injury_types=("cervical strain", "herniated disc", "soft tissue"),
        incident_type="motor vehicle",
        treatment="4 months PT, pain management, no surgery",
    ),
    VerdictItem(
        title="Motor vehicle accident – cervical and lumbar injuries",
        amount=245000,
        court="Orange County Superior Court",
        year=2020,
        cite="Smith v. Jones Trucking Co., Case No. 30-2020-11234",
        summary="Multi-level disc herniations C4-C6 and L4-L5. Surgery (microdiscectomy) performed "
                "6 months post-accident. Permanent partial disability rating of 15%.",
        injury_types=("cervical herniated disc", "lumbar herniated disc", "radiculopathy"),
        incident_type="motor vehicle",
        treatment="Microdiscectomy surgery, 8 months PT, ongoing pain management",
        is_settlement=False,
    ),
    VerdictItem(
        title="Intersection collision – soft tissue injuries",
        amount=85000,
        court="San Diego Superior Court",
        year=2021,
        cite="Rodriguez v. State Farm, Case No. 37-2021-00098765",
        summary="Cervical and thoracic sprains/strains. Conservative treatment with chiropractic care "
                "and physical therapy for 3 months. Full recovery with no permanency.",
        injury_types=("cervical strain", "thoracic strain", "soft tissue"),
        incident_type="motor vehicle",
        treatment="3 months chiropractic and PT, conservative care",
    ),
    VerdictItem(
        title="Freeway rear-end – moderate soft tissue with TMJ",
        amount=175000,
        court="Sacramento Superior Court",
        year=2022,
        cite="Johnson v. USAA Casualty Ins., Case No. 34-2022-00256789",
        summary="Cervical strain with associated TMJ dysfunction. Extended treatment including jaw "
                "specialists, orthodontic appliances, and ongoing pain management. Plaintiff credibility strong.",
        injury_types=("cervical strain", "TMJ", "soft tissue", "jaw injury"),
        incident_type="motor vehicle",
        treatment="6 months multi-disciplinary treatment, TMJ specialist, orthodontics",
    ),
    VerdictItem(
        title="Low-speed impact – disputed soft tissue claim",
        amount=42000,
        court="Riverside Superior Court",
        year=2021,
        cite="Martinez v. Mercury Insurance, Case No. RIC-2021-7890",
        summary="Soft tissue cervical strain, minimal property damage. Defense argued low impact. "
                "Settlement after mediation avoided trial costs.",
        injury_types=("cervical strain", "soft tissue"),
        incident_type="motor vehicle",
        treatment="6 weeks PT, chiropractic",
    ),
    VerdictItem(
        title="T-bone collision – multiple injuries including shoulder surgery",
        amount=425000,
        court="San Francisco Superior Court",
        year=2020,
        cite="Chen v. Lyft, Inc., Case No. CGC-20-587654",
        summary="Cervical strain, rotator cuff tear requiring surgery, and rib fractures. Rideshare "
                "accident with clear liability. Plaintiff missed 4 months work.",
        injury_types=("cervical strain", "rotator cuff tear", "rib fractures", "shoulder injury"),
        incident_type="motor vehicle",
        treatment="Arthroscopic shoulder surgery, 8 months PT and recovery",
    ),
)


def _matches(verdict: VerdictItem, injuries: list) -> bool:
    if not injuries:
        return True
    keywords = [i.lower() for i in injuries if i]
    verdict_injuries = [i.lower() for i in verdict.injury_types]
    title = verdict.title.lower()
    summary = verdict.summary.lower()
    return any(
        any(vi in kw or kw in vi for vi in verdict_injuries) or kw in title or kw in summary
        for kw in keywords
    )


class VerdictCatalog:
    """Immutable collection of VerdictItems searchable by state and injury keyword."""

    def __init__(self, items=DEMO_CA_VERDICTS):
        self._items = tuple(items)

    def find_comparable(self, state: str, injuries: list, limit: int = 10) -> list:
        """
        Verdicts in `state` whose injury types, title or summary mention any
        injury keyword, largest award first.
        """
        state = (state or "").strip().upper()
        in_state = [v for v in self._items if v.state.upper() == state]
        if not in_state:
            logger.info(f"[VERDICTS] No comparable data for {state or 'unknown state'}")
            return []

        found = sorted((v for v in in_state if _matches(v, injuries)), key=lambda v: v.amount, reverse=True)
        logger.info(f"[VERDICTS] {len(found)} comparable outcome(s) for {state}")
        return found[:limit]

    def __len__(self):
        return len(self._items)


def filter_by_amount(verdicts: list, min_amount: float = None, max_amount: float = None) -> list:
    return [
        v for v in verdicts
        if (min_amount is None or v.amount >= min_amount) and (max_amount is None or v.amount <= max_amount)
    ]


def filter_by_year(verdicts: list, year_from: int = None, year_to: int = None) -> list:
    # undated items always pass
    return [
        v for v in verdicts
        if not v.year or ((year_from is None or v.year >= year_from) and (year_to is None or v.year <= year_to))
    ]


def calculate_average_amount(verdicts: list) -> int:
    if not verdicts:
        return 0
    return round(sum(v.amount for v in verdicts) / len(verdicts))


def calculate_median_amount(verdicts: list) -> int:
    if not verdicts:
        return 0
    amounts = sorted(v.amount for v in verdicts)
    mid = len(amounts) // 2
    if len(amounts) % 2 == 0:
        return round((amounts[mid - 1] + amounts[mid]) / 2)
    return amounts[mid]


def format_verdict_for_demand(verdict: VerdictItem) -> str:
    parts = [f"**{verdict.title}** - ${verdict.amount:,.0f}"]
    metadata = [m for m in (verdict.court, str(verdict.year) if verdict.year else "") if m]
    if metadata:
        parts.append(f"({', '.join(metadata)})")
    if verdict.cite:
        parts.append(f"*{verdict.cite}*")
    if verdict.summary:
        parts.append(f"\n  {verdict.summary}")
    return " ".join(parts)


def build_comparable_outcomes_section(jurisdiction: str, verdicts: list) -> str:
    listing = "\n\n".join(f"{i}. {format_verdict_for_demand(v)}" for i, v in enumerate(verdicts, start=1))
    average = calculate_average_amount(verdicts)
    return f"""## Comparable Outcomes ({jurisdiction})

The following verdicts and settlements from {jurisdiction} demonstrate that the damages demand in this case is reasonable and supported by similar outcomes in this jurisdiction:

{listing}

**Average Award:** ${average:,}

**Disclaimer:** Past results do not guarantee future outcomes. Each case is unique and evaluated based on its specific facts, injuries, liability, and other factors. These comparables are provided for reference to demonstrate that our client's demand falls within a reasonable range based on similar cases in this jurisdiction.

The demand in this case accounts for the specific facts, injuries, treatment, and damages suffered by our client, as detailed in the preceding sections."""
