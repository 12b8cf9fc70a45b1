"""
Reasonableness of medical charges, benchmarked against CMS fee schedules.

Each billed charge is compared with the Medicare physician fee for its CPT
code in the case locality:

    variance % = (billed - cms) / cms × 100

and flagged reasonable / high / excessive against configurable thresholds.
CMS rates are a benchmark, not a ceiling; the footnotes say so in the demand.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Mapping, Optional

from config import AppConfig, get_config
from logger import logger

DEFAULT_LOCALITY = "DEFAULT"

FLAG_REASONABLE = "reasonable"
FLAG_HIGH = "high"
FLAG_EXCESSIVE = "excessive"

LOCALITY_NAMES = {
    "CA-LA": "Los Angeles, California",
    "NY-Manhattan": "New York City",
}


@dataclass(frozen=True)
class FeeEntry:
    cpt: str
    non_facility_fee: float
    facility_fee: float
    description: str = ""


def _entries(*rows) -> Mapping[str, FeeEntry]:
    return MappingProxyType({row[0]: FeeEntry(*row) for row in rows})


# 2024 Medicare Physician Fee Schedule, demo subset
DEMO_CMS_FEES = MappingProxyType({
    "CA-LA": _entries(
        ("99213", 112.00, 93.00, "Office/outpatient visit, established patient, 20-29 minutes"),
        ("72148", 245.00, 245.00, "MRI lumbar spine without contrast"),
        ("97110", 36.00, 34.00, "Therapeutic exercises, each 15 minutes"),
        ("73030", 45.00, 45.00, "X-ray shoulder, minimum 2 views"),
        ("99204", 185.00, 157.00, "Office/outpatient visit, new patient, 45-59 minutes"),
        ("29827", 1250.00, 1250.00, "Arthroscopy, shoulder, surgical; with rotator cuff repair"),
        ("97035", 20.00, 18.00, "Ultrasound therapy, each 15 minutes"),
        ("99285", 320.00, 215.00, "Emergency department visit, high severity"),
    ),
    "NY-Manhattan": _entries(
        ("99213", 125.00, 105.00, "Office/outpatient visit, established patient, 20-29 minutes"),
        ("72148", 270.00, 270.00, "MRI lumbar spine without contrast"),
    ),
    DEFAULT_LOCALITY: _entries(
        ("99213", 100.00, 85.00, "Office/outpatient visit, established patient, 20-29 minutes"),
        ("72148", 220.00, 220.00, "MRI lumbar spine without contrast"),
        ("97110", 32.00, 30.00, "Therapeutic exercises, each 15 minutes"),
        ("73030", 40.00, 40.00, "X-ray shoulder, minimum 2 views"),
    ),
})


def normalize_cpt(cpt) -> str:
    return str(cpt or "").replace("-", "").replace(" ", "").strip()


class FeeSchedule:
    """
    Read-only locality → CPT → FeeEntry table. Lookups fall back to the
    DEFAULT locality when the requested one has no entry for the code.
    """

    def __init__(self, fees: Mapping = None, year: int = 2024):
        fees = DEMO_CMS_FEES if fees is None else fees
        self._fees = MappingProxyType({
            locality: MappingProxyType(dict(entries)) for locality, entries in fees.items()
        })
        self.year = year

    def entry(self, cpt, locality: str) -> Optional[FeeEntry]:
        code = normalize_cpt(cpt)
        for key in (locality, DEFAULT_LOCALITY):
            found = self._fees.get(key, {}).get(code)
            if found:
                return found
        return None

    def fee(self, cpt, locality: str, facility: bool = False) -> Optional[float]:
        found = self.entry(cpt, locality)
        if found is None:
            return None
        return found.facility_fee if facility else found.non_facility_fee

    def description(self, cpt, locality: str) -> str:
        found = self.entry(cpt, locality)
        return found.description if found else ""

    def localities(self) -> list:
        return list(self._fees.keys())


@dataclass(frozen=True)
class ReasonablenessRow:
    id: str
    cpt: str
    provider: str
    billed: float
    cms: Optional[float] = None
    variance_pct: Optional[float] = None
    variance_amount: Optional[float] = None
    flag: Optional[str] = None
    description: str = ""
    date_of_service: str = ""


def classify_variance(variance_pct: float, config: AppConfig = None) -> str:
    config = config or get_config()
    if variance_pct <= config.REASONABLE_VARIANCE_PCT:
        return FLAG_REASONABLE
    if variance_pct <= config.HIGH_VARIANCE_PCT:
        return FLAG_HIGH
    return FLAG_EXCESSIVE


def build_reasonableness_rows(billing_entries: list, fee_schedule: FeeSchedule = None,
                              locality: str = None, config: AppConfig = None) -> list:
    """
    One row per billing entry ({id, cpt, provider, date_of_service, billed}).
    Codes with no benchmark keep `cms`, variance and flag as None.
    """
    config = config or get_config()
    fee_schedule = fee_schedule or FeeSchedule()
    locality = locality or config.CMS_LOCALITY

    rows = []
    for index, entry in enumerate(billing_entries or [], start=1):
        cpt = normalize_cpt(entry.get("cpt"))
        billed = float(entry.get("billed") or 0)
        cms = fee_schedule.fee(cpt, locality, facility=bool(entry.get("facility", False)))

        variance_pct = variance_amount = flag = None
        if cms:
            variance_amount = billed - cms
            variance_pct = variance_amount / cms * 100
            flag = classify_variance(variance_pct, config)
        else:
            logger.info(f"[REASONABLENESS] No CMS benchmark for CPT {cpt!r} in {locality}")

        rows.append(ReasonablenessRow(
            id=str(entry.get("id") or f"bill-{index}"),
            cpt=cpt,
            provider=str(entry.get("provider") or ""),
            billed=billed,
            cms=cms,
            variance_pct=round(variance_pct, 1) if variance_pct is not None else None,
            variance_amount=round(variance_amount, 2) if variance_amount is not None else None,
            flag=flag,
            description=fee_schedule.description(cpt, locality),
            date_of_service=str(entry.get("date_of_service") or ""),
        ))

    logger.info(f"[REASONABLENESS] Built {len(rows)} rows for locality {locality}")
    return rows


def calculate_reasonableness_summary(rows: list) -> dict:
    total_billed = sum(r.billed for r in rows)
    total_cms = sum(r.cms or 0 for r in rows)
    overall = (total_billed - total_cms) / total_cms * 100 if total_cms > 0 else 0

    variances = sorted(r.variance_pct for r in rows if r.variance_pct is not None)
    average = sum(variances) / len(variances) if variances else 0
    # upper median for even counts
    median = variances[len(variances) // 2] if variances else 0

    return {
        "total_billed": round(total_billed, 2),
        "total_cms": round(total_cms, 2),
        "overall_variance_pct": round(overall, 1),
        "reasonable_count": len(filter_by_flag(rows, FLAG_REASONABLE)),
        "high_count": len(filter_by_flag(rows, FLAG_HIGH)),
        "excessive_count": len(filter_by_flag(rows, FLAG_EXCESSIVE)),
        "average_variance": round(average, 1),
        "median_variance": round(median, 1),
    }


def filter_by_flag(rows: list, flag: str) -> list:
    return [r for r in rows if r.flag == flag]


def sort_by_variance(rows: list) -> list:
    """Highest variance first; rows without a benchmark go last."""
    return sorted(rows, key=lambda r: (r.variance_pct is None, -(r.variance_pct or 0)))


def format_reasonableness_table(rows: list, limit: int = 10) -> str:
    lines = [
        "| CPT Code | Service | Provider | Billed | CMS Benchmark | Variance |",
        "|----------|---------|----------|--------|---------------|----------|",
    ]
    for row in sort_by_variance(rows)[:limit]:
        service = row.description[:30] if row.description else "Medical Service"
        cms = f"${row.cms:.2f}" if row.cms is not None else "N/A"
        if row.variance_pct is None:
            variance = "N/A"
        else:
            variance = f"{'+' if row.variance_pct > 0 else ''}{row.variance_pct:.1f}%"
        lines.append(f"| {row.cpt} | {service} | {row.provider} | ${row.billed:.2f} | {cms} | {variance} |")
    return "\n".join(lines) + "\n"


def reasonableness_footnotes(locality: str = None, config: AppConfig = None,
                             today: date = None, year: int = 2024) -> str:
    config = config or get_config()
    locality = locality or config.CMS_LOCALITY
    label = f"{locality} ({LOCALITY_NAMES[locality]})" if locality in LOCALITY_NAMES else locality
    reasonable = f"{config.REASONABLE_VARIANCE_PCT:g}%"
    high = f"{config.HIGH_VARIANCE_PCT:g}%"
    today = today or date.today()

    return f"""## Methodology: Reasonableness of Medical Charges

### CMS Fee Schedule Benchmark

The Centers for Medicare & Medicaid Services (CMS) publishes annual Physician Fee Schedules that establish Medicare reimbursement rates for medical services identified by Current Procedural Terminology (CPT) codes. While these rates apply specifically to Medicare beneficiaries, they are widely recognized as an objective benchmark for reasonable and customary medical charges.

### Geographic Adjustment

CMS fee schedules vary by geographic locality to account for differences in practice costs. This analysis uses the **{label}** locality rates.

### Variance Calculation

**Variance % = [(Billed Amount - CMS Fee) / CMS Fee] × 100**

### Reasonableness Thresholds

- **Up to {reasonable} above CMS**: Generally considered reasonable. Private insurance typically pays 150-200% of Medicare rates.
- **{reasonable} - {high} above CMS**: Elevated but may be justified by emergency care, specialized procedures, or local market conditions.
- **Over {high} above CMS**: Potentially excessive and subject to challenge absent compelling justification.

### Important Caveats

1. **Not a Ceiling**: CMS rates do not represent a legal maximum for private-pay charges.
2. **Legal Standard**: The appropriate standard is the reasonable value of services in the relevant geographic area, not Medicare rates specifically.
3. **Facility Status**: Analysis uses non-facility rates unless a charge is marked as facility-billed.

### Legal References

- *Howell v. Hamilton Meats* (2011) - California Supreme Court on medical damages
- *Hanif v. Housing Authority* (1988) - Reasonable value of medical services

This analysis is provided for informational purposes and does not constitute a legal opinion on the recoverability of damages.

---

*Data Source: CMS Physician Fee Schedule, {year}*
*Locality: {label}*
*Analysis Date: {today.isoformat()}*"""


def build_reasonableness_section(rows: list, locality: str = None, config: AppConfig = None,
                                 today: date = None) -> str:
    """Section body for the demand: intro, top charges by variance, summary, footnotes."""
    config = config or get_config()
    scored = [r for r in rows if r.variance_pct is not None]
    table = format_reasonableness_table(scored, config.REASONABLENESS_ROW_LIMIT)

    return f"""## Reasonableness of Charges

The medical charges in this case have been analyzed for reasonableness by comparing them to CMS (Centers for Medicare & Medicaid Services) Medicare fee schedules for the applicable geographic locality. While CMS rates apply specifically to Medicare beneficiaries, they are widely recognized as an objective benchmark for reasonable and customary medical charges.

### Sample Charge Analysis

{table}
**Analysis Summary:**
- Total billed medical charges exceed CMS benchmarks, which is consistent with industry standards for private-pay patients
- Private insurance typically pays 150-200% of Medicare rates
- The charges fall within reasonable ranges considering the nature of services, provider specialization, and local market conditions

{reasonableness_footnotes(locality, config, today)}

This analysis demonstrates that the medical charges are reasonable, necessary, and commensurate with the severity of injuries sustained."""
