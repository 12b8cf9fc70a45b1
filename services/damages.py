from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from config import AppConfig, get_config
from core.error_handling import AppError
from logger import logger


# === Formatting ===
def _round_half_up(amount) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount) -> str:
    """
    Whole-dollar US currency: 12500.4 → "$12,500".
    """
    value = _round_half_up(amount or 0)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,}"


def _to_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def format_date(value) -> str:
    """
    ISO-8601 date (or date/datetime) → "March 5, 2024". Empty input gives "".
    """
    if value in (None, ""):
        return ""
    try:
        d = _to_date(value)
    except ValueError:
        logger.warning(f"[DAMAGES] Unparseable date {value!r}; leaving as-is")
        return str(value)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def add_business_days(start, days: int) -> date:
    """Count forward `days` weekdays from `start`, skipping Saturdays and Sundays."""
    result = _to_date(start)
    added = 0
    while added < days:
        result += timedelta(days=1)
        if result.weekday() < 5:
            added += 1
    return result


# === Damages model ===
def calculate_damages(
    past_medical: float,
    future_medical: float,
    past_wages: float,
    future_wages: float,
    property_damage: float,
    injury_severity: str,
    liability_strength: str,
    config: AppConfig = None,
) -> dict:
    """
    Multiplier-based damages estimate.

    Pain and suffering is past medical × the severity multiplier; emotional
    distress and loss of enjoyment are 30% and 20% of it, so non-economic
    damages total 1.5 × pain and suffering. The recommended demand is the
    overall total × the liability multiplier. Multipliers come from config.
    """
    config = config or get_config()

    severity = (injury_severity or "").strip().lower()
    strength = (liability_strength or "").strip().lower()
    if severity not in config.SEVERITY_MULTIPLIERS:
        raise AppError("DAMAGES_001", f"Unknown injury severity: {injury_severity!r}",
                       details=f"expected one of {sorted(config.SEVERITY_MULTIPLIERS)}")
    if strength not in config.LIABILITY_MULTIPLIERS:
        raise AppError("DAMAGES_002", f"Unknown liability strength: {liability_strength!r}",
                       details=f"expected one of {sorted(config.LIABILITY_MULTIPLIERS)}")

    economic = {
        "past_medical": past_medical,
        "future_medical": future_medical,
        "past_wages": past_wages,
        "future_wages": future_wages,
        "property": property_damage,
    }
    economic["total"] = sum(economic.values())

    pain_suffering = past_medical * config.SEVERITY_MULTIPLIERS[severity]
    non_economic = {
        "pain_suffering": pain_suffering,
        "emotional_distress": pain_suffering * 0.3,
        "loss_of_enjoyment": pain_suffering * 0.2,
        "total": pain_suffering * 1.5,
    }

    total = economic["total"] + non_economic["total"]
    demand_multiplier = config.LIABILITY_MULTIPLIERS[strength]

    return {
        "economic": economic,
        "non_economic": non_economic,
        "total": _round_half_up(total),
        "demand_multiplier": demand_multiplier,
        "recommended_demand": _round_half_up(total * demand_multiplier),
    }
