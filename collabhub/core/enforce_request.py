"""Request Payload Rules — cross-field checks applied before any store write.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Each check raises PayloadValidationError naming the offending field
    - Budget: 0 <= min <= max; Timeline: start_date <= end_date
    - Free-text fields must be non-empty after stripping

Design Decisions:
    - Type/enum checks live in pydantic schemas; these are the rules a schema cannot
      express alone, re-applied by the engine so direct service callers get them too
"""

from datetime import datetime

from collabhub.core.clock import ensure_utc
from collabhub.core.domain_types import CampaignType
from collabhub.core.errors import PayloadValidationError


def check_text_fields(**fields: str | None) -> None:
    """Every given free-text field must be present and non-blank."""
    for name, value in fields.items():
        if value is None or not str(value).strip():
            raise PayloadValidationError(f"{name} is required", name)


def check_budget(budget_min: float, budget_max: float, field: str = "budget") -> None:
    if budget_min < 0 or budget_max < 0:
        raise PayloadValidationError("budget amounts must be non-negative", field)
    if budget_min > budget_max:
        raise PayloadValidationError(
            f"budget.min ({budget_min}) exceeds budget.max ({budget_max})", field,
        )


def check_timeline(start: datetime, end: datetime, field: str = "timeline") -> None:
    if ensure_utc(start) > ensure_utc(end):
        raise PayloadValidationError(
            "timeline.start_date must not be after timeline.end_date", field,
        )


def check_campaign_type(value: str) -> CampaignType:
    try:
        return CampaignType(value)
    except ValueError:
        raise PayloadValidationError(
            f"Unknown campaign type '{value}'", "campaign_type",
        )


def check_distinct_parties(brand_id: str, creator_id: str) -> None:
    if brand_id == creator_id:
        raise PayloadValidationError(
            "brand and creator must be different actors", "creator_id",
        )


def check_currency(currency: str) -> str:
    code = currency.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise PayloadValidationError(
            f"currency must be a 3-letter code, got '{currency}'", "budget.currency",
        )
    return code
