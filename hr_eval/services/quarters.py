from datetime import datetime
from typing import Any, Mapping, Optional

UNKNOWN_QUARTER = "Unknown"


def parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _quarter_of(month: int) -> int:
    return (month - 1) // 3 + 1


def quarter_from_date(value: Any) -> str:
    """Quarter label such as "Q2 2024" for a submission timestamp."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return UNKNOWN_QUARTER
    return f"Q{_quarter_of(parsed.month)} {parsed.year}"


def quarter_from_evaluation_data(evaluation_data: Optional[Mapping[str, Any]]) -> str:
    """
    Quarter of an evaluation based on the review type the evaluator selected.

    The year comes from the coverage period, then the submission date. When no
    regular review type is ticked the submission date decides the quarter.
    """
    if not evaluation_data:
        return UNKNOWN_QUARTER

    coverage = parse_timestamp(evaluation_data.get("coverageFrom"))
    submitted = parse_timestamp(evaluation_data.get("submittedAt"))
    if coverage:
        year = coverage.year
    elif submitted:
        year = submitted.year
    else:
        year = datetime.now().year

    for quarter in (1, 2, 3, 4):
        if evaluation_data.get(f"reviewTypeRegularQ{quarter}"):
            return f"Q{quarter} {year}"

    if submitted:
        return f"Q{_quarter_of(submitted.month)} {year}"
    return UNKNOWN_QUARTER
