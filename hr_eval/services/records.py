"""
List handling for the evaluation records table: search, filters, sorting,
pagination and summary statistics. Works on plain submission dicts.
"""
import math
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .approval import get_correct_approval_status
from .quarters import parse_timestamp, quarter_from_date
from .scoring import is_passing, round_half_up, submission_rating

SORT_FIELDS = ("employeeName", "date", "rating")


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def matches_search(submission: Mapping[str, Any], term: str) -> bool:
    needle = term.lower()
    data = submission.get("evaluationData") or {}
    haystack = [
        _lower(submission.get("employeeName")),
        _lower(data.get("department")),
        _lower(data.get("position")),
        _lower(data.get("supervisor") or submission.get("evaluator") or submission.get("evaluatorName")),
    ]
    return any(needle in field for field in haystack)


def filter_records(
    records: Iterable[Mapping[str, Any]],
    search: Optional[str] = None,
    approval_status: Optional[str] = None,
    quarter: Optional[str] = None,
    year: Optional[int] = None,
) -> List[Mapping[str, Any]]:
    result = []
    for submission in records:
        if search and not matches_search(submission, search):
            continue
        if approval_status and get_correct_approval_status(submission) != approval_status:
            continue
        # "Q1" matches "Q1 2024", "Q1 2025", ...
        if quarter and not quarter_from_date(submission.get("submittedAt")).startswith(quarter):
            continue
        if year:
            submitted = parse_timestamp(submission.get("submittedAt"))
            if submitted is None or submitted.year != year:
                continue
        result.append(submission)
    return result


def _sort_key(field: str):
    if field == "employeeName":
        return lambda sub: _lower(sub.get("employeeName"))
    if field == "date":
        def by_date(sub):
            submitted = parse_timestamp(sub.get("submittedAt"))
            return submitted.timestamp() if submitted else 0.0
        return by_date
    return submission_rating


def sort_records(records: Iterable[Mapping[str, Any]], field: str = "date", direction: str = "desc") -> List[Mapping[str, Any]]:
    """Stable sort on one of SORT_FIELDS; unknown fields keep the input order."""
    records = list(records)
    if field not in SORT_FIELDS:
        return records
    return sorted(records, key=_sort_key(field), reverse=direction == "desc")


def paginate(records: List[Mapping[str, Any]], page: int = 1, per_page: int = 10) -> Dict[str, Any]:
    total = len(records)
    per_page = max(per_page, 1)
    page = max(page, 1)
    start = (page - 1) * per_page
    return {
        "items": records[start:start + per_page],
        "total": total,
        "page": page,
        "perPage": per_page,
        "totalPages": math.ceil(total / per_page),
    }


def compute_stats(records: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    records = list(records)
    ratings = [submission_rating(sub) for sub in records]

    by_department = Counter(
        (sub.get("evaluationData") or {}).get("department") or "Unknown" for sub in records
    )
    by_quarter = Counter(quarter_from_date(sub.get("submittedAt")) for sub in records)
    by_approval = Counter(get_correct_approval_status(sub) for sub in records)

    average = round_half_up(sum(ratings) / len(ratings), 1) if ratings else 0.0
    return {
        "total": len(records),
        "averageRating": average,
        "passed": sum(1 for rating in ratings if is_passing(rating)),
        "byApprovalStatus": dict(by_approval),
        "byDepartment": dict(by_department),
        "byQuarter": dict(by_quarter),
    }
