"""
Score aggregation for evaluation submissions.

Every view that shows a rating (records table, detail/print view, statistics)
goes through these functions so the numbers never drift between screens.
The weighted path rounds exactly once, inside ``calculate_overall_rating``.
"""
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# (key, label, field names, weight)
CATEGORIES: List[Tuple[str, str, Tuple[str, ...], float]] = [
    ("jobKnowledge", "Job Knowledge",
     ("jobKnowledgeScore1", "jobKnowledgeScore2", "jobKnowledgeScore3"), 0.20),
    ("qualityOfWork", "Quality of Work",
     ("qualityOfWorkScore1", "qualityOfWorkScore2", "qualityOfWorkScore3",
      "qualityOfWorkScore4", "qualityOfWorkScore5"), 0.20),
    ("adaptability", "Adaptability",
     ("adaptabilityScore1", "adaptabilityScore2", "adaptabilityScore3"), 0.10),
    ("teamwork", "Teamwork",
     ("teamworkScore1", "teamworkScore2", "teamworkScore3"), 0.10),
    ("reliability", "Reliability",
     ("reliabilityScore1", "reliabilityScore2", "reliabilityScore3", "reliabilityScore4"), 0.05),
    ("ethical", "Ethical Conduct",
     ("ethicalScore1", "ethicalScore2", "ethicalScore3", "ethicalScore4"), 0.05),
    ("customerService", "Customer Service",
     ("customerServiceScore1", "customerServiceScore2", "customerServiceScore3",
      "customerServiceScore4", "customerServiceScore5"), 0.30),
]

PASSING_SCORE = 3.0

RATING_LABELS = [
    (4.5, "Outstanding"),
    (4.0, "Exceeds Expectations"),
    (3.5, "Meets Expectations"),
    (2.5, "Needs Improvement"),
]

# Leading decimal literal, the part a browser's parseFloat would read
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> Optional[float]:
    """
    Coerce a raw score value to a float, or None when it isn't a usable number.

    Strings are read the lenient way the dashboard forms send them: "4", " 4.5",
    and "4 (good)" all parse, "abc" doesn't.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        number = float(match.group(1))
    else:
        return None
    if math.isnan(number):
        return None
    return number


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero (Python's round() rounds half to even)."""
    factor = 10 ** digits
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    return math.copysign(rounded, value) if value else 0.0


def calculate_score(scores: Sequence[Any]) -> float:
    """
    Mean of the valid entries in one category's scores.

    Empty strings, None and unparsable values are ignored. Returns 0 when no
    valid value is left, so an unfinished category contributes nothing to the
    weighted total instead of failing it.
    """
    valid = []
    for score in scores:
        if score == "":
            continue
        number = parse_number(score)
        if number is not None:
            valid.append(number)

    if not valid:
        return 0
    return sum(valid) / len(valid)


def category_scores(evaluation_data: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    data = evaluation_data or {}
    return {
        key: calculate_score([data.get(field) for field in fields])
        for key, _label, fields, _weight in CATEGORIES
    }


def calculate_overall_rating(evaluation_data: Optional[Mapping[str, Any]]) -> float:
    """
    Weighted overall rating on the 0-5 scale, rounded to one decimal place.

    Callers holding a submission without ``evaluationData`` should use
    ``submission_rating`` which falls back to the flat ``rating`` field.
    """
    if not evaluation_data:
        return 0.0

    means = category_scores(evaluation_data)
    total = sum(means[key] * weight for key, _label, _fields, weight in CATEGORIES)
    return round_half_up(total, 1)


def submission_rating(submission: Mapping[str, Any]) -> float:
    """Overall rating for a whole submission record."""
    evaluation_data = submission.get("evaluationData")
    if evaluation_data:
        return calculate_overall_rating(evaluation_data)

    flat = parse_number(submission.get("rating"))
    return flat if flat is not None else 0.0


def overview_percentage(submission: Mapping[str, Any]) -> int:
    """
    Admin overview score: the flat 1-5 ``rating`` as a whole percentage.

    This is a different quantity from ``submission_rating``; the admin overview
    has always shown it and it is kept as is.
    """
    rating = parse_number(submission.get("rating")) or 0.0
    return int(round_half_up(rating / 5 * 100))


def category_breakdown(evaluation_data: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Per-category mean and weighted contribution, for the detail/print view."""
    means = category_scores(evaluation_data)
    return [
        {
            "key": key,
            "label": label,
            "weight": weight,
            "score": means[key],
            "weighted": means[key] * weight,
        }
        for key, label, _fields, weight in CATEGORIES
    ]


def rating_label(score: float) -> str:
    for threshold, label in RATING_LABELS:
        if score >= threshold:
            return label
    return "Unsatisfactory"


def is_passing(score: float) -> bool:
    return score >= PASSING_SCORE
