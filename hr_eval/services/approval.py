"""
Approval status derivation and legacy signature reconciliation.
"""
import enum
import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "data:image"
APPROVAL_KEY_PREFIX = "approvalData_"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    EMPLOYEE_APPROVED = "employee_approved"
    EVALUATOR_APPROVED = "evaluator_approved"
    FULLY_APPROVED = "fully_approved"
    REJECTED = "rejected"


def has_signature(value: Any) -> bool:
    """A signature counts only when it is an embedded image data URL."""
    return isinstance(value, str) and bool(value.strip()) and value.startswith(SIGNATURE_PREFIX)


def _nested(submission: Mapping[str, Any]) -> Mapping[str, Any]:
    data = submission.get("evaluationData")
    return data if isinstance(data, Mapping) else {}


def has_employee_signature(submission: Mapping[str, Any]) -> bool:
    return (
        has_signature(submission.get("employeeSignature"))
        or has_signature(_nested(submission).get("employeeSignature"))
    )


def has_evaluator_signature(submission: Mapping[str, Any]) -> bool:
    # evaluatorSignature holds the evaluator's name, only the image proves signing
    return (
        has_signature(submission.get("evaluatorSignatureImage"))
        or has_signature(_nested(submission).get("evaluatorSignatureImage"))
    )


def get_correct_approval_status(submission: Mapping[str, Any]) -> str:
    """
    Approval status of a submission.

    Signatures win over the stored ``approvalStatus``, which may be stale. The
    stored value is only used for states signatures can't express, such as
    ``rejected``.
    """
    employee_signed = has_employee_signature(submission)
    evaluator_signed = has_evaluator_signature(submission)

    if employee_signed and evaluator_signed:
        return ApprovalStatus.FULLY_APPROVED.value
    if employee_signed:
        return ApprovalStatus.EMPLOYEE_APPROVED.value

    stored = submission.get("approvalStatus")
    if stored and stored != ApprovalStatus.PENDING.value:
        return stored.value if isinstance(stored, ApprovalStatus) else stored
    return ApprovalStatus.PENDING.value


class DictApprovalStore:
    """Key-value approval store held in memory."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})

    def keys(self) -> Iterable[str]:
        return list(self.data.keys())

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


def approval_key(email: str) -> str:
    return f"{APPROVAL_KEY_PREFIX}{email}"


def load_approval_records(store, key: str) -> Dict[str, Any]:
    """Read one store entry as a mapping of submission id -> approval record."""
    raw = store.get(key)
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Skipping unreadable approval data under %s", key)
            return {}
    if not isinstance(raw, Mapping):
        logger.warning("Skipping approval data under %s: expected an object", key)
        return {}
    return dict(raw)


def find_employee_approval(submission: Mapping[str, Any], store) -> Optional[Mapping[str, Any]]:
    submission_id = submission.get("id")
    if submission_id is None:
        return None
    record_key = str(submission_id)

    email = submission.get("employeeEmail") or _nested(submission).get("employeeEmail")
    if email:
        found = load_approval_records(store, approval_key(email)).get(record_key)
        if found:
            return found

    # The record may have been stored under a different email, scan them all
    for key in store.keys():
        if key and key.startswith(APPROVAL_KEY_PREFIX):
            found = load_approval_records(store, key).get(record_key)
            if found:
                return found
    return None


def merge_employee_approval_data(submissions: Iterable[Mapping[str, Any]], store) -> List[Mapping[str, Any]]:
    """
    Overlay employee approvals kept in a key-value ``store`` onto submissions.

    ``store`` needs ``keys()`` and ``get(key)``. Entries are stored under
    ``approvalData_<email>`` and map submission ids to
    ``{employeeSignature, approvedAt, employeeName, employeeEmail}``. Values
    found in the store take precedence; submissions without a match are
    returned unchanged. Inputs are never mutated.
    """
    merged = []
    for submission in submissions:
        approval = find_employee_approval(submission, store)
        if not approval:
            merged.append(submission)
            continue

        merged.append({
            **submission,
            "employeeSignature": approval.get("employeeSignature"),
            "employeeApprovedAt": approval.get("approvedAt"),
            "employeeName": approval.get("employeeName") or submission.get("employeeName"),
            "employeeEmail": (
                approval.get("employeeEmail")
                or submission.get("employeeEmail")
                or _nested(submission).get("employeeEmail")
            ),
        })
    return merged
