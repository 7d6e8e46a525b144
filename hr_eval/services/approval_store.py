import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.approval import ApprovalData
from .approval import APPROVAL_KEY_PREFIX, approval_key, load_approval_records


class SqlApprovalStore:
    """Key-value approval store kept in the ``approval_data`` table."""

    def __init__(self, db: Session):
        self.db = db

    def keys(self) -> List[str]:
        return [key for (key,) in self.db.query(ApprovalData.key).order_by(ApprovalData.key).all()]

    def get(self, key: str) -> Optional[str]:
        row = self.db.query(ApprovalData).filter(ApprovalData.key == key).first()
        return row.value if row else None

    def set(self, key: str, value: Any) -> None:
        text = value if isinstance(value, str) else json.dumps(value)
        row = self.db.query(ApprovalData).filter(ApprovalData.key == key).first()
        if row:
            row.value = text
        else:
            self.db.add(ApprovalData(key=key, value=text))
        self.db.commit()


def save_employee_approval(
    store,
    email: str,
    submission_id: int,
    employee_signature: str,
    employee_name: Optional[str] = None,
    approved_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Write one employee approval under ``approvalData_<email>``, keyed by submission id."""
    key = approval_key(email)
    # Unreadable entries are replaced rather than merged into
    records = load_approval_records(store, key)

    record = {
        "employeeSignature": employee_signature,
        "approvedAt": (approved_at or datetime.utcnow()).isoformat(),
        "employeeName": employee_name,
        "employeeEmail": email,
    }
    records[str(submission_id)] = record
    store.set(key, records)
    return record


def remove_employee_approvals(store, submission_id: int) -> int:
    """Drop a submission's record from every ``approvalData_*`` entry. Returns how many were removed."""
    record_key = str(submission_id)
    removed = 0
    for key in store.keys():
        if not key or not key.startswith(APPROVAL_KEY_PREFIX):
            continue
        records = load_approval_records(store, key)
        if record_key in records:
            del records[record_key]
            store.set(key, records)
            removed += 1
    return removed
