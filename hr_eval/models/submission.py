from sqlalchemy import Column, String, Integer, DateTime, Float, Text, JSON
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional

from ..db import Base
from ..services.approval import ApprovalStatus


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class EvaluationSubmission(Base):
    __tablename__ = "evaluation_submissions"
    # Never reuse ids of deleted rows, legacy approvals are keyed by id
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_name = Column(String, nullable=False)
    employee_email = Column(String, index=True)
    evaluator = Column(String)
    evaluator_name = Column(String)

    # Flat 0-5 rating kept for legacy/simple records
    rating = Column(Float)
    # Per-category raw scores and form fields, stored as sent
    evaluation_data = Column(JSON)

    # Last persisted status, may lag behind the signature fields
    approval_status = Column(String, default=ApprovalStatus.PENDING.value)
    employee_signature = Column(Text)
    evaluator_signature = Column(String)  # evaluator's name
    evaluator_signature_image = Column(Text)
    employee_approved_at = Column(DateTime)
    evaluator_approved_at = Column(DateTime)
    approval_comments = Column(Text)
    rejection_reason = Column(Text)

    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_record(self) -> Dict[str, Any]:
        """The submission as the JSON record the scoring functions work on."""
        return {
            "id": self.id,
            "employeeName": self.employee_name,
            "employeeEmail": self.employee_email,
            "evaluator": self.evaluator,
            "evaluatorName": self.evaluator_name,
            "rating": self.rating,
            "evaluationData": self.evaluation_data,
            "approvalStatus": self.approval_status,
            "employeeSignature": self.employee_signature,
            "evaluatorSignature": self.evaluator_signature,
            "evaluatorSignatureImage": self.evaluator_signature_image,
            "employeeApprovedAt": isoformat(self.employee_approved_at),
            "evaluatorApprovedAt": isoformat(self.evaluator_approved_at),
            "approvalComments": self.approval_comments,
            "rejectionReason": self.rejection_reason,
            "submittedAt": isoformat(self.submitted_at),
        }


# Pydantic models
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmissionCreate(CamelModel):
    employee_name: str
    employee_email: Optional[str] = None
    evaluator: Optional[str] = None
    evaluator_name: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    evaluation_data: Optional[Dict[str, Any]] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    submitted_at: Optional[datetime] = None


class SubmissionOut(CamelModel):
    id: int
    employee_name: str
    employee_email: Optional[str] = None
    evaluator: Optional[str] = None
    evaluator_name: Optional[str] = None
    rating: Optional[float] = None
    evaluation_data: Optional[Dict[str, Any]] = None
    employee_signature: Optional[str] = None
    evaluator_signature: Optional[str] = None
    evaluator_signature_image: Optional[str] = None
    employee_approved_at: Optional[str] = None
    evaluator_approved_at: Optional[str] = None
    approval_comments: Optional[str] = None
    rejection_reason: Optional[str] = None
    submitted_at: str

    # Derived
    approval_status: str
    overall_rating: float
    rating_label: str
    quarter: str


class CategoryScore(CamelModel):
    key: str
    label: str
    weight: float
    score: float
    weighted: float


class SubmissionDetail(SubmissionOut):
    categories: List[CategoryScore]
    passed: bool
    overall_percentage: float


class SubmissionPage(CamelModel):
    items: List[SubmissionOut]
    total: int
    page: int
    per_page: int
    total_pages: int


class OverviewRow(CamelModel):
    id: int
    employee_name: str
    evaluator: Optional[str] = None
    submitted_at: str
    overall_score: int
    approval_status: str


class SubmissionStats(CamelModel):
    total: int
    average_rating: float
    passed: int
    by_approval_status: Dict[str, int]
    by_department: Dict[str, int]
    by_quarter: Dict[str, int]
