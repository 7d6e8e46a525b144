from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from datetime import datetime
from pydantic import ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
import uuid

from ..db import Base
from ..services.approval import has_signature
from .submission import CamelModel


class ApprovalHistory(Base):
    __tablename__ = "approval_history"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    submission_id = Column(Integer, ForeignKey("evaluation_submissions.id"), nullable=False, index=True)
    action = Column(String, nullable=False)  # employee_approved, evaluator_approved, rejected
    performed_by = Column(String)
    performed_by_email = Column(String)
    comments = Column(Text)
    performed_at = Column(DateTime, default=datetime.utcnow)


class ApprovalData(Base):
    """Legacy employee approvals, one JSON object per ``approvalData_<email>`` key."""
    __tablename__ = "approval_data"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def _require_image(value: str) -> str:
    if not has_signature(value):
        raise ValueError("signature must be an image data URL")
    return value


# Pydantic models
class EmployeeApprovalCreate(CamelModel):
    employee_signature: str
    employee_name: str
    employee_email: Optional[EmailStr] = None
    comments: Optional[str] = None

    @field_validator("employee_signature")
    @classmethod
    def signature_is_image(cls, value):
        return _require_image(value)


class EvaluatorApprovalCreate(CamelModel):
    evaluator_signature_image: str
    evaluator_name: str
    evaluator_email: Optional[EmailStr] = None
    comments: Optional[str] = None

    @field_validator("evaluator_signature_image")
    @classmethod
    def signature_is_image(cls, value):
        return _require_image(value)


class RejectionCreate(CamelModel):
    reason: str
    rejected_by: Optional[str] = None


class LegacyApprovalCreate(CamelModel):
    employee_signature: str
    employee_name: Optional[str] = None
    approved_at: Optional[datetime] = None

    @field_validator("employee_signature")
    @classmethod
    def signature_is_image(cls, value):
        return _require_image(value)


class ApprovalHistoryOut(CamelModel):
    id: str
    submission_id: int
    action: str
    performed_by: Optional[str] = None
    performed_by_email: Optional[str] = None
    comments: Optional[str] = None
    performed_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
