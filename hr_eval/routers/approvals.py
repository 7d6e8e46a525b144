from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from datetime import datetime
import logging

from ..db import get_db
from ..models.approval import (
    ApprovalHistory,
    ApprovalHistoryOut,
    EmployeeApprovalCreate,
    EvaluatorApprovalCreate,
    LegacyApprovalCreate,
    RejectionCreate,
)
from ..models.submission import SubmissionOut
from ..services.approval import (
    ApprovalStatus,
    get_correct_approval_status,
    has_employee_signature,
    has_evaluator_signature,
)
from ..services.approval_store import SqlApprovalStore, save_employee_approval
from .submissions import get_submission_or_404, load_record, serialize

router = APIRouter()
logger = logging.getLogger(__name__)


def add_history(db: Session, submission_id: int, action: ApprovalStatus, performed_by=None, email=None, comments=None):
    db.add(ApprovalHistory(
        submission_id=submission_id,
        action=action.value,
        performed_by=performed_by,
        performed_by_email=email,
        comments=comments,
    ))


@router.post("/{submission_id}/employee", response_model=SubmissionOut)
async def approve_as_employee(
    submission_id: int,
    approval: EmployeeApprovalCreate,
    db: Session = Depends(get_db)
):
    """
    Record the employee's signature on their evaluation
    """
    submission = get_submission_or_404(db, submission_id)

    submission.employee_signature = approval.employee_signature
    submission.employee_approved_at = datetime.utcnow()
    if approval.employee_email:
        submission.employee_email = approval.employee_email
    if approval.comments:
        submission.approval_comments = approval.comments

    # Keep the stored status in step with the signatures, legacy records included
    submission.approval_status = get_correct_approval_status(load_record(db, submission))
    add_history(db, submission_id, ApprovalStatus.EMPLOYEE_APPROVED,
                approval.employee_name, approval.employee_email, approval.comments)

    db.commit()
    db.refresh(submission)
    logger.info("Employee approval recorded for evaluation %s", submission_id)
    return serialize(load_record(db, submission))


@router.post("/{submission_id}/evaluator", response_model=SubmissionOut)
async def approve_as_evaluator(
    submission_id: int,
    approval: EvaluatorApprovalCreate,
    db: Session = Depends(get_db)
):
    """
    Record the evaluator's signature on an evaluation
    """
    submission = get_submission_or_404(db, submission_id)

    submission.evaluator_signature_image = approval.evaluator_signature_image
    submission.evaluator_signature = approval.evaluator_name
    submission.evaluator_approved_at = datetime.utcnow()
    if approval.comments:
        submission.approval_comments = approval.comments

    if has_employee_signature(load_record(db, submission)):
        submission.approval_status = ApprovalStatus.FULLY_APPROVED.value
    else:
        submission.approval_status = ApprovalStatus.EVALUATOR_APPROVED.value
    add_history(db, submission_id, ApprovalStatus.EVALUATOR_APPROVED,
                approval.evaluator_name, approval.evaluator_email, approval.comments)

    db.commit()
    db.refresh(submission)
    logger.info("Evaluator approval recorded for evaluation %s", submission_id)
    return serialize(load_record(db, submission))


@router.post("/{submission_id}/reject", response_model=SubmissionOut)
async def reject_submission(
    submission_id: int,
    rejection: RejectionCreate,
    db: Session = Depends(get_db)
):
    """
    Reject an evaluation that hasn't been signed off by both parties
    """
    submission = get_submission_or_404(db, submission_id)
    record = load_record(db, submission)
    if has_employee_signature(record) and has_evaluator_signature(record):
        raise HTTPException(status_code=409, detail="Fully approved evaluations cannot be rejected")

    submission.approval_status = ApprovalStatus.REJECTED.value
    submission.rejection_reason = rejection.reason
    add_history(db, submission_id, ApprovalStatus.REJECTED, rejection.rejected_by, comments=rejection.reason)

    db.commit()
    db.refresh(submission)
    logger.info("Evaluation %s rejected", submission_id)
    return serialize(load_record(db, submission))


@router.get("/{submission_id}/history", response_model=List[ApprovalHistoryOut])
async def get_approval_history(
    submission_id: int,
    db: Session = Depends(get_db)
):
    """
    Get the approval history of an evaluation, oldest first
    """
    get_submission_or_404(db, submission_id)
    return db.query(ApprovalHistory).filter(
        ApprovalHistory.submission_id == submission_id
    ).order_by(
        ApprovalHistory.performed_at
    ).all()


@router.put("/legacy/{email}/{submission_id}")
async def store_legacy_approval(
    email: str,
    submission_id: int,
    approval: LegacyApprovalCreate,
    db: Session = Depends(get_db)
):
    """
    Store an employee approval the old way, under approvalData_<email>.
    Listings merge these records over the submission's own fields.
    """
    get_submission_or_404(db, submission_id)
    record = save_employee_approval(
        SqlApprovalStore(db),
        email,
        submission_id,
        approval.employee_signature,
        employee_name=approval.employee_name,
        approved_at=approval.approved_at,
    )
    return record
