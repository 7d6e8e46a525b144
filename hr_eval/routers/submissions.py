from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Literal, Mapping, Optional
import logging

from ..config import RECORDS_PER_PAGE
from ..db import get_db
from ..models.approval import ApprovalHistory
from ..models.submission import (
    EvaluationSubmission,
    SubmissionCreate,
    SubmissionDetail,
    SubmissionOut,
    SubmissionPage,
)
from ..services.approval import ApprovalStatus, get_correct_approval_status, merge_employee_approval_data
from ..services.approval_store import SqlApprovalStore, remove_employee_approvals
from ..services.quarters import quarter_from_date
from ..services.records import filter_records, paginate, sort_records
from ..services.scoring import (
    category_breakdown,
    is_passing,
    rating_label,
    round_half_up,
    submission_rating,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_submission_or_404(db: Session, submission_id: int) -> EvaluationSubmission:
    submission = db.query(EvaluationSubmission).filter(EvaluationSubmission.id == submission_id).first()
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission


def load_records(db: Session) -> List[Mapping[str, Any]]:
    """All submissions as records, with legacy employee approvals merged in."""
    rows = db.query(EvaluationSubmission).order_by(EvaluationSubmission.id).all()
    return merge_employee_approval_data([row.to_record() for row in rows], SqlApprovalStore(db))


def load_record(db: Session, submission: EvaluationSubmission) -> Mapping[str, Any]:
    """One submission as a record, with its legacy employee approval merged in."""
    return merge_employee_approval_data([submission.to_record()], SqlApprovalStore(db))[0]


def serialize(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Add the derived rating, label, quarter and approval status to a record."""
    overall = submission_rating(record)
    return {
        **record,
        "approvalStatus": get_correct_approval_status(record),
        "overallRating": overall,
        "ratingLabel": rating_label(overall),
        "quarter": quarter_from_date(record.get("submittedAt")),
    }


@router.post("", response_model=SubmissionOut, status_code=201)
async def create_submission(
    submission: SubmissionCreate,
    db: Session = Depends(get_db)
):
    """
    Store a new evaluation submission
    """
    db_submission = EvaluationSubmission(
        employee_name=submission.employee_name,
        employee_email=submission.employee_email,
        evaluator=submission.evaluator,
        evaluator_name=submission.evaluator_name,
        rating=submission.rating,
        evaluation_data=submission.evaluation_data,
        approval_status=submission.approval_status.value,
    )
    if submission.submitted_at:
        db_submission.submitted_at = submission.submitted_at

    # Signatures captured on the evaluation form itself
    data = submission.evaluation_data or {}
    db_submission.employee_signature = data.get("employeeSignature")
    db_submission.evaluator_signature_image = data.get("evaluatorSignatureImage")
    db_submission.evaluator_signature = data.get("evaluatorSignature")

    db.add(db_submission)
    db.commit()
    db.refresh(db_submission)
    logger.info("Stored evaluation %s for %s", db_submission.id, db_submission.employee_name)
    return serialize(db_submission.to_record())


@router.get("", response_model=SubmissionPage)
async def list_submissions(
    search: Optional[str] = None,
    approval_status: Optional[ApprovalStatus] = None,
    quarter: Optional[str] = Query(None, pattern=r"^Q[1-4]$"),
    year: Optional[int] = None,
    sort: Literal["employeeName", "date", "rating"] = "date",
    direction: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    per_page: int = Query(RECORDS_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    Search, filter, sort and page through evaluation records
    """
    records = filter_records(
        load_records(db),
        search=search,
        approval_status=approval_status.value if approval_status else None,
        quarter=quarter,
        year=year,
    )
    result = paginate(sort_records(records, sort, direction), page, per_page)
    result["items"] = [serialize(record) for record in result["items"]]
    return result


@router.get("/{submission_id}", response_model=SubmissionDetail)
async def get_submission(
    submission_id: int,
    db: Session = Depends(get_db)
):
    """
    Get one submission with its category breakdown
    """
    submission = get_submission_or_404(db, submission_id)
    record = load_record(db, submission)
    detail = serialize(record)

    weighted = detail["overallRating"]
    detail.update(
        categories=category_breakdown(record.get("evaluationData")),
        passed=is_passing(weighted),
        overallPercentage=round_half_up(weighted / 5 * 100, 2),
    )
    return detail


@router.delete("/{submission_id}", status_code=204)
async def delete_submission(
    submission_id: int,
    db: Session = Depends(get_db)
):
    """
    Delete a submission, its approval history and any legacy approvals for it
    """
    submission = get_submission_or_404(db, submission_id)
    remove_employee_approvals(SqlApprovalStore(db), submission_id)
    db.query(ApprovalHistory).filter(ApprovalHistory.submission_id == submission_id).delete()
    db.delete(submission)
    db.commit()
    logger.info("Deleted evaluation %s", submission_id)
    return Response(status_code=204)
