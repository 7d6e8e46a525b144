from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from ..db import get_db
from ..models.submission import OverviewRow, SubmissionStats
from ..services.approval import get_correct_approval_status
from ..services.records import compute_stats, sort_records
from ..services.scoring import overview_percentage
from .submissions import load_records

router = APIRouter()

@router.get("/summary", response_model=SubmissionStats)
async def get_summary(db: Session = Depends(get_db)):
    """
    Counts and averages behind the dashboard charts
    """
    return compute_stats(load_records(db))

@router.get("/overview", response_model=List[OverviewRow])
async def get_overview(
    db: Session = Depends(get_db),
    limit: int = Query(10, ge=1, le=100)
):
    """
    Most recent evaluations for the admin overview.
    overallScore is the flat rating as a percentage, not the weighted rating.
    """
    records = sort_records(load_records(db), "date", "desc")[:limit]
    return [
        OverviewRow(
            id=record["id"],
            employee_name=record["employeeName"],
            evaluator=record.get("evaluator") or record.get("evaluatorName"),
            submitted_at=record["submittedAt"],
            overall_score=overview_percentage(record),
            approval_status=get_correct_approval_status(record),
        )
        for record in records
    ]
