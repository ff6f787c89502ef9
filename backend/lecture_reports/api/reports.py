"""
Report views: monitoring statistics over the caller's visible lectures, and a program leader's own report.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lecture_reports.database import get_db
from lecture_reports.errors import Forbidden
from lecture_reports.schemas.report import MonitoringResponse, ProgramReportResponse
from lecture_reports.services import policy
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.services.reports import monitoring_stats, program_report
from lecture_reports.api.deps import allow
from lecture_reports.api.lectures import scoped_lectures

router = APIRouter(tags=["reports"])


@router.get("/reports/monitoring", response_model=MonitoringResponse)
def get_monitoring(
    principal: Principal = Depends(allow(Resource.MONITORING, Action.READ)),
    db: Session = Depends(get_db),
):
    """Totals and attendance over exactly the lectures the caller could list (lecturers: their own)."""
    lectures = scoped_lectures(db, principal, Action.READ, Resource.MONITORING).all()
    return MonitoringResponse(**monitoring_stats(lectures))


@router.get("/program-reports/{program_leader_id}", response_model=ProgramReportResponse)
def get_program_report(
    program_leader_id: int,
    principal: Principal = Depends(allow(Resource.PROGRAM_REPORT, Action.READ)),
    db: Session = Depends(get_db),
):
    """A program leader may only fetch the report for their own id."""
    if not policy.owns_value(principal, Resource.PROGRAM_REPORT, Action.READ, program_leader_id):
        raise Forbidden("Access denied")
    return ProgramReportResponse(**program_report(db, program_leader_id))
