"""
Lecturer assignments API: admins and principal lecturers link lecturers to class + course pairings.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from lecture_reports.database import commit_or_raise, get_db
from lecture_reports.models.lecturer_assignment import LecturerAssignment
from lecture_reports.models.school_class import SchoolClass
from lecture_reports.schemas.assignment import AssignmentRequest, AssignmentResponse
from lecture_reports.schemas.common import CreatedResponse
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.api.deps import allow

router = APIRouter(prefix="/lecturer-assignments", tags=["lecturer-assignments"])
logger = logging.getLogger(__name__)


def _assignment_to_response(a: LecturerAssignment) -> AssignmentResponse:
    cls = a.school_class
    return AssignmentResponse(
        id=a.id,
        lecturer_id=a.lecturer_id,
        class_id=a.class_id,
        course_id=a.course_id,
        created_at=a.created_at,
        class_name=cls.class_name if cls else None,
        total_registered_students=cls.total_registered_students if cls else None,
        venue=cls.venue if cls else None,
        scheduled_time=cls.scheduled_time if cls else None,
        faculty_id=cls.faculty_id if cls else None,
        faculty_name=cls.faculty.name if cls and cls.faculty else None,
        lecturer_name=a.lecturer.name if a.lecturer else None,
        course_name=a.course.course_name if a.course else None,
    )


@router.get("", response_model=list[AssignmentResponse])
def list_assignments(
    lecturer_id: int | None = None,
    principal: Principal = Depends(allow(Resource.LECTURER_ASSIGNMENT, Action.LIST)),
    db: Session = Depends(get_db),
):
    """All assignments, optionally only one lecturer's (?lecturer_id=)."""
    q = db.query(LecturerAssignment).options(
        joinedload(LecturerAssignment.school_class).joinedload(SchoolClass.faculty),
        joinedload(LecturerAssignment.lecturer),
        joinedload(LecturerAssignment.course),
    )
    if lecturer_id is not None:
        q = q.filter(LecturerAssignment.lecturer_id == lecturer_id)
    return [_assignment_to_response(a) for a in q.order_by(LecturerAssignment.id).all()]


@router.post("", response_model=CreatedResponse)
def create_assignment(
    data: AssignmentRequest,
    principal: Principal = Depends(allow(Resource.LECTURER_ASSIGNMENT, Action.CREATE)),
    db: Session = Depends(get_db),
):
    a = LecturerAssignment(lecturer_id=data.lecturer_id, class_id=data.class_id, course_id=data.course_id)
    db.add(a)
    commit_or_raise(
        db,
        duplicate="Lecturer already assigned to this class and course",
        referenced="Referenced lecturer, class or course does not exist",
    )
    logger.info("Assignment created id=%s by user_id=%s", a.id, principal.id)
    return CreatedResponse(id=a.id)
