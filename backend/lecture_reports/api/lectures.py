"""
Lecture reports API. Lecturers file reports for themselves and only ever see or change their own;
admins may change or delete any report. Other roles read according to services.policy.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from lecture_reports.database import commit_or_raise, get_db
from lecture_reports.models.lecture import Lecture
from lecture_reports.models.school_class import SchoolClass
from lecture_reports.schemas.common import CreatedResponse, MessageResponse
from lecture_reports.schemas.lecture import LectureRequest, LectureResponse
from lecture_reports.services import policy
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.api.deps import allow, load_for

router = APIRouter(prefix="/lectures", tags=["lectures"])
nested_router = APIRouter(tags=["lectures"])
logger = logging.getLogger(__name__)

MISSING_REFERENCE_MSG = "Referenced class or course does not exist"


def lecture_query(db: Session):
    """Lectures with class (and its faculty), course and lecturer loaded for response rows."""
    return db.query(Lecture).options(
        joinedload(Lecture.school_class).joinedload(SchoolClass.faculty),
        joinedload(Lecture.course),
        joinedload(Lecture.lecturer),
    )


def scoped_lectures(db: Session, principal: Principal, action: Action = Action.LIST, resource: Resource = Resource.LECTURE):
    """Lecture query narrowed to what the caller may list, newest first."""
    q = policy.scope_query(lecture_query(db), Lecture, principal, resource, action)
    return q.order_by(Lecture.created_at.desc(), Lecture.id.desc())


def _lecture_to_response(lec: Lecture) -> LectureResponse:
    cls = lec.school_class
    return LectureResponse(
        id=lec.id,
        class_id=lec.class_id,
        course_id=lec.course_id,
        lecturer_id=lec.lecturer_id,
        week_of_reporting=lec.week_of_reporting,
        date_of_lecture=lec.date_of_lecture,
        actual_students_present=lec.actual_students_present,
        topic_taught=lec.topic_taught,
        learning_outcomes=lec.learning_outcomes,
        recommendations=lec.recommendations,
        created_at=lec.created_at,
        class_name=cls.class_name if cls else None,
        course_name=lec.course.course_name if lec.course else None,
        course_code=lec.course.course_code if lec.course else None,
        lecturer_name=lec.lecturer.name if lec.lecturer else None,
        faculty_name=cls.faculty.name if cls and cls.faculty else None,
        total_registered_students=cls.total_registered_students if cls else None,
    )


@router.post("", response_model=CreatedResponse)
def create_lecture(
    data: LectureRequest,
    principal: Principal = Depends(allow(Resource.LECTURE, Action.CREATE)),
    db: Session = Depends(get_db),
):
    """File a lecture report; lecturer_id is always the caller."""
    lec = Lecture(lecturer_id=principal.id, **data.model_dump())
    db.add(lec)
    commit_or_raise(db, duplicate="Lecture already exists", referenced=MISSING_REFERENCE_MSG)
    logger.info("Lecture created id=%s by lecturer_id=%s", lec.id, principal.id)
    return CreatedResponse(id=lec.id)


@router.get("", response_model=list[LectureResponse])
def list_lectures(
    principal: Principal = Depends(allow(Resource.LECTURE, Action.LIST)),
    db: Session = Depends(get_db),
):
    return [_lecture_to_response(lec) for lec in scoped_lectures(db, principal).all()]


@nested_router.get("/classes/{class_id}/lectures", response_model=list[LectureResponse])
def list_lectures_by_class(
    class_id: int,
    principal: Principal = Depends(allow(Resource.LECTURE, Action.LIST_BY_CLASS)),
    db: Session = Depends(get_db),
):
    q = scoped_lectures(db, principal, Action.LIST_BY_CLASS).filter(Lecture.class_id == class_id)
    return [_lecture_to_response(lec) for lec in q.all()]


@nested_router.get("/courses/{course_id}/lectures", response_model=list[LectureResponse])
def list_lectures_by_course(
    course_id: int,
    principal: Principal = Depends(allow(Resource.LECTURE, Action.LIST_BY_COURSE)),
    db: Session = Depends(get_db),
):
    q = scoped_lectures(db, principal, Action.LIST_BY_COURSE).filter(Lecture.course_id == course_id)
    return [_lecture_to_response(lec) for lec in q.all()]


@router.get("/{lecture_id}", response_model=LectureResponse)
def get_lecture(
    lecture_id: int,
    principal: Principal = Depends(allow(Resource.LECTURE, Action.READ)),
    db: Session = Depends(get_db),
):
    lec = load_for(
        db, Lecture, lecture_id, principal, Resource.LECTURE, Action.READ, "Lecture not found", lecture_query(db)
    )
    return _lecture_to_response(lec)


@router.put("/{lecture_id}", response_model=MessageResponse)
def update_lecture(
    lecture_id: int,
    data: LectureRequest,
    principal: Principal = Depends(allow(Resource.LECTURE, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    """Owner or admin. lecturer_id never changes."""
    lec = load_for(db, Lecture, lecture_id, principal, Resource.LECTURE, Action.UPDATE, "Lecture not found")
    for field, value in data.model_dump().items():
        setattr(lec, field, value)
    commit_or_raise(db, duplicate="Lecture already exists", referenced=MISSING_REFERENCE_MSG)
    logger.info("Lecture updated id=%s by user_id=%s", lecture_id, principal.id)
    return MessageResponse(message="Lecture updated successfully")


@router.delete("/{lecture_id}", response_model=MessageResponse)
def delete_lecture(
    lecture_id: int,
    principal: Principal = Depends(allow(Resource.LECTURE, Action.DELETE)),
    db: Session = Depends(get_db),
):
    """Owner or admin. Feedback and ratings on the lecture go with it."""
    lec = load_for(db, Lecture, lecture_id, principal, Resource.LECTURE, Action.DELETE, "Lecture not found")
    db.delete(lec)
    commit_or_raise(db, duplicate="Lecture already exists", referenced="Lecture is still referenced")
    logger.info("Lecture deleted id=%s by user_id=%s", lecture_id, principal.id)
    return MessageResponse(message="Lecture deleted successfully")
