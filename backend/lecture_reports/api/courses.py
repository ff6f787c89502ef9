"""
Courses API. Program leaders create courses for themselves and may only see, change or delete their own;
admins and principal lecturers read everything. /all-courses is the unscoped list used by lecture report forms.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from lecture_reports.database import commit_or_raise, get_db
from lecture_reports.models.course import Course
from lecture_reports.schemas.common import MessageResponse
from lecture_reports.schemas.course import CourseMutationResponse, CourseRequest, CourseResponse
from lecture_reports.services import policy
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.api.deps import allow, load_for

router = APIRouter(prefix="/courses", tags=["courses"])
catalog_router = APIRouter(tags=["courses"])
logger = logging.getLogger(__name__)

DUPLICATE_CODE_MSG = "Course code already exists"


def _course_query(db: Session):
    return db.query(Course).options(joinedload(Course.program_leader))


def _course_to_response(c: Course) -> CourseResponse:
    leader = c.program_leader
    return CourseResponse(
        id=c.id,
        course_code=c.course_code,
        course_name=c.course_name,
        program_leader_id=c.program_leader_id,
        created_at=c.created_at,
        program_leader_name=leader.name if leader else None,
        program_leader_email=leader.email if leader else None,
    )


def _newest_first(query):
    return query.order_by(Course.created_at.desc(), Course.id.desc())


@router.get("", response_model=list[CourseResponse])
def list_courses(
    principal: Principal = Depends(allow(Resource.COURSE, Action.LIST)),
    db: Session = Depends(get_db),
):
    """All courses; a program leader only gets the courses they lead."""
    q = policy.scope_query(_course_query(db), Course, principal, Resource.COURSE, Action.LIST)
    return [_course_to_response(c) for c in _newest_first(q).all()]


@catalog_router.get("/all-courses", response_model=list[CourseResponse])
def list_all_courses(
    principal: Principal = Depends(allow(Resource.COURSE, Action.CATALOG)),
    db: Session = Depends(get_db),
):
    return [_course_to_response(c) for c in _newest_first(_course_query(db)).all()]


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: int,
    principal: Principal = Depends(allow(Resource.COURSE, Action.READ)),
    db: Session = Depends(get_db),
):
    c = load_for(db, Course, course_id, principal, Resource.COURSE, Action.READ, "Course not found", _course_query(db))
    return _course_to_response(c)


@router.post("", response_model=CourseMutationResponse)
def create_course(
    data: CourseRequest,
    principal: Principal = Depends(allow(Resource.COURSE, Action.CREATE)),
    db: Session = Depends(get_db),
):
    """Create a course owned by the calling program leader."""
    course = Course(course_code=data.course_code, course_name=data.course_name, program_leader_id=principal.id)
    db.add(course)
    commit_or_raise(db, duplicate=DUPLICATE_CODE_MSG, referenced="Program leader does not exist")
    logger.info("Course created id=%s by user_id=%s", course.id, principal.id)
    return CourseMutationResponse(course=_course_to_response(_course_query(db).filter(Course.id == course.id).one()))


@router.put("/{course_id}", response_model=CourseMutationResponse)
def update_course(
    course_id: int,
    data: CourseRequest,
    principal: Principal = Depends(allow(Resource.COURSE, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    course = load_for(db, Course, course_id, principal, Resource.COURSE, Action.UPDATE, "Course not found")
    course.course_code = data.course_code
    course.course_name = data.course_name
    commit_or_raise(db, duplicate=DUPLICATE_CODE_MSG, referenced="Program leader does not exist")
    return CourseMutationResponse(course=_course_to_response(_course_query(db).filter(Course.id == course_id).one()))


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: int,
    principal: Principal = Depends(allow(Resource.COURSE, Action.DELETE)),
    db: Session = Depends(get_db),
):
    course = load_for(db, Course, course_id, principal, Resource.COURSE, Action.DELETE, "Course not found")
    db.delete(course)
    commit_or_raise(db, duplicate=DUPLICATE_CODE_MSG, referenced="Course still has lecture reports and cannot be deleted")
    logger.info("Course deleted id=%s by user_id=%s", course_id, principal.id)
    return MessageResponse(message="Course deleted successfully")
