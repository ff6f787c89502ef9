"""
Classes API. Every role can list classes; admins, principal lecturers and program leaders manage them.
A lecturer may open a single class only when an assignment links them to it.
Faculties are read-only reference data served from here as well.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from lecture_reports.database import commit_or_raise, get_db
from lecture_reports.errors import Forbidden, NotFound
from lecture_reports.models.faculty import Faculty
from lecture_reports.models.lecturer_assignment import LecturerAssignment
from lecture_reports.models.school_class import SchoolClass
from lecture_reports.schemas.common import MessageResponse
from lecture_reports.schemas.course import FacultyResponse
from lecture_reports.schemas.school_class import ClassMutationResponse, ClassRequest, ClassResponse
from lecture_reports.services import policy
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.api.deps import allow

router = APIRouter(prefix="/classes", tags=["classes"])
catalog_router = APIRouter(tags=["classes"])
faculties_router = APIRouter(prefix="/faculties", tags=["faculties"])
logger = logging.getLogger(__name__)

MISSING_FACULTY_MSG = "Faculty does not exist"


def _class_query(db: Session):
    return db.query(SchoolClass).options(joinedload(SchoolClass.faculty))


def _class_to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        class_name=c.class_name,
        faculty_id=c.faculty_id,
        total_registered_students=c.total_registered_students,
        venue=c.venue,
        scheduled_time=c.scheduled_time,
        created_at=c.created_at,
        faculty_name=c.faculty.name if c.faculty else None,
    )


def _all_classes(db: Session) -> list[ClassResponse]:
    rows = _class_query(db).order_by(SchoolClass.created_at.desc(), SchoolClass.id.desc()).all()
    return [_class_to_response(c) for c in rows]


def _get_class_or_404(db: Session, class_id: int) -> SchoolClass:
    c = _class_query(db).filter(SchoolClass.id == class_id).first()
    if not c:
        raise NotFound("Class not found")
    return c


@router.get("", response_model=list[ClassResponse])
def list_classes(
    principal: Principal = Depends(allow(Resource.CLASS, Action.LIST)),
    db: Session = Depends(get_db),
):
    return _all_classes(db)


@catalog_router.get("/all-classes", response_model=list[ClassResponse])
def list_all_classes(
    principal: Principal = Depends(allow(Resource.CLASS, Action.CATALOG)),
    db: Session = Depends(get_db),
):
    return _all_classes(db)


@router.get("/{class_id}", response_model=ClassResponse)
def get_class(
    class_id: int,
    principal: Principal = Depends(allow(Resource.CLASS, Action.READ)),
    db: Session = Depends(get_db),
):
    """Single class. Lecturers without an assignment to it get 403, whether or not the class exists."""
    if policy.requires_assignment(principal, Resource.CLASS, Action.READ):
        assigned = (
            db.query(LecturerAssignment.id)
            .filter(LecturerAssignment.lecturer_id == principal.id, LecturerAssignment.class_id == class_id)
            .first()
        )
        if not assigned:
            logger.info("Class read denied: class_id=%s lecturer_id=%s not assigned", class_id, principal.id)
            raise Forbidden("Access denied")
    return _class_to_response(_get_class_or_404(db, class_id))


@router.post("", response_model=ClassMutationResponse, response_model_by_alias=True)
def create_class(
    data: ClassRequest,
    principal: Principal = Depends(allow(Resource.CLASS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    c = SchoolClass(**data.model_dump())
    db.add(c)
    commit_or_raise(db, duplicate="Class already exists", referenced=MISSING_FACULTY_MSG)
    logger.info("Class created id=%s by user_id=%s", c.id, principal.id)
    return ClassMutationResponse(class_=_class_to_response(_get_class_or_404(db, c.id)))


@router.put("/{class_id}", response_model=ClassMutationResponse, response_model_by_alias=True)
def update_class(
    class_id: int,
    data: ClassRequest,
    principal: Principal = Depends(allow(Resource.CLASS, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    c = _get_class_or_404(db, class_id)
    for field, value in data.model_dump().items():
        setattr(c, field, value)
    commit_or_raise(db, duplicate="Class already exists", referenced=MISSING_FACULTY_MSG)
    return ClassMutationResponse(class_=_class_to_response(_get_class_or_404(db, class_id)))


@router.delete("/{class_id}", response_model=MessageResponse)
def delete_class(
    class_id: int,
    principal: Principal = Depends(allow(Resource.CLASS, Action.DELETE)),
    db: Session = Depends(get_db),
):
    c = _get_class_or_404(db, class_id)
    db.delete(c)
    commit_or_raise(db, duplicate="Class already exists", referenced="Class still has lecture reports and cannot be deleted")
    logger.info("Class deleted id=%s by user_id=%s", class_id, principal.id)
    return MessageResponse(message="Class deleted successfully")


@faculties_router.get("", response_model=list[FacultyResponse])
def list_faculties(
    principal: Principal = Depends(allow(Resource.FACULTY, Action.LIST)),
    db: Session = Depends(get_db),
):
    return [FacultyResponse.model_validate(f) for f in db.query(Faculty).order_by(Faculty.id).all()]


@faculties_router.get("/{faculty_id}", response_model=FacultyResponse)
def get_faculty(
    faculty_id: int,
    principal: Principal = Depends(allow(Resource.FACULTY, Action.READ)),
    db: Session = Depends(get_db),
):
    f = db.get(Faculty, faculty_id)
    if not f:
        raise NotFound("Faculty not found")
    return FacultyResponse.model_validate(f)
