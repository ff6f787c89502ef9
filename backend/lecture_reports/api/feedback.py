"""
Feedback and ratings API.
Feedback is append-only text from lecturers and principal lecturers. Ratings are one 1-5 score per student per
lecture, resubmission overwrites; the summary is open to every authenticated user.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from lecture_reports.database import commit_or_raise, get_db
from lecture_reports.errors import NotFound
from lecture_reports.models.feedback import Feedback
from lecture_reports.models.lecture import Lecture
from lecture_reports.models.rating import Rating
from lecture_reports.schemas.common import MessageResponse
from lecture_reports.schemas.feedback import (
    FeedbackRequest,
    FeedbackResponse,
    RatingRequest,
    RatingSummaryResponse,
    StudentRatingResponse,
    UserRatingResponse,
)
from lecture_reports.services import policy
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.services.ratings import upsert_rating
from lecture_reports.services.reports import rating_summary
from lecture_reports.api.deps import allow

feedback_router = APIRouter(prefix="/feedback", tags=["feedback"])
rating_router = APIRouter(tags=["ratings"])
logger = logging.getLogger(__name__)


def _require_lecture(db: Session, lecture_id: int) -> None:
    if db.query(Lecture.id).filter(Lecture.id == lecture_id).first() is None:
        raise NotFound("Lecture not found")


@feedback_router.post("", response_model=MessageResponse)
def submit_feedback(
    data: FeedbackRequest,
    principal: Principal = Depends(allow(Resource.FEEDBACK, Action.CREATE)),
    db: Session = Depends(get_db),
):
    _require_lecture(db, data.lecture_id)
    db.add(Feedback(lecture_id=data.lecture_id, user_id=principal.id, feedback_text=data.feedback_text))
    commit_or_raise(db, duplicate="Feedback already exists", referenced="Lecture not found")
    return MessageResponse(message="Feedback submitted successfully")


@feedback_router.get("/{lecture_id}", response_model=list[FeedbackResponse])
def list_feedback(
    lecture_id: int,
    principal: Principal = Depends(allow(Resource.FEEDBACK, Action.LIST)),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Feedback)
        .options(joinedload(Feedback.author))
        .filter(Feedback.lecture_id == lecture_id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .all()
    )
    return [
        FeedbackResponse(
            id=f.id,
            lecture_id=f.lecture_id,
            feedback_text=f.feedback_text,
            created_at=f.created_at,
            user_name=f.author.name if f.author else None,
            user_role=f.author.role if f.author else None,
        )
        for f in rows
    ]


@rating_router.post("/rating", response_model=MessageResponse)
def submit_rating(
    data: RatingRequest,
    principal: Principal = Depends(allow(Resource.RATING, Action.UPSERT)),
    db: Session = Depends(get_db),
):
    """Rate a lecture 1-5. A second submission replaces the first; out-of-range values never reach here."""
    _require_lecture(db, data.lecture_id)
    updated = upsert_rating(db, data.lecture_id, principal.id, data.rating)
    logger.info("Rating %s lecture_id=%s user_id=%s", "updated" if updated else "created", data.lecture_id, principal.id)
    return MessageResponse(message="Rating updated successfully" if updated else "Rating submitted successfully")


@rating_router.get("/rating/{lecture_id}", response_model=RatingSummaryResponse)
def get_rating_summary(
    lecture_id: int,
    principal: Principal = Depends(allow(Resource.RATING, Action.SUMMARY)),
    db: Session = Depends(get_db),
):
    return RatingSummaryResponse(**rating_summary(db, lecture_id))


@rating_router.get("/rating/{lecture_id}/user", response_model=UserRatingResponse)
def get_own_rating(
    lecture_id: int,
    principal: Principal = Depends(allow(Resource.RATING, Action.READ_OWN)),
    db: Session = Depends(get_db),
):
    q = db.query(Rating).filter(Rating.lecture_id == lecture_id)
    row = policy.scope_query(q, Rating, principal, Resource.RATING, Action.READ_OWN).first()
    return UserRatingResponse(user_rating=row.rating if row else None)


@rating_router.get("/user/ratings", response_model=list[StudentRatingResponse])
def list_own_ratings(
    principal: Principal = Depends(allow(Resource.RATING, Action.LIST_OWN)),
    db: Session = Depends(get_db),
):
    q = db.query(Rating).options(joinedload(Rating.lecture).joinedload(Lecture.course))
    q = policy.scope_query(q, Rating, principal, Resource.RATING, Action.LIST_OWN)
    rows = q.order_by(Rating.created_at.desc(), Rating.id.desc()).all()
    return [
        StudentRatingResponse(
            lecture_id=r.lecture_id,
            rating=r.rating,
            created_at=r.created_at,
            topic_taught=r.lecture.topic_taught if r.lecture else None,
            course_name=r.lecture.course.course_name if r.lecture and r.lecture.course else None,
        )
        for r in rows
    ]
