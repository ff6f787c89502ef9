"""
Feedback and rating schemas.
"""
from datetime import datetime
from pydantic import BaseModel, StrictInt, field_validator

from lecture_reports.models.rating import MAX_RATING, MIN_RATING
from lecture_reports.schemas.common import NonEmptyStr

RATING_RANGE_MSG = f"Rating must be between {MIN_RATING} and {MAX_RATING}"


class FeedbackRequest(BaseModel):
    lecture_id: int
    feedback_text: NonEmptyStr


class FeedbackResponse(BaseModel):
    id: int
    lecture_id: int
    feedback_text: str
    created_at: datetime | None
    user_name: str | None = None
    user_role: str | None = None


class RatingRequest(BaseModel):
    lecture_id: int
    # Strict: JSON true and "5" are rejected
    rating: StrictInt

    @field_validator("rating")
    @classmethod
    def rating_in_range(cls, v: int) -> int:
        # Rejected, never clamped
        if v < MIN_RATING or v > MAX_RATING:
            raise ValueError(RATING_RANGE_MSG)
        return v


class RatingSummaryResponse(BaseModel):
    average_rating: float | None
    total_ratings: int
    unique_raters: int


class UserRatingResponse(BaseModel):
    user_rating: int | None


class StudentRatingResponse(BaseModel):
    lecture_id: int
    rating: int
    created_at: datetime | None
    topic_taught: str | None = None
    course_name: str | None = None
