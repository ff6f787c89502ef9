"""
Lecture report schemas. class_id, course_id and date_of_lecture are required; the rest is free-form.
"""
from datetime import date, datetime
from pydantic import BaseModel, Field


class LectureRequest(BaseModel):
    class_id: int
    course_id: int
    date_of_lecture: date
    week_of_reporting: str | None = None
    actual_students_present: int | None = Field(default=None, ge=0)
    topic_taught: str | None = None
    learning_outcomes: str | None = None
    recommendations: str | None = None


class LectureResponse(BaseModel):
    id: int
    class_id: int
    course_id: int
    lecturer_id: int
    week_of_reporting: str | None
    date_of_lecture: date
    actual_students_present: int | None
    topic_taught: str | None
    learning_outcomes: str | None
    recommendations: str | None
    created_at: datetime | None
    class_name: str | None = None
    course_name: str | None = None
    course_code: str | None = None
    lecturer_name: str | None = None
    faculty_name: str | None = None
    total_registered_students: int | None = None
