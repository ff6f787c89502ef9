"""
Course and faculty schemas.
"""
from datetime import datetime
from pydantic import BaseModel

from lecture_reports.schemas.common import NonEmptyStr


class CourseRequest(BaseModel):
    course_code: NonEmptyStr
    course_name: NonEmptyStr


class CourseResponse(BaseModel):
    id: int
    course_code: str
    course_name: str
    program_leader_id: int | None
    created_at: datetime | None
    program_leader_name: str | None = None
    program_leader_email: str | None = None


class CourseMutationResponse(BaseModel):
    success: bool = True
    course: CourseResponse


class FacultyResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
