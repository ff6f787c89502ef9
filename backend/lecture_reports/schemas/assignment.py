"""
Lecturer assignment schemas.
"""
from datetime import datetime
from pydantic import BaseModel


class AssignmentRequest(BaseModel):
    lecturer_id: int
    class_id: int
    course_id: int


class AssignmentResponse(BaseModel):
    id: int
    lecturer_id: int
    class_id: int
    course_id: int
    created_at: datetime | None
    class_name: str | None = None
    total_registered_students: int | None = None
    venue: str | None = None
    scheduled_time: str | None = None
    faculty_id: int | None = None
    faculty_name: str | None = None
    lecturer_name: str | None = None
    course_name: str | None = None
