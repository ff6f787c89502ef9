"""
Class schemas. "class" is a Python keyword, so the wrapped row is serialized under that alias.
"""
from datetime import datetime
from pydantic import BaseModel, Field

from lecture_reports.schemas.common import NonEmptyStr


class ClassRequest(BaseModel):
    class_name: NonEmptyStr
    faculty_id: int
    total_registered_students: int = Field(ge=1)
    venue: NonEmptyStr
    scheduled_time: NonEmptyStr


class ClassResponse(BaseModel):
    id: int
    class_name: str
    faculty_id: int
    total_registered_students: int
    venue: str
    scheduled_time: str
    created_at: datetime | None
    faculty_name: str | None = None


class ClassMutationResponse(BaseModel):
    success: bool = True
    class_: ClassResponse = Field(serialization_alias="class")
