"""
Lecture report: one taught session, owned by lecturer_id.
Class, course and lecturer must exist (foreign keys); classes/courses with lectures cannot be deleted.
"""
from datetime import date, datetime
from sqlalchemy import Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from lecture_reports.database import Base


class Lecture(Base):
    __tablename__ = "lectures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    lecturer_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    week_of_reporting: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_lecture: Mapped[date] = mapped_column(Date, nullable=False)
    actual_students_present: Mapped[int | None] = mapped_column(Integer, nullable=True)
    topic_taught: Mapped[str | None] = mapped_column(Text, nullable=True)
    learning_outcomes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    school_class = relationship("SchoolClass")
    course = relationship("Course")
    lecturer = relationship("User")
