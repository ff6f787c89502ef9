"""
SQLAlchemy models. Import here so init_db and the app can use them.
"""
from lecture_reports.models.user import User
from lecture_reports.models.faculty import Faculty
from lecture_reports.models.course import Course
from lecture_reports.models.school_class import SchoolClass
from lecture_reports.models.lecture import Lecture
from lecture_reports.models.lecturer_assignment import LecturerAssignment
from lecture_reports.models.feedback import Feedback
from lecture_reports.models.rating import Rating

__all__ = [
    "User",
    "Faculty",
    "Course",
    "SchoolClass",
    "Lecture",
    "LecturerAssignment",
    "Feedback",
    "Rating",
]
