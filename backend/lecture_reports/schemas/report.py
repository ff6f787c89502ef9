"""
Report view schemas: monitoring statistics and the program leader report.
"""
from pydantic import BaseModel


class CourseAttendance(BaseModel):
    course_id: int | None
    course_name: str
    lectures: int
    attendance: float


class MonitoringResponse(BaseModel):
    total_lectures: int
    total_students: int
    average_attendance: float
    top_courses: list[CourseAttendance]


class ProgramStats(BaseModel):
    total_courses: int
    total_lectures: int
    total_students: int
    average_attendance: float


class CoursePerformance(BaseModel):
    course_id: int
    course_code: str
    course_name: str
    lectures: int
    attendance: float
    average_rating: float | None


class ProgramReportResponse(BaseModel):
    program_stats: ProgramStats
    course_performance: list[CoursePerformance]
