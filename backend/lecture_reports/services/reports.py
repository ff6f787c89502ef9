"""
Read-only report views computed per request from rows the caller is already allowed to see.
Nothing is cached or materialized; every call rescans.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from lecture_reports.models.course import Course
from lecture_reports.models.lecture import Lecture
from lecture_reports.models.rating import Rating

TOP_COURSES_LIMIT = 5


def _round1(value: float | None) -> float | None:
    return None if value is None else round(float(value), 1)


def rating_summary(db: Session, lecture_id: int) -> dict:
    """Average (1 decimal), row count and distinct raters for a lecture. Empty set gives None/0/0."""
    avg, total, unique = (
        db.query(
            func.avg(Rating.rating),
            func.count(Rating.id),
            func.count(func.distinct(Rating.user_id)),
        )
        .filter(Rating.lecture_id == lecture_id)
        .one()
    )
    return {
        "average_rating": _round1(avg) if total else None,
        "total_ratings": int(total or 0),
        "unique_raters": int(unique or 0),
    }


def attendance_rate(lecture: Lecture) -> float | None:
    """Percentage of registered students present, or None when the class has no registered count."""
    registered = lecture.school_class.total_registered_students if lecture.school_class else 0
    if not registered:
        return None
    return (lecture.actual_students_present or 0) / registered * 100


def _average_attendance(lectures: list[Lecture]) -> float:
    rates = [r for r in (attendance_rate(lec) for lec in lectures) if r is not None]
    if not rates:
        return 0.0
    return round(sum(rates) / len(rates), 1)


def monitoring_stats(lectures: list[Lecture]) -> dict:
    """
    Totals over an already-scoped lecture list.
    top_courses ranks courses by pooled attendance (present / registered across all their lectures).
    Courses are grouped by id, so two courses sharing a name stay separate entries.
    """
    per_course: dict[int, dict] = {}
    for lec in lectures:
        name = lec.course.course_name if lec.course else "Unknown"
        stats = per_course.setdefault(
            lec.course_id, {"course_name": name, "lectures": 0, "present": 0, "registered": 0}
        )
        stats["lectures"] += 1
        stats["present"] += lec.actual_students_present or 0
        stats["registered"] += lec.school_class.total_registered_students if lec.school_class else 0
    top = sorted(
        (
            {
                "course_id": course_id,
                "course_name": s["course_name"],
                "lectures": s["lectures"],
                "attendance": round(s["present"] / s["registered"] * 100, 1) if s["registered"] else 0.0,
            }
            for course_id, s in per_course.items()
        ),
        key=lambda c: c["attendance"],
        reverse=True,
    )[:TOP_COURSES_LIMIT]
    return {
        "total_lectures": len(lectures),
        "total_students": sum(lec.actual_students_present or 0 for lec in lectures),
        "average_attendance": _average_attendance(lectures),
        "top_courses": top,
    }


def program_report(db: Session, program_leader_id: int) -> dict:
    """Course-level performance for every course owned by program_leader_id."""
    courses = (
        db.query(Course)
        .filter(Course.program_leader_id == program_leader_id)
        .order_by(Course.course_code)
        .all()
    )
    course_ids = [c.id for c in courses]
    lectures: list[Lecture] = []
    avg_by_course: dict[int, float] = {}
    if course_ids:
        lectures = db.query(Lecture).filter(Lecture.course_id.in_(course_ids)).all()
        rows = (
            db.query(Lecture.course_id, func.avg(Rating.rating))
            .join(Rating, Rating.lecture_id == Lecture.id)
            .filter(Lecture.course_id.in_(course_ids))
            .group_by(Lecture.course_id)
            .all()
        )
        avg_by_course = {cid: avg for cid, avg in rows}

    performance = []
    for c in courses:
        own = [lec for lec in lectures if lec.course_id == c.id]
        performance.append({
            "course_id": c.id,
            "course_code": c.course_code,
            "course_name": c.course_name,
            "lectures": len(own),
            "attendance": _average_attendance(own),
            "average_rating": _round1(avg_by_course.get(c.id)),
        })
    return {
        "program_stats": {
            "total_courses": len(courses),
            "total_lectures": len(lectures),
            "total_students": sum(lec.actual_students_present or 0 for lec in lectures),
            "average_attendance": _average_attendance(lectures),
        },
        "course_performance": performance,
    }
