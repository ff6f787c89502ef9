"""
Shared fixtures: a fresh in-memory SQLite database per test (foreign keys on), the FastAPI app wired to it through
dependency overrides, and small builders for users/courses/classes/lectures with ready-made Bearer headers.
"""
import itertools
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lecture_reports import models  # noqa: F401
from lecture_reports.config import Settings, get_settings
from lecture_reports.database import Base, build_engine, get_db, seed_faculties
from lecture_reports.main import app
from lecture_reports.models.course import Course
from lecture_reports.models.faculty import Faculty
from lecture_reports.models.lecture import Lecture
from lecture_reports.models.lecturer_assignment import LecturerAssignment
from lecture_reports.models.school_class import SchoolClass
from lecture_reports.models.types import Role
from lecture_reports.models.user import User
from lecture_reports.services.auth import create_access_token, hash_password

PASSWORD = "testpass123"
# bcrypt is slow on purpose; hash once for every fixture user
_PASSWORD_HASH = hash_password(PASSWORD)

TEST_SETTINGS = Settings(
    database_url="sqlite://",
    secret_key="test-secret-key",
    jwt_expire_minutes=60,
    seed_faculties="Faculty of ICT,Faculty of Business",
)


@pytest.fixture
def test_settings():
    return TEST_SETTINGS


@pytest.fixture
def engine():
    eng = build_engine(TEST_SETTINGS, poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_faculties(db, TEST_SETTINGS.faculty_names)
    finally:
        db.close()
    return factory


@pytest.fixture
def client(session_factory):
    """TestClient whose requests use the in-memory database and the test secret."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_settings, None)


class Builder:
    """Inserts rows directly (each call in its own committed session) and mints tokens for users."""

    _seq = itertools.count(1)

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def _save(self, row):
        db = self.session_factory()
        try:
            db.add(row)
            db.commit()
            db.refresh(row)
            db.expunge(row)
            return row
        finally:
            db.close()

    def fetch(self, model, row_id):
        db = self.session_factory()
        try:
            return db.get(model, row_id)
        finally:
            db.close()

    def count(self, model, **filters):
        db = self.session_factory()
        try:
            return db.query(model).filter_by(**filters).count()
        finally:
            db.close()

    def user(self, role: Role, name: str | None = None) -> User:
        n = next(self._seq)
        return self._save(User(
            name=name or f"{role.value} {n}",
            email=f"{role.value}-{n}@example.com",
            password_hash=_PASSWORD_HASH,
            role=role.value,
        ))

    def headers(self, user: User) -> dict:
        token = create_access_token(user.id, user.role, TEST_SETTINGS)
        return {"Authorization": f"Bearer {token}"}

    def user_with_headers(self, role: Role) -> tuple[User, dict]:
        u = self.user(role)
        return u, self.headers(u)

    def faculty_id(self) -> int:
        db = self.session_factory()
        try:
            return db.query(Faculty).order_by(Faculty.id).first().id
        finally:
            db.close()

    def course(self, leader: User | None = None, code: str | None = None, name: str = "Course") -> Course:
        n = next(self._seq)
        return self._save(Course(
            course_code=code or f"C{n:04d}",
            course_name=f"{name} {n}",
            program_leader_id=leader.id if leader else None,
        ))

    def school_class(self, registered: int = 40, name: str | None = None) -> SchoolClass:
        n = next(self._seq)
        return self._save(SchoolClass(
            class_name=name or f"Class {n}",
            faculty_id=self.faculty_id(),
            total_registered_students=registered,
            venue="Hall 6",
            scheduled_time="Mon 08:30",
        ))

    def lecture(self, lecturer: User, cls: SchoolClass, course: Course, present: int | None = 30) -> Lecture:
        return self._save(Lecture(
            class_id=cls.id,
            course_id=course.id,
            lecturer_id=lecturer.id,
            week_of_reporting="Week 3",
            date_of_lecture=date(2024, 9, 16),
            actual_students_present=present,
            topic_taught="Normalization",
        ))

    def assignment(self, lecturer: User, cls: SchoolClass, course: Course) -> LecturerAssignment:
        return self._save(LecturerAssignment(lecturer_id=lecturer.id, class_id=cls.id, course_id=course.id))


@pytest.fixture
def build(session_factory):
    return Builder(session_factory)


@pytest.fixture
def lecture_setup(build):
    """One lecturer with one lecture on a 40-student class; returns (lecturer, headers, lecture, class, course)."""
    lecturer, headers = build.user_with_headers(Role.LECTURER)
    cls = build.school_class(registered=40)
    course = build.course(build.user(Role.PROGRAM_LEADER))
    lec = build.lecture(lecturer, cls, course, present=30)
    return lecturer, headers, lec, cls, course
