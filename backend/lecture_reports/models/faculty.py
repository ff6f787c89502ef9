"""
Faculty: read-only reference data. Classes belong to a faculty.
"""
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lecture_reports.database import Base


class Faculty(Base):
    __tablename__ = "faculties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
