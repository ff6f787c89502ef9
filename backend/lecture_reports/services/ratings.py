"""
Rating upsert: one statement keyed on (lecture_id, user_id), so concurrent submissions from the same student
can neither raise a duplicate-key error nor lose an update.
"""
import logging

from sqlalchemy import func
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lecture_reports.models.rating import Rating

logger = logging.getLogger(__name__)

_ON_CONFLICT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def _generic_upsert(db: Session, lecture_id: int, user_id: int, value: int) -> None:
    """Fallback for dialects without a native upsert: update first, insert if nothing matched, retry once on a race."""
    for _ in range(2):
        updated = (
            db.query(Rating)
            .filter(Rating.lecture_id == lecture_id, Rating.user_id == user_id)
            .update({Rating.rating: value, Rating.created_at: func.now()}, synchronize_session=False)
        )
        if updated:
            return
        try:
            with db.begin_nested():
                db.add(Rating(lecture_id=lecture_id, user_id=user_id, rating=value))
            return
        except IntegrityError:
            logger.info("Rating insert raced for lecture_id=%s user_id=%s; retrying as update", lecture_id, user_id)
    raise RuntimeError("rating upsert did not converge")


def upsert_rating(db: Session, lecture_id: int, user_id: int, value: int) -> bool:
    """
    Insert or overwrite the caller's rating and refresh its timestamp. Commits.
    Returns True when a previous rating existed (the value was updated), False for a first rating.
    """
    existed = (
        db.query(Rating.id)
        .filter(Rating.lecture_id == lecture_id, Rating.user_id == user_id)
        .first()
        is not None
    )
    dialect = db.get_bind().dialect.name
    values = {"lecture_id": lecture_id, "user_id": user_id, "rating": value}
    if dialect in _ON_CONFLICT_DIALECTS:
        stmt = _ON_CONFLICT_DIALECTS[dialect](Rating).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Rating.lecture_id, Rating.user_id],
            set_={"rating": stmt.excluded.rating, "created_at": func.now()},
        )
        db.execute(stmt)
    elif dialect in ("mysql", "mariadb"):
        stmt = mysql.insert(Rating).values(**values)
        stmt = stmt.on_duplicate_key_update(rating=stmt.inserted.rating, created_at=func.now())
        db.execute(stmt)
    else:
        _generic_upsert(db, lecture_id, user_id, value)
    db.commit()
    return existed
