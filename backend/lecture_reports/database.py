"""
SQLAlchemy engine and session. Supports SQLite (local runs and tests) and any server backend SQLAlchemy knows.
Sync usage; every request gets its own session from a fixed-size pool. Foreign keys are enforced by the database.
"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from lecture_reports.config import Settings, settings
from lecture_reports.errors import (
    DuplicateResource,
    FOREIGN_KEY,
    UNIQUE,
    ValidationError,
    classify_integrity_error,
)

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(cfg: Settings, **overrides) -> Engine:
    """Create the engine for cfg.database_url. Extra keyword args go straight to create_engine (tests pass a StaticPool)."""
    is_sqlite = cfg.database_url.startswith("sqlite")
    kwargs: dict = {"echo": cfg.debug}  # DEBUG=true logs SQL
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=cfg.db_pool_size,
            max_overflow=0,
            pool_timeout=cfg.db_pool_timeout,
            pool_pre_ping=True,
        )
    kwargs.update(overrides)
    eng = create_engine(cfg.database_url, **kwargs)
    if is_sqlite:
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine = build_engine(settings)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def seed_faculties(db: Session, names: list[str]) -> int:
    """Insert faculties when the table is empty. Returns the number inserted."""
    from lecture_reports.models.faculty import Faculty

    if db.query(Faculty).count() > 0:
        return 0
    for name in names:
        db.add(Faculty(name=name))
    db.commit()
    return len(names)


def init_db(bind: Engine | None = None, cfg: Settings | None = None) -> None:
    """Create tables and seed faculties. Call once at app startup."""
    # Import all models so they register with Base before create_all
    from lecture_reports import models  # noqa: F401

    bind = bind or engine
    cfg = cfg or settings
    Base.metadata.create_all(bind=bind)
    db = Session(bind=bind)
    try:
        inserted = seed_faculties(db, cfg.faculty_names)
        if inserted:
            logger.info("Seeded %s faculties", inserted)
    finally:
        db.close()


def get_db():
    """Dependency: yield a DB session, close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, duplicate: str, referenced: str) -> None:
    """
    Commit, translating constraint violations: unique -> DuplicateResource(duplicate),
    foreign key -> ValidationError(referenced). Other integrity errors propagate.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        kind = classify_integrity_error(e)
        logger.warning("Commit rejected (%s): %s", kind, e.orig)
        if kind == UNIQUE:
            raise DuplicateResource(duplicate) from e
        if kind == FOREIGN_KEY:
            raise ValidationError(referenced) from e
        raise
