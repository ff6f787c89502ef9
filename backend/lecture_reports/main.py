"""
FastAPI application entrypoint.
Run with: uvicorn lecture_reports.main:app --reload --port 8081

Routes are mounted at root (no /api prefix):
  - Auth: POST /auth/register, POST /auth/login, GET /auth/me
  - Users, courses, classes, faculties, lectures, feedback, ratings, lecturer assignments
  - Reports: GET /reports/monitoring, GET /program-reports/{id}
  - Health: GET /health (process), GET /db-status (database)

Every error body is {"error": "<message>"}; unexpected failures are logged and returned as a generic 500.
"""
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from lecture_reports.config import DEFAULT_SECRET_KEY, settings
from lecture_reports.database import get_db
from lecture_reports.errors import AppError
from lecture_reports.api.auth import router as auth_router
from lecture_reports.api.users import router as users_router
from lecture_reports.api.courses import router as courses_router, catalog_router as courses_catalog_router
from lecture_reports.api.classes import (
    router as classes_router,
    catalog_router as classes_catalog_router,
    faculties_router,
)
from lecture_reports.api.lectures import router as lectures_router, nested_router as lectures_nested_router
from lecture_reports.api.feedback import feedback_router, rating_router
from lecture_reports.api.assignments import router as assignments_router
from lecture_reports.api.reports import router as reports_router

logger = logging.getLogger("lecture_reports.main")

GENERIC_ERROR_MSG = "Something went wrong on the server"

app = FastAPI(
    title="Lecture Reports API",
    description="Role-based academic reporting: courses, classes, lecture reports, feedback and ratings.",
    version="0.1.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(lectures_nested_router)
app.include_router(courses_router)
app.include_router(courses_catalog_router)
app.include_router(classes_router)
app.include_router(classes_catalog_router)
app.include_router(faculties_router)
app.include_router(lectures_router)
app.include_router(feedback_router)
app.include_router(rating_router)
app.include_router(assignments_router)
app.include_router(reports_router)


def validation_message(exc: RequestValidationError) -> str:
    """One readable sentence from pydantic errors: missing/blank fields are listed, validator messages unwrapped."""
    errors = exc.errors()
    missing = [
        str(e["loc"][-1])
        for e in errors
        if e.get("type") in ("missing", "string_too_short") and e.get("loc")
    ]
    if missing:
        return f"Missing required field(s): {', '.join(missing)}"
    if not errors:
        return "Invalid request"
    first = errors[0]
    msg = str(first.get("msg", "Invalid request"))
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    loc = [str(p) for p in first.get("loc", ()) if p != "body"]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": validation_message(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = "Route not found" if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found" else exc.detail
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": GENERIC_ERROR_MSG})


@app.on_event("startup")
def startup():
    """Configure logging, create tables and seed faculties. Fail fast if production uses the default SECRET_KEY."""
    logging.basicConfig(
        level=getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    if settings.is_production and (settings.secret_key or "").strip() == DEFAULT_SECRET_KEY:
        logger.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
        raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    from lecture_reports.database import init_db
    init_db()
    logger.info(
        "Lecture Reports API ready (database=%s, pool_size=%s, token lifetime=%s min)",
        settings.database_url.split("@")[-1],
        settings.db_pool_size,
        settings.jwt_expire_minutes,
    )


@app.get("/health")
def health():
    """Process liveness (JSON); does not touch the database."""
    return {"status": "ok", "message": "Lecture Reports API"}


@app.get("/db-status")
def db_status(db: Session = Depends(get_db)):
    """Unauthenticated database probe. Failure detail is logged, never returned."""
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("DB health check failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "Database not connected"},
        )
    return {"status": "Database connection successful"}
