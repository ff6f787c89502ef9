"""
Auth routes: register (any of the five roles), login (JWT), GET /auth/me.
"""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from lecture_reports.config import Settings, get_settings
from lecture_reports.database import get_db
from lecture_reports.errors import DuplicateEmail, InvalidCredentials, InvalidRole, NotFound
from lecture_reports.models.types import Role
from lecture_reports.models.user import User
from lecture_reports.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from lecture_reports.services.auth import hash_password, verify_password, create_access_token
from lecture_reports.services.policy import Principal
from lecture_reports.api.deps import get_current_principal

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user with one of the five roles. Duplicate email is reported from the unique constraint."""
    if data.role not in Role.values():
        raise InvalidRole("Invalid role")
    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        role=data.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Register IntegrityError: %s", e.orig)
        raise DuplicateEmail("Email already exists")
    db.refresh(user)
    logger.info("Registered user_id=%s role=%s", user.id, user.role)
    return RegisterResponse(message="User registered successfully!", user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
):
    """Login with email/password; returns JWT. Unknown email and wrong password give the same error."""
    user = db.query(User).filter(User.email == data.email).first()
    if not user or not verify_password(data.password, user.password_hash):
        raise InvalidCredentials("Invalid email or password")
    token = create_access_token(user.id, user.role, cfg)
    return LoginResponse(message="Login successful", token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    """Return the caller's user summary."""
    user = db.get(User, principal.id)
    if not user:
        raise NotFound("User not found")
    return UserResponse.model_validate(user)
