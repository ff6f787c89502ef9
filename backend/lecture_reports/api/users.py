"""
Users API: list (admin, principal lecturer) and read one (any authenticated user). Users are never edited here.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lecture_reports.database import get_db
from lecture_reports.errors import NotFound
from lecture_reports.models.user import User
from lecture_reports.schemas.auth import UserResponse
from lecture_reports.services.policy import Action, Principal, Resource
from lecture_reports.api.deps import allow

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(
    principal: Principal = Depends(allow(Resource.USER, Action.LIST)),
    db: Session = Depends(get_db),
):
    return [UserResponse.model_validate(u) for u in db.query(User).order_by(User.id).all()]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    principal: Principal = Depends(allow(Resource.USER, Action.READ)),
    db: Session = Depends(get_db),
):
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return UserResponse.model_validate(user)
