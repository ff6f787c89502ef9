"""
Shared dependencies: the authorization gate.
get_current_principal validates the Bearer token; allow(resource, action) adds the role check from services.policy;
load_for applies the ownership check to one row.
"""
import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from lecture_reports.config import Settings, get_settings
from lecture_reports.errors import Forbidden, InvalidToken, NotFound, Unauthenticated
from lecture_reports.services import policy
from lecture_reports.services.auth import decode_access_token
from lecture_reports.services.policy import Action, Principal, Resource

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    cfg: Settings = Depends(get_settings),
) -> Principal:
    """Require a valid Bearer token; 401 when absent, 403 when invalid or expired."""
    if not credentials or not (getattr(credentials, "credentials", None) or "").strip():
        logger.debug("Auth failed: no Bearer token in request")
        raise Unauthenticated("Access token required")
    principal = decode_access_token(credentials.credentials, cfg)
    if principal is None:
        logger.debug("Auth failed: invalid or expired token")
        raise InvalidToken("Invalid or expired token")
    return principal


def allow(resource: Resource, action: Action):
    """Dependency factory: authenticated principal whose role is in the allow-set for (resource, action)."""

    def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        policy.authorize(principal, resource, action)
        return principal

    _dependency.__name__ = f"allow_{resource.value}_{action.value}"
    return _dependency


def load_for(
    db: Session,
    model,
    row_id: int,
    principal: Principal,
    resource: Resource,
    action: Action,
    not_found: str,
    query=None,
):
    """
    Load one row and apply the ownership rule for (resource, action).
    Scoped callers get the same 403 for a missing row and for someone else's row, so existence is never leaked;
    unscoped callers get 404 for a missing row.
    """
    q = query if query is not None else db.query(model)
    row = q.filter(model.id == row_id).first()
    if policy.is_scoped(principal, resource, action):
        if row is None or not policy.owns(principal, resource, action, row):
            logger.info(
                "Ownership denied: %s %s id=%s user_id=%s", action.value, resource.value, row_id, principal.id
            )
            raise Forbidden("Access denied")
        return row
    if row is None:
        raise NotFound(not_found)
    return row
