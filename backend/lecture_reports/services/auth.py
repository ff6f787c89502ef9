"""
Auth service: password hashing and JWT creation/verification.
Uses bcrypt directly (no passlib) to avoid passlib/bcrypt version conflicts.
Tokens carry only the subject id and role; the authorization gate never reads the database.
"""
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from lecture_reports.config import Settings
from lecture_reports.models.types import Role
from lecture_reports.services.policy import Principal

# Bcrypt limit is 72 bytes; use 71 so we never exceed
BCRYPT_MAX_BYTES = 71


def _truncate_to_bytes(s: str, max_bytes: int = BCRYPT_MAX_BYTES) -> bytes:
    """Truncate string to at most max_bytes UTF-8; return bytes for bcrypt."""
    if not s:
        return b""
    encoded = s.encode("utf-8")
    if len(encoded) <= max_bytes:
        return encoded
    return encoded[:max_bytes]


def hash_password(password: str) -> str:
    """Hash password for storage. Raises ValueError if password is None."""
    if password is None:
        raise ValueError("password is required")
    raw = _truncate_to_bytes(password)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(raw, salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    raw = _truncate_to_bytes(plain)
    try:
        return bcrypt.checkpw(raw, hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(subject_id: int, role: Role | str, cfg: Settings, now: datetime | None = None) -> str:
    issued = now or datetime.now(timezone.utc)
    expire = issued + timedelta(minutes=cfg.jwt_expire_minutes)
    role_value = role.value if isinstance(role, Role) else str(role)
    # JWT iat/exp must be numeric (Unix timestamps); sub must be a string
    payload = {
        "sub": str(subject_id),
        "role": role_value,
        "iat": int(issued.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, cfg.secret_key, algorithm=cfg.jwt_algorithm)


def decode_access_token(token: str, cfg: Settings) -> Principal | None:
    """Verify signature and expiry; return the Principal, or None for any invalid token."""
    try:
        payload = jwt.decode(token, cfg.secret_key, algorithms=[cfg.jwt_algorithm])
    except JWTError:
        return None
    try:
        return Principal(id=int(payload["sub"]), role=Role(payload["role"]))
    except (KeyError, TypeError, ValueError):
        return None
