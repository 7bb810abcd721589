from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError, ExpiredSignatureError

from companygrow.core.errors import ApiError
from companygrow.db import get_db
from companygrow.models.user import User, STAFF_ROLES
from companygrow.security import decode_access_token

# auto_error=False: el token también puede venir en x-auth-token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def _resolve_token(bearer: str | None, x_auth_token: str | None) -> str | None:
    return x_auth_token or bearer


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
        sub = payload.get("sub")
        if sub is None:
            raise ApiError(401, "Invalid token", "INVALID_TOKEN")
        user_id = int(sub)
    except ExpiredSignatureError:
        raise ApiError(401, "Token has expired", "TOKEN_EXPIRED")
    except (JWTError, ValueError):
        raise ApiError(401, "Invalid token", "INVALID_TOKEN")

    user = db.get(User, user_id)
    if user is None:
        raise ApiError(401, "User not found", "USER_NOT_FOUND")
    if not user.is_active:
        raise ApiError(401, "User account is deactivated", "USER_DEACTIVATED")
    return user


def get_current_user(
    bearer: str | None = Depends(oauth2_scheme),
    x_auth_token: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    token = _resolve_token(bearer, x_auth_token)
    if not token:
        raise ApiError(401, "No token provided, access denied", "NO_TOKEN")
    return _user_from_token(token, db)


def get_optional_user(
    bearer: str | None = Depends(oauth2_scheme),
    x_auth_token: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User | None:
    """Igual que get_current_user pero devuelve None si no hay token válido."""
    token = _resolve_token(bearer, x_auth_token)
    if not token:
        return None
    try:
        return _user_from_token(token, db)
    except ApiError:
        return None


def require_role(*roles: str):
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ApiError(403, "Insufficient permissions", "INSUFFICIENT_PERMISSIONS")
        return user
    return checker


require_staff = require_role(*STAFF_ROLES)
require_admin = require_role("admin")


def ensure_self_or_staff(me: User, user_id: int, code: str = "UNAUTHORIZED_ACCESS") -> None:
    if me.id != user_id and not me.is_staff:
        raise ApiError(403, "Access denied", code)


__all__ = [
    "get_db", "get_current_user", "get_optional_user",
    "require_role", "require_staff", "require_admin", "ensure_self_or_staff",
]
