import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from companygrow.core.config import RESET_CODE_TTL_SECONDS
from companygrow.core.errors import ApiError
from companygrow.core.rate_limit import auth_limit
from companygrow.deps import get_db, get_current_user
from companygrow.domain.points import rules as points
from companygrow.models.password_reset_code import PasswordResetCode
from companygrow.models.user import User
from companygrow.schemas.auth import Token, ForgotIn, ResetIn
from companygrow.schemas.common import ok
from companygrow.schemas.user import UserCreate, UserLogin, UserOut
from companygrow.security import (
    get_password_hash, verify_password, create_access_token, new_reset_code, codes_match,
)
from companygrow.services.email import send_reset_code
from companygrow.services.notifications import notify_welcome

log = logging.getLogger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_MESSAGE = "If the email exists, a reset code has been sent"


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.password):
        raise ApiError(401, "Invalid email or password", "INVALID_CREDENTIALS")
    if not user.is_active:
        raise ApiError(401, "User account is deactivated", "USER_DEACTIVATED")
    return user


def _login_payload(db: Session, user: User) -> dict:
    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    points.on_daily_activity(db, user.id)
    return {"token": create_access_token(subject=str(user.id), role=user.role), "user": UserOut.model_validate(user)}


@router.post("/register", status_code=201)
@auth_limit
def register(request: Request, payload: UserCreate, db: Session = Depends(get_db)):
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ApiError(409, "User already exists with this email", "USER_EXISTS", field="email")

    user = User(
        email=email,
        password=get_password_hash(payload.password),   # guarda HASH
        first_name=payload.first_name,
        last_name=payload.last_name,
        department=payload.department,
        position=payload.position,
        role="employee",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("registered user %s", user.id)

    points.on_user_registered(db, user.id)
    notify_welcome(db, user.id, user.first_name)

    return ok(
        {"token": create_access_token(subject=str(user.id), role=user.role), "user": UserOut.model_validate(user)},
        message="User registered successfully",
    )


@router.post("/login")
@auth_limit
def login(request: Request, payload: UserLogin, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    return ok(_login_payload(db, user), message="Login successful")


@router.post("/token", response_model=Token)
@auth_limit
def token(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Login OAuth2 (username = email) para la documentación interactiva."""
    user = _authenticate(db, form_data.username, form_data.password)
    data = _login_payload(db, user)
    return {"access_token": data["token"], "token_type": "bearer"}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return ok(UserOut.model_validate(user))


@router.get("/verify")
def verify(user: User = Depends(get_current_user)):
    return ok({"valid": True, "user": UserOut.model_validate(user)})


@router.post("/forgot-password", status_code=status.HTTP_200_OK)
@auth_limit
def forgot_password(request: Request, payload: ForgotIn, db: Session = Depends(get_db)):
    email = payload.email.lower()
    user = db.query(User).filter(User.email == email, User.is_active.is_(True)).first()
    if not user:
        # No revelar si existe o no
        return ok(message=FORGOT_MESSAGE)

    code, expires_at = new_reset_code()
    db.add(PasswordResetCode(email=email, code=code, expires_at=expires_at))
    db.commit()
    try:
        send_reset_code(to_email=email, code=code, ttl_seconds=RESET_CODE_TTL_SECONDS)
    except OSError as e:
        log.warning("could not send reset code to %s: %s", email, e)
    return ok(message=FORGOT_MESSAGE)


@router.post("/reset-password", status_code=status.HTTP_200_OK)
@auth_limit
def reset_password(request: Request, payload: ResetIn, db: Session = Depends(get_db)):
    email = payload.email.lower()
    now = datetime.now(timezone.utc)
    row = db.query(PasswordResetCode).filter(
        PasswordResetCode.email == email,
        PasswordResetCode.consumed.is_(False),
        PasswordResetCode.expires_at > now,
    ).order_by(PasswordResetCode.created_at.desc(), PasswordResetCode.id.desc()).first()

    if not row or not codes_match(row.code, payload.code):
        raise ApiError(400, "Invalid or expired reset code", "INVALID_RESET_CODE")

    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise ApiError(404, "User not found", "USER_NOT_FOUND")

    user.password = get_password_hash(payload.new_password)
    row.consumed = True
    db.commit()
    return ok(message="Password updated successfully")
