import logging
import shutil
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from companygrow.core.config import AVATARS_DIR, ensure_upload_dirs, upload_url_for
from companygrow.core.errors import ApiError, not_found
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, require_admin, require_staff, ensure_self_or_staff
from companygrow.domain.points import rules as points
from companygrow.domain.skills.service import workload_for
from companygrow.models.course_enrollment import CourseEnrollment
from companygrow.models.notification import Notification
from companygrow.models.project_assignment import ProjectAssignment
from companygrow.models.user import User
from companygrow.models.user_badge import UserBadge
from companygrow.models.user_leaderboard_stats import UserLeaderboardStats
from companygrow.models.user_token import UserToken
from companygrow.routers.user_skills import (
    add_user_skill, update_user_skill, remove_user_skill, list_for_user,
)
from companygrow.models.user_skill import UserSkill
from companygrow.schemas.badge import UserBadgeOut
from companygrow.schemas.common import ok
from companygrow.schemas.course import EnrollmentOut
from companygrow.schemas.project import AssignmentOut
from companygrow.schemas.skill import UserSkillCreate, UserSkillUpdate, UserSkillOut
from companygrow.schemas.user import AdminUserCreate, UserOut, UserUpdate
from companygrow.security import get_password_hash

log = logging.getLogger("users")

router = APIRouter(prefix="/users", tags=["users"])

AVATAR_TYPES = {"image/png": ".png", "image/jpeg": ".jpg", "image/jpg": ".jpg", "image/webp": ".webp"}
PROFILE_FIELDS = ("first_name", "last_name", "department", "position", "hire_date",
                  "bio", "phone", "address", "profile_image")


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User")
    return user


@router.get("")
def list_users(
    role: str | None = None,
    department: str | None = None,
    is_active: bool | None = None,
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
):
    q = select(User).order_by(User.created_at.desc(), User.id.desc())
    if role:
        q = q.where(User.role == role)
    if department:
        q = q.where(User.department == department)
    if is_active is not None:
        q = q.where(User.is_active.is_(is_active))
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(User.first_name.ilike(like), User.last_name.ilike(like), User.email.ilike(like)))
    items, pagination = paginate(db, q, page)
    return ok([UserOut.model_validate(u) for u in items], pagination=pagination)


@router.post("", status_code=201)
def create_user(payload: AdminUserCreate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ApiError(409, "User already exists with this email", "USER_EXISTS", field="email")
    user = User(
        email=email,
        password=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        department=payload.department,
        position=payload.position,
        role=payload.role,
        is_active=payload.is_active,
        hire_date=payload.hire_date,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    points.on_user_registered(db, user.id)
    return ok(UserOut.model_validate(user), message="User created successfully")


@router.post("/me/avatar")
def upload_avatar(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    ext = AVATAR_TYPES.get(file.content_type or "")
    if ext is None:
        raise ApiError(415, "Unsupported image format (png, jpeg or webp)", "UNSUPPORTED_MEDIA_TYPE")

    ensure_upload_dirs()
    # nombre versionado por timestamp para romper caché
    fname = f"user_{me.id}_{int(datetime.now(timezone.utc).timestamp())}{ext}"
    dest = AVATARS_DIR / fname
    with open(dest, "wb") as buffer:
        shutil.copyfileobj(file.file, buffer)

    me.profile_image = upload_url_for(dest)
    db.commit()
    db.refresh(me)
    return ok(UserOut.model_validate(me), message="Avatar updated successfully")


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return ok(UserOut.model_validate(get_user_or_404(db, user_id)))


@router.put("/{user_id}")
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db),
                me: User = Depends(get_current_user)):
    is_admin = me.role == "admin"
    if me.id != user_id and not is_admin:
        raise ApiError(403, "You can only update your own profile", "UNAUTHORIZED_UPDATE")
    user = get_user_or_404(db, user_id)

    data = payload.model_dump(exclude_unset=True)
    if ("role" in data or "is_active" in data) and not is_admin:
        raise ApiError(403, "Only admins can change role or active status", "INSUFFICIENT_PERMISSIONS")

    for field in PROFILE_FIELDS:
        if field in data:
            setattr(user, field, data[field])
    if is_admin and data.get("role") is not None:
        user.role = data["role"]
    if is_admin and data.get("is_active") is not None:
        if user.id == me.id and data["is_active"] is False:
            raise ApiError(400, "You cannot deactivate your own account", "CANNOT_DEACTIVATE_SELF")
        user.is_active = data["is_active"]
    db.commit()
    db.refresh(user)

    if user.id == me.id and any(f in data for f in PROFILE_FIELDS):
        points.on_profile_updated(db, user.id)
        db.refresh(user)
    return ok(UserOut.model_validate(user), message="User updated successfully")


@router.delete("/{user_id}")
def deactivate_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    if user_id == me.id:
        raise ApiError(400, "You cannot deactivate your own account", "CANNOT_DEACTIVATE_SELF")
    user = get_user_or_404(db, user_id)
    user.is_active = False
    db.commit()
    log.info("user %s deactivated by %s", user.id, me.id)
    return ok(message="User deactivated successfully")


# ---- Skills anidadas ----

def _owned_user_skill(db: Session, user_id: int, skill_id: int) -> UserSkill:
    us = db.execute(
        select(UserSkill).where(UserSkill.user_id == user_id, UserSkill.skill_id == skill_id)
    ).scalar_one_or_none()
    if us is None:
        raise ApiError(404, "User skill not found", "USER_SKILL_NOT_FOUND")
    return us


@router.get("/{user_id}/skills")
def get_user_skills(user_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    get_user_or_404(db, user_id)
    return ok(list_for_user(db, user_id))


@router.post("/{user_id}/skills", status_code=201)
def add_skill(user_id: int, payload: UserSkillCreate, db: Session = Depends(get_db),
              me: User = Depends(get_current_user)):
    us = add_user_skill(db, me, user_id, payload)
    return ok(UserSkillOut.model_validate(us), message="Skill added successfully")


@router.put("/{user_id}/skills/{skill_id}")
def update_skill(user_id: int, skill_id: int, payload: UserSkillUpdate,
                 db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    us = update_user_skill(db, me, _owned_user_skill(db, user_id, skill_id), payload)
    return ok(UserSkillOut.model_validate(us), message="Skill updated successfully")


@router.delete("/{user_id}/skills/{skill_id}")
def remove_skill(user_id: int, skill_id: int, db: Session = Depends(get_db),
                 me: User = Depends(get_current_user)):
    remove_user_skill(db, me, _owned_user_skill(db, user_id, skill_id))
    return ok(message="Skill removed successfully")


# ---- Perfil y dashboard ----

def _stats(db: Session, user_id: int) -> UserLeaderboardStats | None:
    return db.execute(
        select(UserLeaderboardStats).where(UserLeaderboardStats.user_id == user_id)
    ).unique().scalar_one_or_none()


@router.get("/{user_id}/profile")
def get_profile(user_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    user = get_user_or_404(db, user_id)
    badges = db.execute(
        select(UserBadge).where(UserBadge.user_id == user_id).order_by(UserBadge.earned_date.desc())
    ).unique().scalars().all()
    completed = db.execute(
        select(CourseEnrollment)
        .where(CourseEnrollment.user_id == user_id, CourseEnrollment.status == "completed")
        .order_by(CourseEnrollment.completion_date.desc())
    ).unique().scalars().all()
    stats = _stats(db, user_id)
    return ok({
        "user": UserOut.model_validate(user),
        "skills": list_for_user(db, user_id),
        "badges": [UserBadgeOut.model_validate(b) for b in badges],
        "completed_courses": [EnrollmentOut.model_validate(e) for e in completed],
        "leaderboard": {
            "total_points": stats.total_points,
            "ranking_position": stats.ranking_position,
            "current_streak": stats.current_streak,
            "longest_streak": stats.longest_streak,
        } if stats else None,
    })


@router.get("/{user_id}/dashboard")
def get_dashboard(user_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self_or_staff(me, user_id)
    get_user_or_404(db, user_id)

    by_status = dict(db.execute(
        select(CourseEnrollment.status, func.count(CourseEnrollment.id))
        .where(CourseEnrollment.user_id == user_id)
        .group_by(CourseEnrollment.status)
    ).all())
    assignments = db.execute(
        select(ProjectAssignment)
        .where(ProjectAssignment.user_id == user_id, ProjectAssignment.status == "active")
        .order_by(ProjectAssignment.assignment_date.desc())
    ).unique().scalars().all()
    balance = db.execute(select(UserToken.balance).where(UserToken.user_id == user_id)).scalar_one_or_none()
    unread = db.execute(
        select(func.count(Notification.id)).where(Notification.user_id == user_id, Notification.is_read.is_(False))
    ).scalar_one()
    stats = _stats(db, user_id)

    return ok({
        "enrollments": {
            "total": sum(by_status.values()),
            "enrolled": by_status.get("enrolled", 0),
            "in_progress": by_status.get("in_progress", 0),
            "completed": by_status.get("completed", 0),
            "dropped": by_status.get("dropped", 0),
        },
        "active_assignments": [AssignmentOut.model_validate(a) for a in assignments],
        "workload": workload_for(db, user_id),
        "token_balance": int(balance or 0),
        "unread_notifications": int(unread or 0),
        "total_points": stats.total_points if stats else 0,
        "ranking_position": stats.ranking_position if stats else None,
    })
