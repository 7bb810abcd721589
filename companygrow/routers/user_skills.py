from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, ensure_self_or_staff
from companygrow.domain.points import rules as points
from companygrow.models.skill import Skill
from companygrow.models.user import User
from companygrow.models.user_skill import UserSkill
from companygrow.schemas.common import ok
from companygrow.schemas.skill import UserSkillCreate, UserSkillUpdate, UserSkillOut
from companygrow.services.notifications import notify_skill_verified

router = APIRouter(prefix="/userSkills", tags=["user-skills"])


# ---- Reglas compartidas con /users/{id}/skills ----

def add_user_skill(db: Session, me: User, user_id: int, payload: UserSkillCreate) -> UserSkill:
    if user_id != me.id and not me.is_staff:
        raise ApiError(403, "You can only add skills to your own profile", "UNAUTHORIZED_SKILL_ASSIGNMENT")
    if db.get(User, user_id) is None:
        raise not_found("User")
    skill = db.get(Skill, payload.skill_id)
    if skill is None:
        raise not_found("Skill")

    exists = db.execute(
        select(UserSkill.id).where(UserSkill.user_id == user_id, UserSkill.skill_id == skill.id)
    ).scalar_one_or_none()
    if exists:
        raise ApiError(409, "User already has this skill", "SKILL_ALREADY_ADDED")

    us = UserSkill(
        user_id=user_id,
        skill_id=skill.id,
        proficiency_level=payload.proficiency_level,
        years_experience=payload.years_experience,
        is_verified=False,
    )
    db.add(us)
    db.commit()
    db.refresh(us)

    points.on_skill_added(db, user_id, skill.id, us.proficiency_level)
    db.refresh(us)
    return us


def update_user_skill(db: Session, me: User, us: UserSkill, payload: UserSkillUpdate) -> UserSkill:
    ensure_self_or_staff(me, us.user_id, "UNAUTHORIZED_SKILL_UPDATE")
    if payload.is_verified is not None and not me.is_staff:
        raise ApiError(403, "Only managers and admins can verify skills", "UNAUTHORIZED_VERIFICATION")

    old_level = us.proficiency_level
    was_verified = bool(us.is_verified)

    if payload.proficiency_level is not None:
        us.proficiency_level = payload.proficiency_level
    if payload.years_experience is not None:
        us.years_experience = payload.years_experience
    if payload.is_verified is not None:
        us.is_verified = payload.is_verified
    db.commit()
    db.refresh(us)

    if us.proficiency_level > old_level:
        points.on_skill_improved(db, us.user_id, us.skill_id, old_level, us.proficiency_level)
    if not was_verified and us.is_verified:
        points.on_skill_verified(db, us.user_id, us.skill_id)
        notify_skill_verified(db, us.user_id, us.skill.name if us.skill else "skill")
    db.refresh(us)
    return us


def remove_user_skill(db: Session, me: User, us: UserSkill) -> None:
    ensure_self_or_staff(me, us.user_id, "UNAUTHORIZED_SKILL_REMOVAL")
    user_id, skill_id = us.user_id, us.skill_id
    db.delete(us)
    db.commit()
    points.on_skill_removed(db, user_id, skill_id)


def get_user_skill_or_404(db: Session, id: int) -> UserSkill:
    us = db.get(UserSkill, id)
    if us is None:
        raise ApiError(404, "User skill not found", "USER_SKILL_NOT_FOUND")
    return us


def list_for_user(db: Session, user_id: int) -> list[UserSkillOut]:
    rows = db.execute(
        select(UserSkill)
        .where(UserSkill.user_id == user_id)
        .order_by(UserSkill.proficiency_level.desc(), UserSkill.id)
    ).scalars().all()
    return [UserSkillOut.model_validate(r) for r in rows]


# ---- Endpoints ----

@router.get("")
def list_user_skills(
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    if not me.is_staff:
        return ok(list_for_user(db, me.id))
    q = select(UserSkill).order_by(UserSkill.user_id, UserSkill.id)
    if user_id is not None:
        q = q.where(UserSkill.user_id == user_id)
    return ok([UserSkillOut.model_validate(r) for r in db.execute(q).scalars().all()])


@router.get("/{id}")
def get_user_skill(id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    us = get_user_skill_or_404(db, id)
    ensure_self_or_staff(me, us.user_id)
    return ok(UserSkillOut.model_validate(us))


@router.post("", status_code=201)
def create_user_skill(payload: UserSkillCreate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    us = add_user_skill(db, me, payload.user_id or me.id, payload)
    return ok(UserSkillOut.model_validate(us), message="Skill added successfully")


@router.put("/{id}")
def update_user_skill_endpoint(id: int, payload: UserSkillUpdate,
                               db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    us = update_user_skill(db, me, get_user_skill_or_404(db, id), payload)
    return ok(UserSkillOut.model_validate(us), message="Skill updated successfully")


@router.delete("/{id}")
def delete_user_skill(id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    remove_user_skill(db, me, get_user_skill_or_404(db, id))
    return ok(message="Skill removed successfully")
