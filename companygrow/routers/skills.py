from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_optional_user, require_staff, require_admin
from companygrow.models.skill import Skill
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.skill import SkillCreate, SkillUpdate, SkillOut

router = APIRouter(prefix="/skills", tags=["skills"])


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    q = select(Skill.id).where(Skill.name == name)
    if exclude_id is not None:
        q = q.where(Skill.id != exclude_id)
    if db.execute(q).first():
        raise ApiError(409, "Skill with this name already exists", "SKILL_EXISTS", field="name")


@router.get("")
def list_skills(
    category: str | None = None,
    search: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
    _: User | None = Depends(get_optional_user),
):
    q = select(Skill).order_by(Skill.category, Skill.name)
    if category:
        q = q.where(Skill.category == category)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(Skill.name.ilike(like), Skill.description.ilike(like)))
    return ok([SkillOut.model_validate(s) for s in db.execute(q).scalars().all()])


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    rows = db.execute(select(Skill.category).distinct().order_by(Skill.category)).scalars().all()
    return ok(rows)


@router.get("/{skill_id}")
def get_skill(skill_id: int, db: Session = Depends(get_db)):
    skill = db.get(Skill, skill_id)
    if skill is None:
        raise not_found("Skill")
    return ok(SkillOut.model_validate(skill))


@router.post("", status_code=201)
def create_skill(payload: SkillCreate, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    name = payload.name.strip()
    _ensure_unique_name(db, name)
    skill = Skill(name=name, category=payload.category.strip(), description=payload.description)
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return ok(SkillOut.model_validate(skill), message="Skill created successfully")


@router.put("/{skill_id}")
def update_skill(skill_id: int, payload: SkillUpdate, db: Session = Depends(get_db),
                 _: User = Depends(require_staff)):
    skill = db.get(Skill, skill_id)
    if skill is None:
        raise not_found("Skill")
    data = payload.model_dump(exclude_unset=True)
    if data.get("name"):
        data["name"] = data["name"].strip()
        _ensure_unique_name(db, data["name"], exclude_id=skill.id)
    for field, value in data.items():
        if value is not None or field == "description":
            setattr(skill, field, value)
    db.commit()
    db.refresh(skill)
    return ok(SkillOut.model_validate(skill), message="Skill updated successfully")


@router.delete("/{skill_id}")
def delete_skill(skill_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    skill = db.get(Skill, skill_id)
    if skill is None:
        raise not_found("Skill")
    db.delete(skill)
    db.commit()
    return ok(message="Skill deleted successfully")
