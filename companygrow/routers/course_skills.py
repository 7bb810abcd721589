from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, require_staff
from companygrow.models.course import Course
from companygrow.models.course_skill import CourseSkill
from companygrow.models.skill import Skill
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.course import CourseSkillCreate, CourseSkillUpdate, CourseSkillOut, CourseOut

router = APIRouter(prefix="/courseSkills", tags=["course-skills"])


def _get_or_404(db: Session, id: int) -> CourseSkill:
    cs = db.get(CourseSkill, id)
    if cs is None:
        raise ApiError(404, "Course skill not found", "COURSE_SKILL_NOT_FOUND")
    return cs


def _out(cs: CourseSkill) -> dict:
    data = CourseSkillOut.model_validate(cs).model_dump()
    data["course"] = CourseOut.model_validate(cs.course).model_dump() if cs.course else None
    return data


@router.get("")
def list_course_skills(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    rows = db.execute(select(CourseSkill).order_by(CourseSkill.course_id, CourseSkill.id)).scalars().all()
    return ok([_out(cs) for cs in rows])


@router.get("/course/{course_id}")
def skills_for_course(course_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    if db.get(Course, course_id) is None:
        raise not_found("Course")
    rows = db.execute(
        select(CourseSkill).where(CourseSkill.course_id == course_id)
        .order_by(CourseSkill.skill_level.desc(), CourseSkill.id)
    ).scalars().all()
    return ok([CourseSkillOut.model_validate(cs) for cs in rows])


@router.get("/skill/{skill_id}")
def courses_for_skill(skill_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    if db.get(Skill, skill_id) is None:
        raise not_found("Skill")
    rows = db.execute(
        select(CourseSkill).where(CourseSkill.skill_id == skill_id)
        .order_by(CourseSkill.skill_level.desc(), CourseSkill.id)
    ).scalars().all()
    return ok([_out(cs) for cs in rows])


@router.get("/{id}")
def get_course_skill(id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return ok(_out(_get_or_404(db, id)))


@router.post("", status_code=201)
def create_course_skill(payload: CourseSkillCreate, db: Session = Depends(get_db),
                        _: User = Depends(require_staff)):
    if db.get(Course, payload.course_id) is None:
        raise not_found("Course")
    if db.get(Skill, payload.skill_id) is None:
        raise not_found("Skill")
    dup = db.execute(
        select(CourseSkill.id).where(
            CourseSkill.course_id == payload.course_id, CourseSkill.skill_id == payload.skill_id
        )
    ).scalar_one_or_none()
    if dup:
        raise ApiError(409, "Skill is already linked to this course", "SKILL_ALREADY_LINKED")

    cs = CourseSkill(**payload.model_dump())
    db.add(cs)
    db.commit()
    db.refresh(cs)
    return ok(_out(cs), message="Skill linked to course successfully")


@router.put("/{id}")
def update_course_skill(id: int, payload: CourseSkillUpdate, db: Session = Depends(get_db),
                        _: User = Depends(require_staff)):
    cs = _get_or_404(db, id)
    cs.skill_level = payload.skill_level
    db.commit()
    db.refresh(cs)
    return ok(_out(cs), message="Course skill updated successfully")


@router.delete("/{id}")
def delete_course_skill(id: int, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    cs = _get_or_404(db, id)
    db.delete(cs)
    db.commit()
    return ok(message="Course skill removed successfully")
