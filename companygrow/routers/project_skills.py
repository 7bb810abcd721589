from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, require_staff
from companygrow.domain.skills.service import analyze_project
from companygrow.models.project import Project
from companygrow.models.project_skill import ProjectSkill
from companygrow.models.skill import Skill
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.project import ProjectSkillCreate, ProjectSkillUpdate, ProjectSkillOut

router = APIRouter(prefix="/projectSkills", tags=["project-skills"])

# obligatorias primero, luego por nivel requerido DESC
REQUIREMENT_ORDER = (ProjectSkill.is_mandatory.desc(), ProjectSkill.required_level.desc(), ProjectSkill.id)


def _get_or_404(db: Session, id: int) -> ProjectSkill:
    ps = db.get(ProjectSkill, id)
    if ps is None:
        raise ApiError(404, "Project skill not found", "PROJECT_SKILL_NOT_FOUND")
    return ps


@router.get("")
def list_project_skills(db: Session = Depends(get_db), _: User = Depends(require_staff)):
    rows = db.execute(select(ProjectSkill).order_by(ProjectSkill.project_id, *REQUIREMENT_ORDER)).scalars().all()
    return ok([ProjectSkillOut.model_validate(ps) for ps in rows])


@router.get("/project/{project_id}")
def skills_for_project(project_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    if db.get(Project, project_id) is None:
        raise not_found("Project")
    rows = db.execute(
        select(ProjectSkill).where(ProjectSkill.project_id == project_id).order_by(*REQUIREMENT_ORDER)
    ).scalars().all()
    return ok([ProjectSkillOut.model_validate(ps) for ps in rows])


@router.get("/skill/{skill_id}")
def projects_for_skill(skill_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    if db.get(Skill, skill_id) is None:
        raise not_found("Skill")
    rows = db.execute(
        select(ProjectSkill).where(ProjectSkill.skill_id == skill_id).order_by(*REQUIREMENT_ORDER)
    ).scalars().all()
    return ok([
        {**ProjectSkillOut.model_validate(ps).model_dump(),
         "project": {"id": ps.project.id, "name": ps.project.name, "status": ps.project.status}}
        for ps in rows
    ])


@router.get("/analysis/{project_id}")
def skill_analysis(project_id: int, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    project = db.get(Project, project_id)
    if project is None:
        raise not_found("Project")
    return ok(analyze_project(db, project))


@router.get("/{id}")
def get_project_skill(id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return ok(ProjectSkillOut.model_validate(_get_or_404(db, id)))


@router.post("", status_code=201)
def create_project_skill(payload: ProjectSkillCreate, db: Session = Depends(get_db),
                         _: User = Depends(require_staff)):
    if db.get(Project, payload.project_id) is None:
        raise not_found("Project")
    if db.get(Skill, payload.skill_id) is None:
        raise not_found("Skill")
    dup = db.execute(
        select(ProjectSkill.id).where(
            ProjectSkill.project_id == payload.project_id, ProjectSkill.skill_id == payload.skill_id
        )
    ).scalar_one_or_none()
    if dup:
        raise ApiError(409, "Skill is already required for this project", "SKILL_ALREADY_REQUIRED")

    ps = ProjectSkill(**payload.model_dump())
    db.add(ps)
    db.commit()
    db.refresh(ps)
    return ok(ProjectSkillOut.model_validate(ps), message="Skill requirement added successfully")


@router.put("/{id}")
def update_project_skill(id: int, payload: ProjectSkillUpdate, db: Session = Depends(get_db),
                         _: User = Depends(require_staff)):
    ps = _get_or_404(db, id)
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(ps, field, value)
    db.commit()
    db.refresh(ps)
    return ok(ProjectSkillOut.model_validate(ps), message="Skill requirement updated successfully")


@router.delete("/{id}")
def delete_project_skill(id: int, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    ps = _get_or_404(db, id)
    db.delete(ps)
    db.commit()
    return ok(message="Skill requirement removed successfully")
