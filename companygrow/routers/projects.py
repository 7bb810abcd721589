import logging
from datetime import timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_, desc
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, require_staff, require_admin
from companygrow.domain.points import rules as points
from companygrow.domain.skills.service import recommend_for_project
from companygrow.models.project import Project
from companygrow.models.project_assignment import ProjectAssignment
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectOut, ProjectDetail, AssignmentOut,
)

log = logging.getLogger("projects")

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise not_found("Project")
    return project


def _naive_utc(dt):
    # SQLite devuelve naive; el cliente puede mandar con zona
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _check_dates(start, end) -> None:
    start, end = _naive_utc(start), _naive_utc(end)
    if start is not None and end is not None and end < start:
        raise ApiError(400, "end_date must not precede start_date", "INVALID_DATE_RANGE", field="end_date")


def complete_active_assignments(db: Session, project: Project) -> list[int]:
    """Cierra las asignaciones activas y otorga puntos de proyecto completado."""
    active = db.execute(
        select(ProjectAssignment).where(
            ProjectAssignment.project_id == project.id, ProjectAssignment.status == "active"
        )
    ).unique().scalars().all()
    user_ids = [a.user_id for a in active]
    for a in active:
        a.status = "completed"
    db.commit()
    for uid in user_ids:
        points.on_project_completed(db, uid, project.id)
    return user_ids


@router.get("")
def list_projects(
    status: str | None = None,
    priority: str | None = None,
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    q = select(Project).order_by(desc(Project.created_at), desc(Project.id))
    if status:
        q = q.where(Project.status == status)
    if priority:
        q = q.where(Project.priority == priority)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(Project.name.ilike(like), Project.description.ilike(like),
                        Project.client_name.ilike(like)))
    items, pagination = paginate(db, q, page)
    return ok([ProjectOut.model_validate(p) for p in items], pagination=pagination)


@router.get("/{project_id}")
def get_project(project_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    project = get_project_or_404(db, project_id)
    data = ProjectDetail.model_validate(project).model_dump()
    data["assignments"] = [
        AssignmentOut.model_validate(a).model_dump(exclude={"project"}) for a in project.assignments
    ]
    return ok(data)


@router.post("", status_code=201)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db), me: User = Depends(require_staff)):
    _check_dates(payload.start_date, payload.end_date)
    if payload.project_manager_id is not None and db.get(User, payload.project_manager_id) is None:
        raise not_found("User")
    project = Project(**payload.model_dump(exclude_none=True), created_by=me.id)
    db.add(project)
    db.commit()
    db.refresh(project)
    return ok(ProjectOut.model_validate(project), message="Project created successfully")


@router.put("/{project_id}")
def update_project(project_id: int, payload: ProjectUpdate, db: Session = Depends(get_db),
                   _: User = Depends(require_staff)):
    project = get_project_or_404(db, project_id)
    data = payload.model_dump(exclude_unset=True)
    _check_dates(data.get("start_date", project.start_date), data.get("end_date", project.end_date))

    prev_status = project.status
    for field, value in data.items():
        if value is None and field in ("name", "status", "actual_hours"):
            continue
        setattr(project, field, value)
    db.commit()
    db.refresh(project)

    completed_for = []
    if project.status == "completed" and prev_status != "completed":
        completed_for = complete_active_assignments(db, project)
        log.info("project %s completed; %d assignments closed", project.id, len(completed_for))
        db.refresh(project)
    return ok(ProjectOut.model_validate(project), message="Project updated successfully",
              completed_assignments=len(completed_for))


@router.delete("/{project_id}")
def delete_project(project_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    project = get_project_or_404(db, project_id)
    db.delete(project)
    db.commit()
    return ok(message="Project deleted successfully")


@router.get("/{project_id}/recommendations")
def project_recommendations(project_id: int, limit: int = Query(10, ge=1, le=50),
                            db: Session = Depends(get_db), _: User = Depends(require_staff)):
    project = get_project_or_404(db, project_id)
    return ok({
        "project": {"id": project.id, "name": project.name},
        "recommendations": recommend_for_project(db, project, limit),
    })
