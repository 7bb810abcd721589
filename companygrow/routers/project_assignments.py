from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, require_staff, ensure_self_or_staff
from companygrow.domain.points import rules as points
from companygrow.models.project import Project
from companygrow.models.project_assignment import ProjectAssignment
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.project import AssignmentCreate, AssignmentUpdate, AssignmentOut
from companygrow.services.notifications import notify_project_assignment

router = APIRouter(prefix="/projectAssignments", tags=["project-assignments"])

STAFF_FIELDS = ("role", "hours_allocated", "hourly_rate", "status", "performance_rating", "feedback")
ASSIGNEE_FIELDS = ("hours_worked",)


def _get_or_404(db: Session, id: int) -> ProjectAssignment:
    a = db.get(ProjectAssignment, id)
    if a is None:
        raise ApiError(404, "Project assignment not found", "ASSIGNMENT_NOT_FOUND")
    return a


def _list(db: Session, *where) -> list[AssignmentOut]:
    rows = db.execute(
        select(ProjectAssignment).where(*where)
        .order_by(ProjectAssignment.assignment_date.desc(), ProjectAssignment.id.desc())
    ).unique().scalars().all()
    return [AssignmentOut.model_validate(a) for a in rows]


@router.get("")
def list_assignments(db: Session = Depends(get_db), _: User = Depends(require_staff)):
    return ok(_list(db))


@router.get("/user/{user_id}")
def assignments_for_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self_or_staff(me, user_id, "UNAUTHORIZED_VIEW")
    return ok(_list(db, ProjectAssignment.user_id == user_id))


@router.get("/project/{project_id}")
def assignments_for_project(project_id: int, db: Session = Depends(get_db),
                            _: User = Depends(get_current_user)):
    if db.get(Project, project_id) is None:
        raise not_found("Project")
    return ok(_list(db, ProjectAssignment.project_id == project_id))


@router.get("/{id}")
def get_assignment(id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    a = _get_or_404(db, id)
    ensure_self_or_staff(me, a.user_id, "UNAUTHORIZED_VIEW")
    return ok(AssignmentOut.model_validate(a))


@router.post("", status_code=201)
def create_assignment(payload: AssignmentCreate, db: Session = Depends(get_db),
                      _: User = Depends(require_staff)):
    project = db.get(Project, payload.project_id)
    if project is None:
        raise not_found("Project")
    user = db.get(User, payload.user_id)
    if user is None:
        raise not_found("User")
    dup = db.execute(
        select(ProjectAssignment.id).where(
            ProjectAssignment.user_id == user.id, ProjectAssignment.project_id == project.id
        )
    ).scalar_one_or_none()
    if dup:
        raise ApiError(409, "User is already assigned to this project", "ALREADY_ASSIGNED")

    a = ProjectAssignment(**payload.model_dump(), status="active")
    db.add(a)
    db.commit()
    db.refresh(a)

    points.on_project_assigned(db, user.id, project.id)
    notify_project_assignment(db, user.id, project.name, a.role)
    db.refresh(a)
    return ok(AssignmentOut.model_validate(a), message="User assigned to project successfully")


@router.put("/{id}")
def update_assignment(id: int, payload: AssignmentUpdate, db: Session = Depends(get_db),
                      me: User = Depends(get_current_user)):
    a = _get_or_404(db, id)
    is_assignee = a.user_id == me.id
    if not (me.is_staff or is_assignee):
        raise ApiError(403, "Cannot update other user assignments", "UNAUTHORIZED_UPDATE")

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    allowed = set(ASSIGNEE_FIELDS) if not me.is_staff else set(STAFF_FIELDS)
    if is_assignee:
        allowed |= set(ASSIGNEE_FIELDS)
    changes = {k: v for k, v in data.items() if k in allowed}
    if not changes:
        raise ApiError(400, "No valid fields to update", "NO_UPDATE_FIELDS")

    prev_status = a.status
    for field, value in changes.items():
        setattr(a, field, value)
    db.commit()
    db.refresh(a)

    if a.status == "completed" and prev_status != "completed":
        points.on_project_completed(db, a.user_id, a.project_id)
        db.refresh(a)
    return ok(AssignmentOut.model_validate(a), message="Assignment updated successfully")


@router.delete("/{id}")
def delete_assignment(id: int, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    a = _get_or_404(db, id)
    db.delete(a)
    db.commit()
    return ok(message="Assignment removed successfully")
