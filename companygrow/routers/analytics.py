from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError
from companygrow.deps import get_db, get_current_user
from companygrow.domain.skills.matching import round_half_up
from companygrow.models.course import Course
from companygrow.models.course_enrollment import CourseEnrollment
from companygrow.models.payment import Payment
from companygrow.models.project import Project
from companygrow.models.project_assignment import ProjectAssignment
from companygrow.models.skill import Skill
from companygrow.models.token_transaction import TokenTransaction
from companygrow.models.user import User
from companygrow.models.user_leaderboard_stats import UserLeaderboardStats
from companygrow.models.user_skill import UserSkill
from companygrow.models.user_token import UserToken
from companygrow.schemas.common import ok

router = APIRouter(prefix="/analytics", tags=["analytics"])

RESTRICTED = "Access restricted to admins and managers"


def _count(db: Session, column, *where) -> int:
    q = select(func.count(column))
    if where:
        q = q.where(*where)
    return int(db.execute(q).scalar_one() or 0)


def _grouped(db: Session, column, count_column) -> dict:
    rows = db.execute(select(column, func.count(count_column)).group_by(column).order_by(column)).all()
    return {(k if k is not None else "unassigned"): int(v) for k, v in rows}


def _rate(part: int, total: int) -> int:
    return round_half_up(part / total * 100) if total else 0


def _require_admin(me: User, what: str) -> None:
    if me.role != "admin":
        raise ApiError(403, f"Admin access required for {what} statistics", "ADMIN_REQUIRED")


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    enrollments = _count(db, CourseEnrollment.id)
    completed = _count(db, CourseEnrollment.id, CourseEnrollment.status == "completed")

    my_enrollments = dict(db.execute(
        select(CourseEnrollment.status, func.count(CourseEnrollment.id))
        .where(CourseEnrollment.user_id == me.id)
        .group_by(CourseEnrollment.status)
    ).all())
    stats = db.execute(
        select(UserLeaderboardStats).where(UserLeaderboardStats.user_id == me.id)
    ).unique().scalar_one_or_none()
    balance = db.execute(select(UserToken.balance).where(UserToken.user_id == me.id)).scalar_one_or_none()

    return ok({
        "overview": {
            "total_users": _count(db, User.id, User.is_active.is_(True)),
            "total_courses": _count(db, Course.id, Course.is_active.is_(True)),
            "total_projects": _count(db, Project.id),
            "active_projects": _count(db, Project.id, Project.status == "active"),
            "total_enrollments": enrollments,
            "completion_rate": _rate(completed, enrollments),
        },
        "me": {
            "enrollments": sum(int(v) for v in my_enrollments.values()),
            "completed_courses": int(my_enrollments.get("completed", 0)),
            "in_progress_courses": int(my_enrollments.get("in_progress", 0)),
            "active_assignments": _count(
                db, ProjectAssignment.id,
                ProjectAssignment.user_id == me.id, ProjectAssignment.status == "active",
            ),
            "skills": _count(db, UserSkill.id, UserSkill.user_id == me.id),
            "token_balance": int(balance or 0),
            "total_points": int(stats.total_points or 0) if stats else 0,
            "ranking_position": stats.ranking_position if stats else None,
        },
    })


@router.get("/users")
def user_stats(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    if not me.is_staff:
        return ok({"total_users": "N/A", "active_users": "N/A", "message": RESTRICTED})
    return ok({
        "total_users": _count(db, User.id),
        "active_users": _count(db, User.id, User.is_active.is_(True)),
        "by_role": _grouped(db, User.role, User.id),
        "by_department": _grouped(db, User.department, User.id),
    })


@router.get("/projects")
def project_stats(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    if not me.is_staff:
        return ok({
            "total_projects": "N/A", "active_projects": "N/A", "completed_projects": "N/A",
            "message": RESTRICTED,
        })
    return ok({
        "total_projects": _count(db, Project.id),
        "active_projects": _count(db, Project.id, Project.status == "active"),
        "completed_projects": _count(db, Project.id, Project.status == "completed"),
        "by_status": _grouped(db, Project.status, Project.id),
    })


@router.get("/skills")
def skill_distribution(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    user_count = func.count(UserSkill.id).label("user_count")
    rows = db.execute(
        select(Skill.id, Skill.name, Skill.category, user_count, func.avg(UserSkill.proficiency_level))
        .outerjoin(UserSkill, UserSkill.skill_id == Skill.id)
        .group_by(Skill.id, Skill.name, Skill.category)
        .order_by(user_count.desc(), Skill.name)
    ).all()
    return ok({
        "distribution": [
            {
                "skill_id": sid,
                "skill": name,
                "category": category,
                "user_count": int(cnt),
                "avg_proficiency": round(float(avg), 1) if avg is not None else 0,
            }
            for sid, name, category, cnt, avg in rows
        ]
    })


@router.get("/courses")
def course_stats(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    enrollments = _count(db, CourseEnrollment.id)
    completed = _count(db, CourseEnrollment.id, CourseEnrollment.status == "completed")
    avg_progress = db.execute(select(func.avg(CourseEnrollment.progress_percentage))).scalar_one()

    cat_count = func.count(Course.id).label("cnt")
    categories = db.execute(
        select(Course.category, cat_count)
        .where(Course.is_active.is_(True))
        .group_by(Course.category)
        .order_by(cat_count.desc(), Course.category)
        .limit(5)
    ).all()
    return ok({
        "total_courses": _count(db, Course.id),
        "active_courses": _count(db, Course.id, Course.is_active.is_(True)),
        "total_enrollments": enrollments,
        "enrollments_by_status": _grouped(db, CourseEnrollment.status, CourseEnrollment.id),
        "avg_progress": round(float(avg_progress), 1) if avg_progress is not None else 0,
        "completion_rate": _rate(completed, enrollments),
        "top_categories": [{"category": c, "courses": int(n)} for c, n in categories],
    })


@router.get("/payments")
def payment_stats(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    _require_admin(me, "payment")
    total_amount = db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == "succeeded")
    ).scalar_one()
    return ok({
        "total_payments": _count(db, Payment.id),
        "total_amount": float(total_amount or 0),
        "by_status": _grouped(db, Payment.status, Payment.id),
    })


@router.get("/tokens")
def token_stats(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    _require_admin(me, "token")

    def total(kind: str) -> int:
        return int(db.execute(
            select(func.coalesce(func.sum(TokenTransaction.amount), 0))
            .where(TokenTransaction.transaction_type == kind)
        ).scalar_one() or 0)

    return ok({
        "total_transactions": _count(db, TokenTransaction.id),
        "total_earned": total("earned"),
        "total_spent": total("spent"),
        "circulating": int(db.execute(select(func.coalesce(func.sum(UserToken.balance), 0))).scalar_one() or 0),
    })
