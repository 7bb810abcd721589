from collections import defaultdict

from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from companygrow.models.user import User
from companygrow.models.user_skill import UserSkill
from companygrow.models.project import Project
from companygrow.models.project_skill import ProjectSkill
from companygrow.models.project_assignment import ProjectAssignment
from companygrow.models.course import Course
from companygrow.models.course_skill import CourseSkill
from companygrow.models.course_enrollment import CourseEnrollment
from companygrow.domain.skills.matching import (
    analyze_requirements, sort_analysis, availability_score, workload_label,
    recommendation_score, course_relevance, round_half_up,
)


def project_requirements(db: Session, project_id: int) -> list[dict]:
    rows = db.execute(
        select(ProjectSkill)
        .where(ProjectSkill.project_id == project_id)
        .order_by(ProjectSkill.is_mandatory.desc(), ProjectSkill.required_level.desc(), ProjectSkill.id)
    ).scalars().all()
    return [
        {
            "id": ps.id,
            "skill_id": ps.skill_id,
            "skill": ps.skill.name if ps.skill else None,
            "category": ps.skill.category if ps.skill else None,
            "required_level": ps.required_level,
            "is_mandatory": ps.is_mandatory,
        }
        for ps in rows
    ]


def user_levels(user: User) -> dict[int, int]:
    return {us.skill_id: us.proficiency_level for us in user.skills}


def _active_users(db: Session) -> list[User]:
    return db.execute(
        select(User)
        .where(User.is_active.is_(True))
        .options(selectinload(User.skills))
        .order_by(User.id)
    ).scalars().all()


def _user_brief(u: User) -> dict:
    return {
        "id": u.id,
        "name": u.full_name,
        "email": u.email,
        "department": u.department,
        "position": u.position,
        "role": u.role,
    }


def analyze_project(db: Session, project: Project) -> dict:
    reqs = project_requirements(db, project.id)
    if not reqs:
        return {
            "project": {"id": project.id, "name": project.name},
            "message": "No skill requirements defined for this project",
            "project_requirements": [],
            "user_analysis": [],
            "summary": {"total_users": 0, "qualified_users": 0, "avg_match_percentage": 0},
        }

    users = _active_users(db)
    rows = []
    for u in users:
        a = analyze_requirements(reqs, user_levels(u))
        a["user"] = _user_brief(u)
        rows.append(a)
    rows = sort_analysis(rows)

    avg = round_half_up(sum(r["match_percentage"] for r in rows) / len(rows)) if rows else 0
    return {
        "project": {"id": project.id, "name": project.name},
        "project_requirements": reqs,
        "user_analysis": rows,
        "summary": {
            "total_users": len(rows),
            "qualified_users": sum(1 for r in rows if r["is_qualified"]),
            "avg_match_percentage": avg,
        },
    }


def active_assignment_counts(db: Session) -> dict[int, int]:
    rows = db.execute(
        select(ProjectAssignment.user_id, func.count(ProjectAssignment.id))
        .where(ProjectAssignment.status == "active")
        .group_by(ProjectAssignment.user_id)
    ).all()
    return {uid: int(cnt) for uid, cnt in rows}


def workload_for(db: Session, user_id: int) -> dict:
    active = int(db.execute(
        select(func.count(ProjectAssignment.id)).where(
            ProjectAssignment.user_id == user_id, ProjectAssignment.status == "active"
        )
    ).scalar_one() or 0)
    return {
        "active_assignments": active,
        "availability_score": availability_score(active),
        "workload": workload_label(active),
    }


def recommend_for_project(db: Session, project: Project, limit: int = 10) -> list[dict]:
    reqs = project_requirements(db, project.id)
    assigned = set(db.execute(
        select(ProjectAssignment.user_id).where(ProjectAssignment.project_id == project.id)
    ).scalars())
    counts = active_assignment_counts(db)

    candidates = []
    for u in _active_users(db):
        if u.id in assigned:
            continue
        a = analyze_requirements(reqs, user_levels(u)) if reqs else {
            "match_percentage": 0, "mandatory_match_percentage": 100, "is_qualified": True,
            "match_label": "Poor", "skill_gaps": [], "strengths": [],
        }
        active = counts.get(u.id, 0)
        avail = availability_score(active)
        candidates.append({
            "user": _user_brief(u),
            **a,
            "active_assignments": active,
            "availability_score": avail,
            "workload": workload_label(active),
            "recommendation_score": recommendation_score(a["match_percentage"], avail),
        })

    candidates.sort(key=lambda c: (-c["recommendation_score"], c["user"]["id"]))
    return candidates[:limit]


# --------------------------
# Recomendación de cursos
# --------------------------

def user_gaps(db: Session, user: User) -> dict[int, dict]:
    """
    Gaps del usuario en los proyectos activos donde trabaja,
    o en todos los proyectos activos si no tiene asignaciones.
    """
    project_ids = db.execute(
        select(ProjectAssignment.project_id).where(
            ProjectAssignment.user_id == user.id, ProjectAssignment.status == "active"
        )
    ).scalars().all()
    if not project_ids:
        project_ids = db.execute(select(Project.id).where(Project.status == "active")).scalars().all()
    if not project_ids:
        return {}

    levels = user_levels(user)
    gaps: dict[int, dict] = {}
    reqs = db.execute(select(ProjectSkill).where(ProjectSkill.project_id.in_(project_ids))).scalars().all()
    for ps in reqs:
        current = levels.get(ps.skill_id, 0)
        gap = ps.required_level - current
        if gap <= 0:
            continue
        g = gaps.setdefault(ps.skill_id, {"gap": 0, "is_mandatory": False,
                                          "skill": ps.skill.name if ps.skill else None})
        g["gap"] = max(g["gap"], gap)
        g["is_mandatory"] = g["is_mandatory"] or bool(ps.is_mandatory)
    return gaps


def enrollment_counts(db: Session) -> dict[int, int]:
    rows = db.execute(
        select(CourseEnrollment.course_id, func.count(CourseEnrollment.id)).group_by(CourseEnrollment.course_id)
    ).all()
    return {cid: int(cnt) for cid, cnt in rows}


def recommend_courses(db: Session, user: User, limit: int = 5) -> list[dict]:
    gaps = user_gaps(db, user)
    enrolled = set(db.execute(
        select(CourseEnrollment.course_id).where(CourseEnrollment.user_id == user.id)
    ).scalars())
    courses = [
        c for c in db.execute(
            select(Course).where(Course.is_active.is_(True)).order_by(Course.id)
        ).scalars().all()
        if c.id not in enrolled
    ]
    popularity = enrollment_counts(db)

    skills_by_course: dict[int, list[dict]] = defaultdict(list)
    if courses:
        rows = db.execute(
            select(CourseSkill).where(CourseSkill.course_id.in_([c.id for c in courses]))
        ).scalars().all()
        for cs in rows:
            skills_by_course[cs.course_id].append({
                "skill_id": cs.skill_id,
                "skill": cs.skill.name if cs.skill else None,
                "skill_level": cs.skill_level,
            })

    scored = []
    for c in courses:
        relevance, addressed = course_relevance(skills_by_course[c.id], gaps)
        scored.append({
            "course": c,
            "relevance": relevance,
            "addresses_skills": addressed,
            "enrollment_count": popularity.get(c.id, 0),
        })

    relevant = [s for s in scored if s["relevance"] > 0]
    if relevant:
        relevant.sort(key=lambda s: (-s["relevance"], -s["enrollment_count"], s["course"].id))
        return relevant[:limit]

    # sin gaps cubiertos: los más populares
    scored.sort(key=lambda s: (-s["enrollment_count"], s["course"].id))
    for s in scored:
        s["relevance"] = 0
    return scored[:limit]
