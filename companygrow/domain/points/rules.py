import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.domain.leaderboard.service import award_points
from companygrow.models.leaderboard_point import LeaderboardPoint

log = logging.getLogger("points")

REGISTRATION_BONUS = 50
DAILY_ACTIVITY = 10
COURSE_ENROLLMENT = 25
COURSE_STARTED = 25
COURSE_MILESTONES = (25, 50, 75)   # cada hito otorga su propio valor
COURSE_COMPLETION = 150
PROJECT_ASSIGNMENT = 50
PROJECT_COMPLETION = 200
BADGE_EARNED = 75
SKILL_VERIFIED = 30
SKILL_ADDED_BASE = 20
SKILL_ADDED_PER_LEVEL = 5
SKILL_IMPROVED_PER_LEVEL = 15
SKILL_MASTERY = 100
SKILL_REMOVED = -10
PROFILE_UPDATE = 20
PEER_REVIEW = 40


def safe_award(db: Session, user_id: int, points_type: str, points: int,
               source_id: int | None = None, source_type: str | None = None,
               description: str | None = None) -> bool:
    """award_points que nunca propaga: los puntos son un efecto secundario."""
    try:
        award_points(db, user_id, points_type, points, source_id, source_type, description)
        return True
    except Exception as e:
        log.warning("could not award %s points (%s) to user %s: %s", points, points_type, user_id, e)
        return False


def on_user_registered(db: Session, user_id: int) -> bool:
    return safe_award(db, user_id, "registration_bonus", REGISTRATION_BONUS, None, "registration",
                      "Welcome bonus for joining CompanyGrow!")


def on_daily_activity(db: Session, user_id: int) -> bool:
    """Máximo una vez por día calendario (UTC)."""
    now = datetime.now(timezone.utc)
    day_start = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    already = db.execute(
        select(LeaderboardPoint.id).where(
            LeaderboardPoint.user_id == user_id,
            LeaderboardPoint.points_type == "daily_activity",
            LeaderboardPoint.created_at >= day_start,
            LeaderboardPoint.created_at < day_start + timedelta(days=1),
        ).limit(1)
    ).scalar_one_or_none()
    if already:
        return False
    return safe_award(db, user_id, "daily_activity", DAILY_ACTIVITY, None, "activity", "Daily login activity")


def on_course_enrolled(db: Session, user_id: int, course_id: int) -> bool:
    return safe_award(db, user_id, "course_enrollment", COURSE_ENROLLMENT, course_id, "course",
                      "Enrolled in a new course")


def on_course_started(db: Session, user_id: int, course_id: int) -> bool:
    return safe_award(db, user_id, "course_started", COURSE_STARTED, course_id, "course",
                      "Started learning a course")


def crossed_milestones(old_progress: int, new_progress: int) -> list[int]:
    return [m for m in COURSE_MILESTONES if old_progress < m <= new_progress]


def already_awarded(db: Session, user_id: int, points_type: str, source_id: int | None,
                    points: int | None = None) -> bool:
    q = select(LeaderboardPoint.id).where(
        LeaderboardPoint.user_id == user_id,
        LeaderboardPoint.points_type == points_type,
        LeaderboardPoint.source_id == source_id,
    )
    if points is not None:
        q = q.where(LeaderboardPoint.points_earned == points)
    return db.execute(q.limit(1)).scalar_one_or_none() is not None


def on_course_progress(db: Session, user_id: int, course_id: int, old_progress: int, new_progress: int) -> list[int]:
    """Cada hito se paga una sola vez por curso, aunque el progreso baje y vuelva a subir."""
    awarded = []
    for m in crossed_milestones(old_progress, new_progress):
        if already_awarded(db, user_id, "course_progress", course_id, m):
            continue
        if safe_award(db, user_id, "course_progress", m, course_id, "course",
                      f"Reached {m}% progress in course"):
            awarded.append(m)
    return awarded


def on_course_completed(db: Session, user_id: int, course_id: int) -> bool:
    if already_awarded(db, user_id, "course_completion", course_id):
        return False
    return safe_award(db, user_id, "course_completion", COURSE_COMPLETION, course_id, "course",
                      "Course completed successfully")


def on_project_assigned(db: Session, user_id: int, project_id: int) -> bool:
    return safe_award(db, user_id, "project_assignment", PROJECT_ASSIGNMENT, project_id, "project",
                      "Assigned to a new project")


def on_project_completed(db: Session, user_id: int, project_id: int) -> bool:
    return safe_award(db, user_id, "project_completion", PROJECT_COMPLETION, project_id, "project",
                      "Project completed successfully")


def on_badge_earned(db: Session, user_id: int, badge_id: int, badge_name: str) -> bool:
    return safe_award(db, user_id, "badge_earned", BADGE_EARNED, badge_id, "badge",
                      f"Earned badge: {badge_name}")


def on_skill_verified(db: Session, user_id: int, skill_id: int) -> bool:
    return safe_award(db, user_id, "skill_verified", SKILL_VERIFIED, skill_id, "skill",
                      "Skill verified by manager")


def skill_added_points(level: int) -> int:
    return SKILL_ADDED_BASE + SKILL_ADDED_PER_LEVEL * level


def on_skill_added(db: Session, user_id: int, skill_id: int, level: int) -> bool:
    ok = safe_award(db, user_id, "skill_added", skill_added_points(level), skill_id, "skill",
                    f"Added new skill (Level {level})")
    if level >= 5:
        on_skill_mastery(db, user_id, skill_id)
    return ok


def on_skill_improved(db: Session, user_id: int, skill_id: int, old_level: int, new_level: int) -> bool:
    gained = new_level - old_level
    if gained <= 0:
        return False
    ok = safe_award(db, user_id, "skill_improvement", SKILL_IMPROVED_PER_LEVEL * gained, skill_id, "skill",
                    f"Improved skill by {gained} level{'s' if gained > 1 else ''}")
    if old_level < 5 <= new_level:
        on_skill_mastery(db, user_id, skill_id)
    return ok


def on_skill_mastery(db: Session, user_id: int, skill_id: int) -> bool:
    return safe_award(db, user_id, "skill_mastery", SKILL_MASTERY, skill_id, "skill",
                      "Achieved skill mastery (Level 5)")


def on_skill_removed(db: Session, user_id: int, skill_id: int) -> bool:
    return safe_award(db, user_id, "skill_removed", SKILL_REMOVED, skill_id, "skill",
                      "Skill removed from profile")


def on_profile_updated(db: Session, user_id: int) -> bool:
    return safe_award(db, user_id, "profile_update", PROFILE_UPDATE, user_id, "profile",
                      "Updated profile information")


def on_peer_review_completed(db: Session, reviewer_id: int, employee_id: int) -> bool:
    return safe_award(db, reviewer_id, "peer_review", PEER_REVIEW, employee_id, "review",
                      "Completed a performance review")
