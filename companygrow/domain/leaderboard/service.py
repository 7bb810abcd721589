import logging
from datetime import date, datetime, timezone
from typing import Iterable

from sqlalchemy import select, func, desc, asc
from sqlalchemy.orm import Session

from companygrow.models.user import User
from companygrow.models.user_skill import UserSkill, MAX_PROFICIENCY
from companygrow.models.user_badge import UserBadge
from companygrow.models.course_enrollment import CourseEnrollment
from companygrow.models.project_assignment import ProjectAssignment
from companygrow.models.leaderboard_point import LeaderboardPoint
from companygrow.models.leaderboard_achievement import LeaderboardAchievement
from companygrow.models.user_achievement import UserAchievement
from companygrow.models.user_leaderboard_stats import UserLeaderboardStats

log = logging.getLogger("leaderboard")

PERIODS = ("all", "monthly", "quarterly")
PERIOD_COLUMNS = {
    "all": UserLeaderboardStats.total_points,
    "monthly": UserLeaderboardStats.monthly_points,
    "quarterly": UserLeaderboardStats.quarterly_points,
}

# Ranking global: puntos DESC, luego user_id ASC (desempate estable)
ORDERING = (desc(UserLeaderboardStats.total_points), asc(UserLeaderboardStats.user_id))

# días hacia atrás que se miran para calcular la racha
STREAK_LOOKBACK = 365


class InvalidPeriod(ValueError): ...


def period_column(period: str):
    if period not in PERIOD_COLUMNS:
        raise InvalidPeriod(period)
    return PERIOD_COLUMNS[period]


# --------------------------
# Periodos
# --------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def quarter_of(month: int) -> int:
    return (month - 1) // 3 + 1


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


def quarter_bounds(now: datetime) -> tuple[datetime, datetime]:
    first_month = (quarter_of(now.month) - 1) * 3 + 1
    start = datetime(now.year, first_month, 1, tzinfo=timezone.utc)
    if first_month == 10:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, first_month + 3, 1, tzinfo=timezone.utc)
    return start, end


def _as_utc_date(dt: datetime) -> date:
    # SQLite devuelve datetimes naive (ya en UTC)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


# --------------------------
# Rachas
# --------------------------

def calculate_streak(activity_days: Iterable[date], today: date) -> tuple[int, int]:
    """
    Devuelve (racha_actual, racha_más_larga) a partir de los días con actividad.
    La racha actual solo cuenta si el último día activo es hoy o ayer.
    """
    days = sorted(set(activity_days), reverse=True)
    if not days:
        return 0, 0

    longest = run = 1
    for prev, cur in zip(days, days[1:]):
        run = run + 1 if (prev - cur).days == 1 else 1
        longest = max(longest, run)

    current = 0
    if (today - days[0]).days <= 1:
        current = 1
        for prev, cur in zip(days, days[1:]):
            if (prev - cur).days != 1:
                break
            current += 1

    return current, longest


def _activity_days(db: Session, user_id: int) -> list[date]:
    rows = db.execute(
        select(LeaderboardPoint.created_at)
        .where(LeaderboardPoint.user_id == user_id)
        .order_by(LeaderboardPoint.created_at.desc())
        .limit(STREAK_LOOKBACK)
    ).scalars()
    return [_as_utc_date(dt) for dt in rows if dt is not None]


# --------------------------
# Stats por usuario
# --------------------------

def _sum_points(db: Session, user_id: int, start: datetime | None = None, end: datetime | None = None) -> int:
    q = select(func.coalesce(func.sum(LeaderboardPoint.points_earned), 0)).where(
        LeaderboardPoint.user_id == user_id
    )
    if start is not None:
        q = q.where(LeaderboardPoint.created_at >= start)
    if end is not None:
        q = q.where(LeaderboardPoint.created_at < end)
    return int(db.execute(q).scalar_one() or 0)


def _count(db: Session, column, *where) -> int:
    return int(db.execute(select(func.count(column)).where(*where)).scalar_one() or 0)


def get_or_create_stats(db: Session, user_id: int) -> UserLeaderboardStats:
    stats = db.execute(
        select(UserLeaderboardStats).where(UserLeaderboardStats.user_id == user_id)
    ).scalar_one_or_none()
    if stats is None:
        now = _utcnow()
        stats = UserLeaderboardStats(
            user_id=user_id,
            total_points=0,
            monthly_points=0,
            quarterly_points=0,
            courses_completed=0,
            projects_completed=0,
            badges_earned=0,
            current_streak=0,
            longest_streak=0,
            current_month=now.month,
            current_quarter=quarter_of(now.month),
            current_year=now.year,
        )
        db.add(stats)
        db.flush()
    return stats


def update_user_stats(db: Session, user_id: int, now: datetime | None = None) -> UserLeaderboardStats:
    """Recalcula el resumen del usuario desde el libro de puntos. No hace commit."""
    now = now or _utcnow()
    db.flush()
    stats = get_or_create_stats(db, user_id)

    m_start, m_end = month_bounds(now)
    q_start, q_end = quarter_bounds(now)

    stats.total_points = _sum_points(db, user_id)
    stats.monthly_points = _sum_points(db, user_id, m_start, m_end)
    stats.quarterly_points = _sum_points(db, user_id, q_start, q_end)

    stats.courses_completed = _count(
        db, CourseEnrollment.id,
        CourseEnrollment.user_id == user_id, CourseEnrollment.status == "completed",
    )
    stats.projects_completed = _count(
        db, ProjectAssignment.id,
        ProjectAssignment.user_id == user_id, ProjectAssignment.status == "completed",
    )
    stats.badges_earned = _count(db, UserBadge.id, UserBadge.user_id == user_id)

    current, longest = calculate_streak(_activity_days(db, user_id), now.date())
    stats.current_streak = current
    stats.longest_streak = max(int(stats.longest_streak or 0), longest)

    stats.last_activity_date = now.date()
    stats.current_month = now.month
    stats.current_quarter = quarter_of(now.month)
    stats.current_year = now.year
    db.flush()
    return stats


# --------------------------
# Logros
# --------------------------

def achievement_value(db: Session, stats: UserLeaderboardStats, achievement_type: str | None) -> int | None:
    """Valor actual del usuario para un tipo de logro (None si el tipo no aplica)."""
    user_id = stats.user_id
    if achievement_type == "points_milestone":
        return int(stats.total_points or 0)
    if achievement_type == "course_completion":
        return int(stats.courses_completed or 0)
    if achievement_type == "project_completion":
        return int(stats.projects_completed or 0)
    if achievement_type == "streak":
        return int(stats.current_streak or 0)
    if achievement_type == "ranking":
        return stats.ranking_position
    if achievement_type == "badge_count":
        return int(stats.badges_earned or 0)
    if achievement_type == "skill_count":
        return _count(db, UserSkill.id, UserSkill.user_id == user_id)
    if achievement_type == "skill_mastery":
        return _count(db, UserSkill.id, UserSkill.user_id == user_id,
                      UserSkill.proficiency_level >= MAX_PROFICIENCY)
    if achievement_type == "verified_skills":
        return _count(db, UserSkill.id, UserSkill.user_id == user_id, UserSkill.is_verified.is_(True))
    return None


def qualifies(achievement: LeaderboardAchievement, value: int | None) -> bool:
    if value is None or achievement.criteria_value is None:
        return False
    if achievement.achievement_type == "ranking":
        # posición 1-based: cuanto más bajo mejor
        return 0 < value <= achievement.criteria_value
    return value >= achievement.criteria_value


def check_achievements(db: Session, user_id: int) -> list[LeaderboardAchievement]:
    """Desbloquea logros nuevos; cada uno se otorga una sola vez. No hace commit."""
    stats = db.execute(
        select(UserLeaderboardStats).where(UserLeaderboardStats.user_id == user_id)
    ).scalar_one_or_none()
    if stats is None:
        return []

    owned = set(db.execute(
        select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)
    ).scalars())
    achievements = db.execute(
        select(LeaderboardAchievement)
        .where(LeaderboardAchievement.is_active.is_(True))
        .order_by(LeaderboardAchievement.id)
    ).scalars().all()

    unlocked: list[LeaderboardAchievement] = []
    bonus = False
    for ach in achievements:
        if ach.id in owned:
            continue
        if not qualifies(ach, achievement_value(db, stats, ach.achievement_type)):
            continue
        db.add(UserAchievement(user_id=user_id, achievement_id=ach.id))
        unlocked.append(ach)
        if (ach.points_reward or 0) > 0:
            db.add(LeaderboardPoint(
                user_id=user_id,
                points_type="achievement_bonus",
                points_earned=ach.points_reward,
                source_id=ach.id,
                source_type="achievement",
                description=f"Achievement unlocked: {ach.name}",
            ))
            bonus = True

    if unlocked:
        log.info("user %s unlocked achievements: %s", user_id, [a.name for a in unlocked])
    if bonus:
        update_user_stats(db, user_id)
    db.flush()
    return unlocked


# --------------------------
# Ranking
# --------------------------

def update_rankings(db: Session) -> None:
    db.flush()
    rows = db.execute(select(UserLeaderboardStats).order_by(*ORDERING)).scalars().all()
    for position, stats in enumerate(rows, start=1):
        if stats.ranking_position != position:
            stats.ranking_position = position
    db.flush()


def award_points(
    db: Session,
    user_id: int,
    points_type: str,
    points: int,
    source_id: int | None = None,
    source_type: str | None = None,
    description: str | None = None,
) -> LeaderboardPoint:
    """
    Registra puntos y recalcula stats, logros y ranking en una sola transacción.
    Si algo falla se hace rollback y se propaga.
    """
    try:
        entry = LeaderboardPoint(
            user_id=user_id,
            points_type=points_type,
            points_earned=points,
            source_id=source_id,
            source_type=source_type,
            description=description,
        )
        db.add(entry)
        db.flush()
        update_user_stats(db, user_id)
        check_achievements(db, user_id)
        update_rankings(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)
    return entry


def recompute_all(db: Session) -> int:
    """Crea/recalcula stats para todos los usuarios (script de inicialización)."""
    user_ids = db.execute(select(User.id).order_by(User.id)).scalars().all()
    for uid in user_ids:
        update_user_stats(db, uid)
        check_achievements(db, uid)
    update_rankings(db)
    db.commit()
    return len(user_ids)


# --------------------------
# Consultas
# --------------------------

def user_summary(u: User) -> dict:
    return {
        "id": u.id,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "email": u.email,
        "department": u.department,
        "position": u.position,
        "profile_image": u.profile_image,
    }


def _row(rank: int, stats: UserLeaderboardStats, points: int) -> dict:
    return {
        "rank": rank,
        "user": user_summary(stats.user),
        "points": int(points or 0),
        "total_points": int(stats.total_points or 0),
        "courses_completed": int(stats.courses_completed or 0),
        "projects_completed": int(stats.projects_completed or 0),
        "badges_earned": int(stats.badges_earned or 0),
        "current_streak": int(stats.current_streak or 0),
        "longest_streak": int(stats.longest_streak or 0),
    }


def get_leaderboard(db: Session, period: str = "all", limit: int = 50,
                    department: str | None = None) -> list[dict]:
    col = period_column(period)
    q = (
        select(UserLeaderboardStats)
        .join(User, User.id == UserLeaderboardStats.user_id)
        .where(col > 0)
        .order_by(desc(col), asc(UserLeaderboardStats.user_id))
        .limit(limit)
    )
    if department is not None:
        q = q.where(User.department == department)
    rows = db.execute(q).unique().scalars().all()
    return [_row(i, s, getattr(s, col.key)) for i, s in enumerate(rows, start=1)]


def get_user_position(db: Session, user_id: int, period: str = "all") -> dict | None:
    col = period_column(period)
    stats = db.execute(
        select(UserLeaderboardStats).where(UserLeaderboardStats.user_id == user_id)
    ).unique().scalar_one_or_none()
    if stats is None:
        return None
    points = int(getattr(stats, col.key) or 0)
    ahead = _count(db, UserLeaderboardStats.id, col > points)
    out = _row(ahead + 1, stats, points)
    out["period"] = period
    out["total_participants"] = _count(db, UserLeaderboardStats.id)
    return out


def get_stats(db: Session) -> dict:
    total_users = _count(db, UserLeaderboardStats.id)
    active_users = _count(db, UserLeaderboardStats.id, UserLeaderboardStats.total_points > 0)
    total_awarded = int(db.execute(
        select(func.coalesce(func.sum(LeaderboardPoint.points_earned), 0))
    ).scalar_one() or 0)
    avg_points = db.execute(select(func.avg(UserLeaderboardStats.total_points))).scalar_one()

    top = db.execute(
        select(UserLeaderboardStats).order_by(*ORDERING).limit(1)
    ).unique().scalar_one_or_none()

    unlock_count = func.count(UserAchievement.user_id).label("unlock_count")
    popular = db.execute(
        select(LeaderboardAchievement.name, unlock_count)
        .join(UserAchievement, UserAchievement.achievement_id == LeaderboardAchievement.id)
        .group_by(LeaderboardAchievement.id, LeaderboardAchievement.name)
        .order_by(desc(unlock_count), asc(LeaderboardAchievement.id))
        .limit(5)
    ).all()

    return {
        "overview": {
            "total_users": total_users,
            "active_users": active_users,
            "participation_rate": round(active_users / total_users * 100, 1) if total_users else 0,
            "total_points_awarded": total_awarded,
            "average_points": int(round(float(avg_points))) if avg_points is not None else 0,
        },
        "top_performer": {
            "user_id": top.user_id,
            "name": top.user.full_name,
            "department": top.user.department,
            "points": int(top.total_points or 0),
            "streak": int(top.current_streak or 0),
        } if top is not None else None,
        "popular_achievements": [{"name": name, "unlock_count": int(cnt)} for name, cnt in popular],
    }


def recent_activity(db: Session, limit: int = 20) -> list[dict]:
    rows = db.execute(
        select(LeaderboardPoint)
        .order_by(LeaderboardPoint.created_at.desc(), LeaderboardPoint.id.desc())
        .limit(limit)
    ).unique().scalars().all()
    return [
        {
            "id": p.id,
            "user": user_summary(p.user),
            "points_earned": p.points_earned,
            "points_type": p.points_type,
            "description": p.description,
            "created_at": p.created_at,
        }
        for p in rows
    ]


def user_achievements(db: Session, user_id: int) -> dict:
    unlocked = db.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at.desc(), UserAchievement.id.desc())
    ).unique().scalars().all()
    active = db.execute(
        select(LeaderboardAchievement)
        .where(LeaderboardAchievement.is_active.is_(True))
        .order_by(asc(LeaderboardAchievement.criteria_value), asc(LeaderboardAchievement.id))
    ).scalars().all()

    unlocked_ids = {ua.achievement_id for ua in unlocked}
    locked = [a for a in active if a.id not in unlocked_ids]
    total = len(active)
    return {
        "unlocked": [(ua.achievement, ua.unlocked_at) for ua in unlocked],
        "locked": locked,
        "progress": {
            "unlocked_count": len(unlocked),
            "total_count": total,
            "completion_percentage": round(len(unlocked) / total * 100, 1) if total else 0,
        },
    }
