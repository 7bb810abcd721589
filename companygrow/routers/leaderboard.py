from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, require_staff, require_admin, ensure_self_or_staff
from companygrow.domain.leaderboard import service as lb
from companygrow.models.leaderboard_achievement import LeaderboardAchievement
from companygrow.models.leaderboard_season import LeaderboardSeason
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.leaderboard import (
    AwardPointsIn, SeasonCreate, SeasonOut, AchievementCreate, AchievementOut, UnlockedAchievementOut,
)

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


def _check_period(period: str) -> str:
    if period not in lb.PERIODS:
        raise ApiError(400, f"Invalid period. Use one of: {', '.join(lb.PERIODS)}", "INVALID_PERIOD", field="period")
    return period


@router.get("")
def leaderboard(
    period: str = "all",
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    rows = lb.get_leaderboard(db, _check_period(period), limit)
    return ok(rows, period=period)


@router.get("/stats")
def stats(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return ok(lb.get_stats(db))


@router.get("/activity")
def activity(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db),
             _: User = Depends(get_current_user)):
    return ok(lb.recent_activity(db, limit))


@router.get("/user/{user_id}")
def user_position(user_id: int, period: str = "all", db: Session = Depends(get_db),
                  me: User = Depends(get_current_user)):
    ensure_self_or_staff(me, user_id, "UNAUTHORIZED_VIEW")
    pos = lb.get_user_position(db, user_id, _check_period(period))
    if pos is None:
        raise ApiError(404, "User not found in leaderboard", "USER_STATS_NOT_FOUND")
    return ok(pos)


@router.get("/user/{user_id}/achievements")
def user_achievements(user_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    if db.get(User, user_id) is None:
        raise not_found("User")
    res = lb.user_achievements(db, user_id)
    unlocked = [
        UnlockedAchievementOut(**AchievementOut.model_validate(a).model_dump(), unlocked_at=at)
        for a, at in res["unlocked"]
    ]
    return ok({
        "unlocked": unlocked,
        "locked": [AchievementOut.model_validate(a) for a in res["locked"]],
        "progress": res["progress"],
    })


@router.get("/department/{department}")
def department_leaderboard(
    department: str,
    period: str = "all",
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    rows = lb.get_leaderboard(db, _check_period(period), limit, department=department)
    return ok(rows, period=period, department=department)


@router.post("/award", status_code=201)
def award(payload: AwardPointsIn, db: Session = Depends(get_db), me: User = Depends(require_staff)):
    if db.get(User, payload.user_id) is None:
        raise not_found("User")
    entry = lb.award_points(
        db, payload.user_id, payload.points_type, payload.points_earned,
        None, "manual", payload.description or f"Awarded by {me.full_name}",
    )
    return ok({
        "id": entry.id,
        "user_id": entry.user_id,
        "points_earned": entry.points_earned,
        "points_type": entry.points_type,
        "description": entry.description,
        "created_at": entry.created_at,
    }, message=f"{payload.points_earned} points awarded")


# --------------------------
# Temporadas
# --------------------------

@router.get("/seasons")
def list_seasons(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    rows = db.execute(
        select(LeaderboardSeason).order_by(LeaderboardSeason.start_date.desc(), LeaderboardSeason.id.desc())
    ).scalars().all()
    return ok([SeasonOut.model_validate(s) for s in rows])


@router.get("/seasons/current")
def current_season(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    today = datetime.now(timezone.utc).date()
    s = db.execute(
        select(LeaderboardSeason)
        .where(
            LeaderboardSeason.is_active.is_(True),
            LeaderboardSeason.start_date <= today,
            LeaderboardSeason.end_date >= today,
        )
        .order_by(LeaderboardSeason.start_date.desc(), LeaderboardSeason.id.desc())
        .limit(1)
    ).scalar_one_or_none()
    if s is None:
        raise ApiError(404, "No active season", "SEASON_NOT_FOUND")
    return ok(SeasonOut.model_validate(s))


@router.post("/seasons", status_code=201)
def create_season(payload: SeasonCreate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    s = LeaderboardSeason(**payload.model_dump())
    db.add(s)
    db.commit()
    db.refresh(s)
    return ok(SeasonOut.model_validate(s), message="Season created")


# --------------------------
# Logros
# --------------------------

@router.get("/achievements")
def list_achievements(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    rows = db.execute(
        select(LeaderboardAchievement)
        .where(LeaderboardAchievement.is_active.is_(True))
        .order_by(LeaderboardAchievement.achievement_type, LeaderboardAchievement.criteria_value,
                  LeaderboardAchievement.id)
    ).scalars().all()
    return ok([AchievementOut.model_validate(a) for a in rows])


@router.post("/achievements", status_code=201)
def create_achievement(payload: AchievementCreate, db: Session = Depends(get_db),
                       _: User = Depends(require_admin)):
    a = LeaderboardAchievement(**payload.model_dump())
    db.add(a)
    db.commit()
    db.refresh(a)
    return ok(AchievementOut.model_validate(a), message="Achievement created")
