import logging
import re

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from companygrow.models.badge import Badge
from companygrow.models.user_badge import UserBadge
from companygrow.domain.points import rules as points
from companygrow.domain.tokens.service import earn_tokens
from companygrow.services.notifications import notify_badge_earned

log = logging.getLogger("badges")


class BadgeNotFound(Exception): ...
class BadgeAlreadyOwned(Exception): ...

# criterio soportado para badges de curso: "score>=90"
SCORE_CRITERIA = re.compile(r"^\s*score\s*>=\s*(\d+)\s*$", re.IGNORECASE)


def min_score(criteria: str | None) -> int | None:
    if not criteria:
        return None
    m = SCORE_CRITERIA.match(criteria)
    return int(m.group(1)) if m else None


def meets_criteria(badge: Badge, final_score: int | None) -> bool:
    threshold = min_score(badge.criteria)
    if threshold is None:
        return True
    return final_score is not None and final_score >= threshold


def owns_badge(db: Session, user_id: int, badge_id: int) -> bool:
    return db.execute(
        select(UserBadge.id).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge_id)
    ).scalar_one_or_none() is not None


def award_badge(db: Session, user_id: int, badge_id: int, *, awarded_by: int | None = None,
                notes: str | None = None) -> UserBadge:
    """
    Otorga un badge y dispara sus efectos: tokens (token_reward), puntos y notificación.
    Los efectos secundarios se registran en log si fallan; el badge queda otorgado igual.
    """
    badge = db.get(Badge, badge_id)
    if not badge:
        raise BadgeNotFound(badge_id)
    if owns_badge(db, user_id, badge_id):
        raise BadgeAlreadyOwned()

    ub = UserBadge(user_id=user_id, badge_id=badge.id, awarded_by=awarded_by, notes=notes)
    db.add(ub)
    db.commit()
    db.refresh(ub)

    reward = int(badge.token_reward or 0)
    if reward > 0:
        try:
            earn_tokens(db, user_id, reward, "badge", badge.id, f'earning the "{badge.name}" badge')
        except Exception as e:
            db.rollback()
            log.warning("could not credit badge tokens to user %s: %s", user_id, e)

    points.on_badge_earned(db, user_id, badge.id, badge.name)
    notify_badge_earned(db, user_id, badge.name, reward)
    return ub


def course_completion_badges(db: Session, course_id: int) -> list[Badge]:
    return db.execute(
        select(Badge)
        .where(
            Badge.is_active.is_(True),
            Badge.badge_type == "course_completion",
            or_(Badge.course_id == course_id, Badge.course_id.is_(None)),
        )
        .order_by(Badge.id)
    ).scalars().all()


def on_course_completed(db: Session, user_id: int, course_id: int, final_score: int | None) -> list[Badge]:
    """Devuelve los badges recién otorgados. Idempotente."""
    awarded: list[Badge] = []
    for badge in course_completion_badges(db, course_id):
        if not meets_criteria(badge, final_score):
            continue
        try:
            award_badge(db, user_id, badge.id, notes=f"Completed course #{course_id}")
            awarded.append(badge)
        except BadgeAlreadyOwned:
            pass
        except BadgeNotFound:
            pass
    return awarded


def earned_counts(db: Session) -> dict[int, int]:
    rows = db.execute(
        select(UserBadge.badge_id, func.count(UserBadge.id)).group_by(UserBadge.badge_id)
    ).all()
    return {bid: int(cnt) for bid, cnt in rows}
