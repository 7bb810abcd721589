from fastapi import APIRouter, Depends
from sqlalchemy import func, select, exists, cast, Boolean
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, get_optional_user, require_staff, require_admin
from companygrow.domain.badges.service import award_badge, BadgeNotFound, BadgeAlreadyOwned
from companygrow.models.badge import Badge
from companygrow.models.course import Course
from companygrow.models.user import User
from companygrow.models.user_badge import UserBadge
from companygrow.schemas.badge import BadgeCreate, BadgeUpdate, BadgeOut, BadgeCatalogItem, AwardIn, UserBadgeOut
from companygrow.schemas.common import ok

router = APIRouter(prefix="/badges", tags=["badges"])


def _catalog_query(me: User | None, total_users: int):
    # Conteo de dueños por insignia
    owners = (
        select(
            UserBadge.badge_id,
            func.count(func.distinct(UserBadge.user_id)).label("owners"),
        )
        .group_by(UserBadge.badge_id)
        .subquery()
    )
    cols = [
        Badge,
        func.coalesce(owners.c.owners, 0).label("earned_count"),
        ((func.coalesce(owners.c.owners, 0) * 100.0) / total_users).label("rarity_pct"),
    ]
    if me is not None:
        # owned: ¿el usuario actual posee esta badge?
        cols.append(cast(
            exists(
                select(UserBadge.id).where(UserBadge.user_id == me.id, UserBadge.badge_id == Badge.id)
            ).correlate(Badge),
            Boolean,
        ).label("owned"))
    return select(*cols).join(owners, owners.c.badge_id == Badge.id, isouter=True)


def _item(row, me: User | None) -> BadgeCatalogItem:
    return BadgeCatalogItem.model_validate(row[0]).model_copy(update={
        "earned_count": int(row[1] or 0),
        "rarity_pct": round(float(row[2] or 0.0), 2),
        "owned": bool(row[3]) if me is not None else None,
    })


def _total_users(db: Session) -> int:
    return db.execute(select(func.count(User.id)).where(User.is_active.is_(True))).scalar_one() or 1


def _check_course(db: Session, course_id: int | None) -> None:
    if course_id is not None and db.get(Course, course_id) is None:
        raise not_found("Course")


@router.get("")
def list_badges(db: Session = Depends(get_db), me: User | None = Depends(get_optional_user)):
    q = _catalog_query(me, _total_users(db)).where(Badge.is_active.is_(True)).order_by(Badge.id)
    return ok([_item(r, me) for r in db.execute(q).all()])


@router.get("/user/{user_id}")
def user_badges(user_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    if db.get(User, user_id) is None:
        raise not_found("User")
    rows = db.execute(
        select(UserBadge).where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_date.desc(), UserBadge.id.desc())
    ).unique().scalars().all()
    return ok([UserBadgeOut.model_validate(ub) for ub in rows])


@router.get("/{badge_id}")
def get_badge(badge_id: int, db: Session = Depends(get_db), me: User | None = Depends(get_optional_user)):
    row = db.execute(_catalog_query(me, _total_users(db)).where(Badge.id == badge_id)).first()
    if row is None:
        raise not_found("Badge")
    return ok(_item(row, me))


@router.post("", status_code=201)
def create_badge(payload: BadgeCreate, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    _check_course(db, payload.course_id)
    badge = Badge(**payload.model_dump())
    db.add(badge)
    db.commit()
    db.refresh(badge)
    return ok(BadgeOut.model_validate(badge), message="Badge created successfully")


@router.put("/{badge_id}")
def update_badge(badge_id: int, payload: BadgeUpdate, db: Session = Depends(get_db),
                 _: User = Depends(require_staff)):
    badge = db.get(Badge, badge_id)
    if badge is None:
        raise not_found("Badge")
    data = payload.model_dump(exclude_unset=True)
    _check_course(db, data.get("course_id"))
    for field, value in data.items():
        if value is None and field in ("name", "description", "token_reward", "is_active"):
            continue
        setattr(badge, field, value)
    db.commit()
    db.refresh(badge)
    return ok(BadgeOut.model_validate(badge), message="Badge updated successfully")


@router.delete("/{badge_id}")
def delete_badge(badge_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    badge = db.get(Badge, badge_id)
    if badge is None:
        raise not_found("Badge")
    db.delete(badge)
    db.commit()
    return ok(message="Badge deleted successfully")


@router.post("/award", status_code=201)
def award(payload: AwardIn, db: Session = Depends(get_db), me: User = Depends(require_staff)):
    if db.get(User, payload.user_id) is None:
        raise not_found("User")
    try:
        ub = award_badge(db, payload.user_id, payload.badge_id, awarded_by=me.id, notes=payload.notes)
    except BadgeNotFound:
        raise not_found("Badge")
    except BadgeAlreadyOwned:
        raise ApiError(409, "User already has this badge", "BADGE_ALREADY_EARNED")
    db.refresh(ub)
    return ok(UserBadgeOut.model_validate(ub), message="Badge awarded successfully")
