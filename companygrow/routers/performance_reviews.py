import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, require_staff, require_admin, ensure_self_or_staff
from companygrow.domain.points import rules as points
from companygrow.models.performance_review import PerformanceReview, REVIEW_TRANSITIONS, RATING_FIELDS
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.review import ReviewCreate, ReviewUpdate, ReviewStatusIn, ReviewOut
from companygrow.services.notifications import notify_review_status

log = logging.getLogger("reviews")

router = APIRouter(prefix="/performanceReviews", tags=["performance-reviews"])

EDITABLE_STATUSES = ("draft", "submitted")


def _get_or_404(db: Session, review_id: int) -> PerformanceReview:
    r = db.get(PerformanceReview, review_id)
    if r is None:
        raise ApiError(404, "Performance review not found", "REVIEW_NOT_FOUND")
    return r


def _ordered(q):
    return q.order_by(PerformanceReview.created_at.desc(), PerformanceReview.id.desc())


def _naive(dt):
    return dt.replace(tzinfo=None) if dt.tzinfo else dt


@router.get("")
def list_reviews(
    employee_id: int | None = None,
    status: str | None = None,
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
):
    q = _ordered(select(PerformanceReview))
    if employee_id is not None:
        q = q.where(PerformanceReview.employee_id == employee_id)
    if status:
        q = q.where(PerformanceReview.status == status)
    items, pagination = paginate(db, q, page)
    return ok([ReviewOut.model_validate(r) for r in items], pagination=pagination)


@router.get("/me")
def my_reviews(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    rows = db.execute(
        _ordered(select(PerformanceReview).where(PerformanceReview.employee_id == me.id))
    ).unique().scalars().all()
    return ok([ReviewOut.model_validate(r) for r in rows])


@router.get("/employee/{employee_id}/summary")
def employee_summary(employee_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self_or_staff(me, employee_id, "UNAUTHORIZED_VIEW")
    if db.get(User, employee_id) is None:
        raise not_found("User")

    cols = [func.avg(getattr(PerformanceReview, f)) for f in RATING_FIELDS]
    row = db.execute(
        select(func.count(PerformanceReview.id), *cols).where(
            PerformanceReview.employee_id == employee_id, PerformanceReview.status == "approved"
        )
    ).one()
    averages = {
        f: (round(float(v), 2) if v is not None else None)
        for f, v in zip(RATING_FIELDS, row[1:])
    }
    latest = db.execute(
        _ordered(select(PerformanceReview).where(
            PerformanceReview.employee_id == employee_id, PerformanceReview.status == "approved"
        )).limit(1)
    ).unique().scalar_one_or_none()
    return ok({
        "employee_id": employee_id,
        "approved_reviews": int(row[0] or 0),
        "averages": averages,
        "latest_review": ReviewOut.model_validate(latest) if latest else None,
    })


@router.get("/{review_id}")
def get_review(review_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    r = _get_or_404(db, review_id)
    ensure_self_or_staff(me, r.employee_id, "UNAUTHORIZED_VIEW")
    return ok(ReviewOut.model_validate(r))


@router.post("", status_code=201)
def create_review(payload: ReviewCreate, db: Session = Depends(get_db), me: User = Depends(require_staff)):
    if db.get(User, payload.employee_id) is None:
        raise not_found("Employee")
    if payload.employee_id == me.id:
        raise ApiError(403, "Cannot review yourself", "UNAUTHORIZED_REVIEW")
    r = PerformanceReview(**payload.model_dump(), reviewer_id=me.id, status="draft")
    db.add(r)
    db.commit()
    db.refresh(r)
    return ok(ReviewOut.model_validate(r), message="Performance review created")


@router.put("/{review_id}")
def update_review(review_id: int, payload: ReviewUpdate, db: Session = Depends(get_db),
                  me: User = Depends(get_current_user)):
    r = _get_or_404(db, review_id)
    data = payload.model_dump(exclude_unset=True)

    if me.id == r.employee_id:
        # el evaluado (aunque sea staff) solo comenta
        data = {k: v for k, v in data.items() if k == "employee_comments"}
    elif me.is_staff:
        data.pop("employee_comments", None)
        if data and r.status not in EDITABLE_STATUSES:
            raise ApiError(400, f"Review cannot be edited while {r.status}", "REVIEW_LOCKED")
    else:
        raise ApiError(403, "Access denied", "UNAUTHORIZED_UPDATE")

    if not data:
        raise ApiError(400, "No valid fields to update", "NO_UPDATE_FIELDS")

    start = data.get("review_period_start", r.review_period_start)
    end = data.get("review_period_end", r.review_period_end)
    if start is not None and end is not None and _naive(end) < _naive(start):
        raise ApiError(400, "review_period_end must not precede review_period_start", "INVALID_DATE_RANGE")

    for k, v in data.items():
        setattr(r, k, v)
    db.commit()
    db.refresh(r)
    return ok(ReviewOut.model_validate(r), message="Performance review updated")


@router.put("/{review_id}/status")
def update_status(review_id: int, payload: ReviewStatusIn, db: Session = Depends(get_db),
                  me: User = Depends(require_staff)):
    r = _get_or_404(db, review_id)
    if r.employee_id == me.id:
        raise ApiError(403, "Cannot change the status of your own review", "UNAUTHORIZED_UPDATE")
    if payload.status not in REVIEW_TRANSITIONS.get(r.status, set()):
        raise ApiError(400, f"Cannot change review status from {r.status} to {payload.status}",
                       "INVALID_STATUS_TRANSITION")
    r.status = payload.status
    db.commit()
    db.refresh(r)

    notify_review_status(db, r.employee_id, r.status)
    if r.status == "approved" and r.reviewer_id is not None:
        points.on_peer_review_completed(db, r.reviewer_id, r.employee_id)
    db.refresh(r)
    return ok(ReviewOut.model_validate(r), message=f"Performance review {r.status}")


@router.delete("/{review_id}")
def delete_review(review_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    r = _get_or_404(db, review_id)
    if r.status != "draft":
        raise ApiError(400, "Only draft reviews can be deleted", "REVIEW_NOT_DRAFT")
    db.delete(r)
    db.commit()
    return ok(message="Performance review deleted")
