from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, require_staff, require_admin
from companygrow.models.notification import Notification
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.notification import NotificationCreate, NotificationOut
from companygrow.services.notifications import create_bulk_notifications, mark_all_read, cleanup_old

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _own_or_404(db: Session, notification_id: int, me: User) -> Notification:
    n = db.get(Notification, notification_id)
    # una notificación ajena se trata como inexistente
    if n is None or n.user_id != me.id:
        raise ApiError(404, "Notification not found", "NOTIFICATION_NOT_FOUND")
    return n


@router.get("")
def list_notifications(
    unread_only: bool = False,
    type: str | None = None,
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    q = (
        select(Notification)
        .where(Notification.user_id == me.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        q = q.where(Notification.is_read.is_(False))
    if type:
        q = q.where(Notification.type == type)
    items, pagination = paginate(db, q, page)
    return ok([NotificationOut.model_validate(n) for n in items], pagination=pagination)


@router.get("/unread-count")
def unread_count(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    count = db.execute(
        select(func.count(Notification.id)).where(Notification.user_id == me.id, Notification.is_read.is_(False))
    ).scalar_one()
    return ok({"count": int(count or 0)})


@router.put("/read-all")
def read_all(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    updated = mark_all_read(db, me.id)
    return ok({"updated": updated}, message="All notifications marked as read")


@router.delete("/cleanup")
def cleanup(days: int = Query(30, ge=1, le=3650), db: Session = Depends(get_db),
            _: User = Depends(require_admin)):
    deleted = cleanup_old(db, days)
    return ok({"deleted": deleted}, message=f"Deleted read notifications older than {days} days")


@router.get("/{notification_id}")
def get_notification(notification_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return ok(NotificationOut.model_validate(_own_or_404(db, notification_id, me)))


@router.post("", status_code=201)
def create_notifications(payload: NotificationCreate, db: Session = Depends(get_db),
                         _: User = Depends(require_staff)):
    found = set(db.execute(select(User.id).where(User.id.in_(payload.user_ids))).scalars())
    missing = [uid for uid in payload.user_ids if uid not in found]
    if missing:
        raise ApiError(404, f"Users not found: {missing}", "USER_NOT_FOUND", field="user_ids")
    rows = create_bulk_notifications(db, payload.user_ids, payload.title, payload.message,
                                     payload.type, payload.action_url)
    return ok([NotificationOut.model_validate(n) for n in rows],
              message=f"{len(rows)} notification(s) created")


@router.put("/{notification_id}/read")
def mark_read(notification_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    n = _own_or_404(db, notification_id, me)
    n.is_read = True
    db.commit()
    db.refresh(n)
    return ok(NotificationOut.model_validate(n), message="Notification marked as read")


@router.delete("/{notification_id}")
def delete_notification(notification_id: int, db: Session = Depends(get_db),
                        me: User = Depends(get_current_user)):
    n = _own_or_404(db, notification_id, me)
    db.delete(n)
    db.commit()
    return ok(message="Notification deleted")
