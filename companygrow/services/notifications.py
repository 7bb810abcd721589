import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from companygrow.models.notification import Notification

log = logging.getLogger("notifications")


def create_notification(db: Session, user_id: int, title: str, message: str,
                        type: str | None = None, action_url: str | None = None) -> Notification:
    n = Notification(user_id=user_id, title=title, message=message, type=type,
                     action_url=action_url, is_read=False)
    db.add(n)
    db.commit()
    db.refresh(n)
    return n


def create_bulk_notifications(db: Session, user_ids: Iterable[int], title: str, message: str,
                              type: str | None = None, action_url: str | None = None) -> list[Notification]:
    rows = [
        Notification(user_id=uid, title=title, message=message, type=type,
                     action_url=action_url, is_read=False)
        for uid in dict.fromkeys(user_ids)  # sin duplicados, conserva orden
    ]
    db.add_all(rows)
    db.commit()
    for r in rows:
        db.refresh(r)
    return rows


def notify(db: Session, user_id: int, title: str, message: str,
           type: str | None = None, action_url: str | None = None) -> Notification | None:
    """Efecto secundario: nunca rompe la petición principal."""
    try:
        return create_notification(db, user_id, title, message, type, action_url)
    except Exception as e:
        db.rollback()
        log.warning("could not notify user %s: %s", user_id, e)
        return None


def mark_all_read(db: Session, user_id: int) -> int:
    res = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.commit()
    return res.rowcount or 0


def cleanup_old(db: Session, days: int = 30) -> int:
    """Borra notificaciones LEÍDAS más antiguas que `days`."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    res = db.execute(
        delete(Notification).where(Notification.is_read.is_(True), Notification.created_at < cutoff)
    )
    db.commit()
    return res.rowcount or 0


# ---- Disparadores por evento ----

def notify_welcome(db: Session, user_id: int, first_name: str):
    return notify(db, user_id, "Welcome to CompanyGrow!",
                  f"Hi {first_name}, start by adding your skills and enrolling in a course",
                  "system", "/profile")


def notify_course_enrollment(db: Session, user_id: int, course_title: str):
    return notify(db, user_id, "Course Enrollment Successful",
                  f'You have been successfully enrolled in "{course_title}"', "course", "/courses")


def notify_course_completion(db: Session, user_id: int, course_title: str, badges: list[str] | None = None):
    message = f'Congratulations! You have completed "{course_title}"'
    if badges:
        names = ", ".join(f'"{b}"' for b in badges)
        message += f" and earned the {names} badge{'s' if len(badges) > 1 else ''}!"
    return notify(db, user_id, "Course Completed", message, "course", "/profile")


def notify_project_assignment(db: Session, user_id: int, project_name: str, role: str):
    return notify(db, user_id, "New Project Assignment",
                  f'You have been assigned to "{project_name}" as {role}', "project", "/projects")


def notify_skill_verified(db: Session, user_id: int, skill_name: str):
    return notify(db, user_id, "Skill Verified",
                  f'Your "{skill_name}" skill has been verified by your manager', "skill", "/profile")


def notify_badge_earned(db: Session, user_id: int, badge_name: str, token_reward: int):
    return notify(db, user_id, "Badge Earned!",
                  f'Congratulations! You earned the "{badge_name}" badge and {token_reward} tokens',
                  "badge", "/rewards")


REVIEW_MESSAGES = {
    "draft": "Your performance review was returned to draft",
    "submitted": "Your performance review has been submitted for approval",
    "approved": "Your performance review has been approved",
}


def notify_review_status(db: Session, user_id: int, status: str):
    return notify(db, user_id, "Performance Review Update",
                  REVIEW_MESSAGES.get(status, "Your performance review status has been updated"),
                  "review", "/performance")


def notify_token_transaction(db: Session, user_id: int, amount: int, transaction_type: str, reason: str):
    if transaction_type == "earned":
        message = f"You earned {amount} tokens for {reason}"
    else:
        message = f"You spent {amount} tokens on {reason}"
    return notify(db, user_id, "Token Transaction", message, "token", "/rewards")


def notify_payment(db: Session, user_id: int, amount, status: str):
    if status == "succeeded":
        message = f"Your payment of {amount} has been processed successfully"
    else:
        message = f"Your payment of {amount} failed to process"
    return notify(db, user_id, "Payment Update", message, "payment", "/payments")
