import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.deps import get_db, get_current_user, require_staff, ensure_self_or_staff
from companygrow.domain.badges import service as badges
from companygrow.domain.points import rules as points
from companygrow.models.course import Course
from companygrow.models.course_enrollment import CourseEnrollment, OPEN_STATUSES
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.course import EnrollmentCreate, EnrollmentOut, ProgressUpdate
from companygrow.schemas.user import UserBrief
from companygrow.services.notifications import notify_course_enrollment, notify_course_completion
from companygrow.services.settings import get_setting_int

log = logging.getLogger("enrollments")

router = APIRouter(prefix="/courseEnrollments", tags=["course-enrollments"])


def _out(e: CourseEnrollment) -> dict:
    data = EnrollmentOut.model_validate(e).model_dump()
    data["user"] = UserBrief.model_validate(e.user).model_dump() if e.user else None
    return data


def get_enrollment_or_404(db: Session, enrollment_id: int) -> CourseEnrollment:
    e = db.get(CourseEnrollment, enrollment_id)
    if e is None:
        raise ApiError(404, "Course enrollment not found", "ENROLLMENT_NOT_FOUND")
    return e


def _user_enrollments(db: Session, user_id: int) -> list[dict]:
    rows = db.execute(
        select(CourseEnrollment)
        .where(CourseEnrollment.user_id == user_id)
        .order_by(CourseEnrollment.created_at.desc(), CourseEnrollment.id.desc())
    ).unique().scalars().all()
    return [_out(e) for e in rows]


def enroll_user(db: Session, user_id: int, course_id: int) -> CourseEnrollment:
    """Alta de inscripción con todas las validaciones; también la usan los pagos."""
    course = db.get(Course, course_id)
    if course is None:
        raise not_found("Course")
    if not course.is_active:
        raise ApiError(400, "Course is not active", "COURSE_INACTIVE")
    if db.get(User, user_id) is None:
        raise not_found("User")

    exists = db.execute(
        select(CourseEnrollment.id).where(
            CourseEnrollment.user_id == user_id, CourseEnrollment.course_id == course_id
        )
    ).scalar_one_or_none()
    if exists:
        raise ApiError(409, "User is already enrolled in this course", "ALREADY_ENROLLED")

    max_open = get_setting_int(db, "MAX_COURSE_ENROLLMENTS")
    if max_open is not None:
        open_count = db.execute(
            select(func.count(CourseEnrollment.id)).where(
                CourseEnrollment.user_id == user_id, CourseEnrollment.status.in_(OPEN_STATUSES)
            )
        ).scalar_one()
        if open_count >= max_open:
            raise ApiError(400, f"Enrollment limit of {max_open} active courses reached",
                           "ENROLLMENT_LIMIT_REACHED")

    e = CourseEnrollment(user_id=user_id, course_id=course_id, status="enrolled", progress_percentage=0)
    db.add(e)
    db.commit()
    db.refresh(e)

    points.on_course_enrolled(db, user_id, course_id)
    notify_course_enrollment(db, user_id, course.title)
    db.refresh(e)
    return e


@router.get("")
def list_enrollments(
    status: str | None = Query(None),
    db: Session = Depends(get_db),
    _: User = Depends(require_staff),
):
    q = select(CourseEnrollment).order_by(CourseEnrollment.created_at.desc(), CourseEnrollment.id.desc())
    if status:
        q = q.where(CourseEnrollment.status == status)
    return ok([_out(e) for e in db.execute(q).unique().scalars().all()])


@router.get("/user/me")
def my_enrollments(db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return ok(_user_enrollments(db, me.id))


@router.get("/user/{user_id}")
def user_enrollments(user_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self_or_staff(me, user_id, "UNAUTHORIZED_VIEW")
    return ok(_user_enrollments(db, user_id))


@router.get("/{enrollment_id}")
def get_enrollment(enrollment_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    e = get_enrollment_or_404(db, enrollment_id)
    ensure_self_or_staff(me, e.user_id, "UNAUTHORIZED_VIEW")
    return ok(_out(e))


@router.post("", status_code=201)
def create_enrollment(payload: EnrollmentCreate, db: Session = Depends(get_db),
                      me: User = Depends(get_current_user)):
    user_id = payload.user_id or me.id
    if user_id != me.id and not me.is_staff:
        raise ApiError(403, "Only managers and admins can enroll other users", "UNAUTHORIZED_ENROLLMENT")
    e = enroll_user(db, user_id, payload.course_id)
    return ok(_out(e), message="Successfully enrolled in course")


@router.put("/{enrollment_id}/progress")
def update_progress(enrollment_id: int, payload: ProgressUpdate, db: Session = Depends(get_db),
                    me: User = Depends(get_current_user)):
    e = get_enrollment_or_404(db, enrollment_id)
    ensure_self_or_staff(me, e.user_id, "UNAUTHORIZED_UPDATE")

    prev_status = e.status
    prev_progress = int(e.progress_percentage or 0)
    first_completion = e.completion_date is None
    now = datetime.now(timezone.utc)

    new_status = payload.status or prev_status
    new_progress = prev_progress if payload.progress_percentage is None else payload.progress_percentage

    if payload.progress_percentage == 100:
        new_status = "completed"
    elif payload.status is None and prev_status == "enrolled" and new_progress > 0:
        new_status = "in_progress"
    elif payload.status is None and prev_status == "completed" and new_progress < 100:
        # bajar el progreso reabre el curso
        new_status = "in_progress"

    if new_status == "completed":
        if payload.progress_percentage is None:
            new_progress = 100
        # completion_date guarda la primera finalización
        if e.completion_date is None:
            e.completion_date = now
    started = prev_status == "enrolled" and new_status in ("in_progress", "completed")
    if started and e.start_date is None:
        e.start_date = now

    e.status = new_status
    e.progress_percentage = new_progress
    if payload.final_score is not None:
        e.final_score = payload.final_score
    db.commit()
    db.refresh(e)

    # puntos contra el estado anterior
    if started:
        points.on_course_started(db, e.user_id, e.course_id)
    points.on_course_progress(db, e.user_id, e.course_id, prev_progress, new_progress)

    awarded = []
    just_completed = new_status == "completed" and prev_status != "completed" and first_completion
    if just_completed:
        points.on_course_completed(db, e.user_id, e.course_id)
        try:
            awarded = badges.on_course_completed(db, e.user_id, e.course_id, e.final_score)
        except Exception as err:
            db.rollback()
            log.warning("course completion badges failed for enrollment %s: %s", e.id, err)
        notify_course_completion(db, e.user_id, e.course.title, [b.name for b in awarded])

    db.refresh(e)
    return ok(
        _out(e),
        message="Course progress updated successfully",
        badges_awarded=[
            {"id": b.id, "name": b.name, "rarity": b.rarity, "token_reward": b.token_reward}
            for b in awarded
        ],
    )


@router.delete("/{enrollment_id}")
def unenroll(enrollment_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    e = get_enrollment_or_404(db, enrollment_id)
    ensure_self_or_staff(me, e.user_id, "UNAUTHORIZED_UNENROLL")
    if e.status == "completed":
        raise ApiError(400, "Cannot unenroll from a completed course", "CANNOT_UNENROLL_COMPLETED")
    db.delete(e)
    db.commit()
    return ok(message="Successfully unenrolled from course")
