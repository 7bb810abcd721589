from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, or_, desc, asc
from sqlalchemy.orm import Session

from companygrow.core.errors import ApiError, not_found
from companygrow.core.pagination import PageParams, paginate
from companygrow.deps import get_db, get_current_user, get_optional_user, require_staff, require_admin
from companygrow.domain.skills.service import recommend_courses, enrollment_counts
from companygrow.models.course import Course
from companygrow.models.course_enrollment import CourseEnrollment, OPEN_STATUSES
from companygrow.models.user import User
from companygrow.schemas.common import ok
from companygrow.schemas.course import (
    CourseCreate, CourseUpdate, CourseListItem, CourseDetail, CourseSkillOut, EnrollmentBrief,
)

router = APIRouter(prefix="/courses", tags=["courses"])

SortKey = Literal["newest", "title", "popular", "price"]


def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise not_found("Course")
    return course


def _count_for(db: Session, course_id: int) -> int:
    return int(db.execute(
        select(func.count(CourseEnrollment.id)).where(CourseEnrollment.course_id == course_id)
    ).scalar_one() or 0)


def _items(courses: list[Course], counts: dict[int, int]) -> list[CourseListItem]:
    return [CourseListItem.model_validate(c).model_copy(update={"enrollment_count": counts.get(c.id, 0)})
            for c in courses]


@router.get("")
def list_courses(
    search: str | None = Query(None, max_length=100),
    category: str | None = None,
    difficulty_level: Literal["beginner", "intermediate", "advanced"] | None = None,
    is_active: bool | None = None,
    sort: SortKey = "newest",
    page: PageParams = Depends(),
    db: Session = Depends(get_db),
    me: User | None = Depends(get_optional_user),
):
    q = select(Course)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(Course.title.ilike(like), Course.description.ilike(like),
                        Course.instructor_name.ilike(like)))
    if category:
        q = q.where(Course.category == category)
    if difficulty_level:
        q = q.where(Course.difficulty_level == difficulty_level)
    # los no-staff solo ven cursos activos salvo que pidan otra cosa explícitamente
    if is_active is None and not (me and me.is_staff):
        is_active = True
    if is_active is not None:
        q = q.where(Course.is_active.is_(is_active))

    if sort == "title":
        q = q.order_by(asc(Course.title), asc(Course.id))
    elif sort == "price":
        q = q.order_by(asc(Course.price), asc(Course.id))
    elif sort == "popular":
        cnt = (
            select(CourseEnrollment.course_id, func.count(CourseEnrollment.id).label("n"))
            .group_by(CourseEnrollment.course_id)
            .subquery()
        )
        q = q.outerjoin(cnt, cnt.c.course_id == Course.id).order_by(
            desc(func.coalesce(cnt.c.n, 0)), asc(Course.id)
        )
    else:
        q = q.order_by(desc(Course.created_at), desc(Course.id))

    items, pagination = paginate(db, q, page)
    return ok(_items(items, enrollment_counts(db)), pagination=pagination)


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    rows = db.execute(
        select(Course.category).where(Course.is_active.is_(True)).distinct().order_by(Course.category)
    ).scalars().all()
    return ok(rows)


@router.get("/popular")
def popular_courses(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db)):
    n = func.count(CourseEnrollment.id).label("n")
    rows = db.execute(
        select(Course, n)
        .outerjoin(CourseEnrollment, CourseEnrollment.course_id == Course.id)
        .where(Course.is_active.is_(True))
        .group_by(Course.id)
        .order_by(desc(n), asc(Course.id))
        .limit(limit)
    ).all()
    return ok([CourseListItem.model_validate(c).model_copy(update={"enrollment_count": int(cnt)})
               for c, cnt in rows])


@router.get("/recent")
def recent_courses(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db)):
    rows = db.execute(
        select(Course).where(Course.is_active.is_(True))
        .order_by(desc(Course.created_at), desc(Course.id)).limit(limit)
    ).scalars().all()
    return ok(_items(rows, enrollment_counts(db)))


@router.get("/recommended")
def recommended_courses(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db),
                        me: User = Depends(get_current_user)):
    recs = recommend_courses(db, me, limit)
    return ok([
        {
            "course": CourseListItem.model_validate(r["course"]).model_copy(
                update={"enrollment_count": r["enrollment_count"]}),
            "relevance": r["relevance"],
            "addresses_skills": r["addresses_skills"],
        }
        for r in recs
    ])


@router.get("/{course_id}")
def get_course(
    course_id: int,
    include_enrollment: bool = False,
    db: Session = Depends(get_db),
    me: User | None = Depends(get_optional_user),
):
    course = get_course_or_404(db, course_id)
    if not course.is_active and not (me and me.is_staff):
        raise not_found("Course")

    enrollment = None
    if include_enrollment and me is not None:
        e = db.execute(
            select(CourseEnrollment).where(
                CourseEnrollment.course_id == course.id, CourseEnrollment.user_id == me.id
            )
        ).unique().scalar_one_or_none()
        enrollment = EnrollmentBrief.model_validate(e) if e else None

    detail = CourseDetail.model_validate(course).model_copy(update={
        "enrollment_count": _count_for(db, course.id),
        "skills": [CourseSkillOut.model_validate(cs) for cs in course.skills],
        "enrollment": enrollment,
    })
    return ok(detail)


@router.post("", status_code=201)
def create_course(payload: CourseCreate, db: Session = Depends(get_db), me: User = Depends(require_staff)):
    data = payload.model_dump(exclude_none=True)
    course = Course(**data, created_by=me.id)
    db.add(course)
    db.commit()
    db.refresh(course)
    return ok(CourseListItem.model_validate(course), message="Course created successfully")


@router.put("/{course_id}")
def update_course(course_id: int, payload: CourseUpdate, db: Session = Depends(get_db),
                  _: User = Depends(require_staff)):
    course = get_course_or_404(db, course_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in ("title", "category", "is_active", "price",
                                       "course_materials", "learning_objectives"):
            continue
        setattr(course, field, value)
    db.commit()
    db.refresh(course)
    return ok(CourseListItem.model_validate(course).model_copy(
        update={"enrollment_count": _count_for(db, course.id)}), message="Course updated successfully")


@router.patch("/{course_id}/status")
def toggle_course_status(course_id: int, db: Session = Depends(get_db), _: User = Depends(require_staff)):
    course = get_course_or_404(db, course_id)
    course.is_active = not course.is_active
    db.commit()
    db.refresh(course)
    state = "activated" if course.is_active else "deactivated"
    return ok(CourseListItem.model_validate(course), message=f"Course {state} successfully")


@router.delete("/{course_id}")
def delete_course(course_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    course = get_course_or_404(db, course_id)
    open_count = db.execute(
        select(func.count(CourseEnrollment.id)).where(
            CourseEnrollment.course_id == course.id, CourseEnrollment.status.in_(OPEN_STATUSES)
        )
    ).scalar_one()
    if open_count:
        raise ApiError(409, "Cannot delete a course with active enrollments", "COURSE_HAS_ENROLLMENTS")
    db.delete(course)
    db.commit()
    return ok(message="Course deleted successfully")
