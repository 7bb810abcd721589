import math

from fastapi import Query
from sqlalchemy import select, func
from sqlalchemy.orm import Session

MAX_LIMIT = 100


class PageParams:
    """Dependency: ?page=1&limit=10 (limit máx. 100)."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=MAX_LIMIT),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginate(db: Session, stmt, params: PageParams) -> tuple[list, dict]:
    total = int(db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one())
    items = db.execute(stmt.offset(params.offset).limit(params.limit)).unique().scalars().all()
    return items, {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "pages": math.ceil(total / params.limit) if total else 0,
    }
