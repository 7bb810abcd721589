import os
import tempfile

# configuración de entorno ANTES de importar la app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["DEV_AUTO_CREATE"] = "0"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="companygrow-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from companygrow.db import get_db, enable_sqlite_fks
from companygrow.db.base import Base
from companygrow.main import app
from companygrow.models.user import User
from companygrow.security import create_access_token, get_password_hash

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_fks(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Secret123"


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make(role="employee", department="Engineering", is_active=True, **kw) -> User:
        counter["n"] += 1
        n = counter["n"]
        u = User(
            email=kw.pop("email", f"{role}{n}@companygrow.com"),
            password=get_password_hash(kw.pop("password", PASSWORD)),
            first_name=kw.pop("first_name", role.title()),
            last_name=kw.pop("last_name", f"User{n}"),
            role=role,
            department=department,
            is_active=is_active,
            **kw,
        )
        db.add(u)
        db.commit()
        db.refresh(u)
        return u

    return _make


@pytest.fixture()
def auth():
    def _headers(user: User) -> dict:
        return {"x-auth-token": create_access_token(subject=str(user.id))}
    return _headers


@pytest.fixture()
def employee(make_user):
    return make_user("employee")


@pytest.fixture()
def manager(make_user):
    return make_user("manager")


@pytest.fixture()
def admin(make_user):
    return make_user("admin", department="IT")


@pytest.fixture()
def points_of(db):
    """Lista (points_type, points_earned) del libro de puntos de un usuario."""
    from sqlalchemy import select
    from companygrow.models.leaderboard_point import LeaderboardPoint

    def _points(user_id: int) -> list[tuple[str, int]]:
        db.expire_all()
        rows = db.execute(
            select(LeaderboardPoint.points_type, LeaderboardPoint.points_earned)
            .where(LeaderboardPoint.user_id == user_id)
            .order_by(LeaderboardPoint.id)
        ).all()
        return [tuple(r) for r in rows]

    return _points


@pytest.fixture()
def make_skill(db):
    from companygrow.models.skill import Skill

    def _make(name: str, category: str = "Programming") -> Skill:
        s = Skill(name=name, category=category)
        db.add(s)
        db.commit()
        db.refresh(s)
        return s

    return _make


@pytest.fixture()
def make_course(db):
    from companygrow.models.course import Course

    def _make(title: str = "Python 101", category: str = "Programming", is_active: bool = True,
              **kw) -> Course:
        c = Course(title=title, category=category, is_active=is_active,
                   course_materials=[], learning_objectives=[], **kw)
        db.add(c)
        db.commit()
        db.refresh(c)
        return c

    return _make
