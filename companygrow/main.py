import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from companygrow.core.config import (
    CORS_ORIGINS_LIST, DEV_AUTO_CREATE, ENVIRONMENT, UPLOAD_DIR, ensure_upload_dirs,
)
from companygrow.core.errors import install_exception_handlers
from companygrow.core.logging import configure_logging, add_request_logging
from companygrow.core.rate_limit import limiter
from companygrow.db import engine
from companygrow.db.base import Base

from companygrow.routers import auth as auth_router
from companygrow.routers import users as users_router
from companygrow.routers import skills as skills_router
from companygrow.routers import user_skills as user_skills_router
from companygrow.routers import courses as courses_router
from companygrow.routers import course_enrollments as enrollments_router
from companygrow.routers import course_skills as course_skills_router
from companygrow.routers import projects as projects_router
from companygrow.routers import project_assignments as assignments_router
from companygrow.routers import project_skills as project_skills_router
from companygrow.routers import badges as badges_router
from companygrow.routers import notifications as notifications_router
from companygrow.routers import tokens as tokens_router
from companygrow.routers import payments as payments_router
from companygrow.routers import performance_reviews as reviews_router
from companygrow.routers import leaderboard as leaderboard_router
from companygrow.routers import analytics as analytics_router
from companygrow.routers import app_settings as settings_router

configure_logging()
log = logging.getLogger("companygrow")

app = FastAPI(title="CompanyGrow API")

# ==== Rate limiting / errores / logging ====
app.state.limiter = limiter
install_exception_handlers(app)
add_request_logging(app)

# ==== Uploads ====
ensure_upload_dirs()
app.mount("/uploads", StaticFiles(directory=str(UPLOAD_DIR)), name="uploads")

# ==== CORS ====
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS_LIST,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if DEV_AUTO_CREATE:
    Base.metadata.create_all(bind=engine)

# ==== Routers ====
API_PREFIX = "/api"
for r in (
    auth_router.router,
    users_router.router,
    skills_router.router,
    user_skills_router.router,
    courses_router.router,
    enrollments_router.router,
    course_skills_router.router,
    projects_router.router,
    assignments_router.router,
    project_skills_router.router,
    badges_router.router,
    notifications_router.router,
    tokens_router.router,
    tokens_router.tx_router,
    payments_router.router,
    reviews_router.router,
    leaderboard_router.router,
    analytics_router.router,
    settings_router.router,
):
    app.include_router(r, prefix=API_PREFIX)


@app.get("/api/health")
def health():
    return {
        "success": True,
        "message": "CompanyGrow API is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": ENVIRONMENT,
    }


log.info("CompanyGrow API started (%s)", ENVIRONMENT)
