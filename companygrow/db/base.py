# Importa todos los modelos para que Base.metadata los conozca (create_all / Alembic)
from companygrow.db import Base  # noqa: F401

from companygrow.models.user import User  # noqa: F401
from companygrow.models.skill import Skill  # noqa: F401
from companygrow.models.user_skill import UserSkill  # noqa: F401
from companygrow.models.course import Course  # noqa: F401
from companygrow.models.course_enrollment import CourseEnrollment  # noqa: F401
from companygrow.models.course_skill import CourseSkill  # noqa: F401
from companygrow.models.project import Project  # noqa: F401
from companygrow.models.project_assignment import ProjectAssignment  # noqa: F401
from companygrow.models.project_skill import ProjectSkill  # noqa: F401
from companygrow.models.badge import Badge  # noqa: F401
from companygrow.models.user_badge import UserBadge  # noqa: F401
from companygrow.models.notification import Notification  # noqa: F401
from companygrow.models.payment import Payment  # noqa: F401
from companygrow.models.performance_review import PerformanceReview  # noqa: F401
from companygrow.models.user_token import UserToken  # noqa: F401
from companygrow.models.token_transaction import TokenTransaction  # noqa: F401
from companygrow.models.app_setting import AppSetting  # noqa: F401
from companygrow.models.leaderboard_point import LeaderboardPoint  # noqa: F401
from companygrow.models.leaderboard_season import LeaderboardSeason  # noqa: F401
from companygrow.models.leaderboard_achievement import LeaderboardAchievement  # noqa: F401
from companygrow.models.user_achievement import UserAchievement  # noqa: F401
from companygrow.models.user_leaderboard_stats import UserLeaderboardStats  # noqa: F401
from companygrow.models.password_reset_code import PasswordResetCode  # noqa: F401
