from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.sql import func
from companygrow.db import Base

ACHIEVEMENT_TYPES = (
    "points_milestone",
    "course_completion",
    "project_completion",
    "streak",
    "ranking",
    "skill_count",
    "skill_mastery",
    "verified_skills",
    "badge_count",
)


class LeaderboardAchievement(Base):
    __tablename__ = "leaderboard_achievements"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    achievement_type = Column(String(50), nullable=True)
    criteria_value = Column(Integer, nullable=True)
    badge_image = Column(String(500), nullable=True)
    points_reward = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
