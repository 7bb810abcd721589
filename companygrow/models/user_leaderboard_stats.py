from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from companygrow.db import Base


class UserLeaderboardStats(Base):
    """Resumen derivado de leaderboard_points; se recalcula en cada award."""
    __tablename__ = "user_leaderboard_stats"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    total_points = Column(Integer, nullable=False, default=0)
    monthly_points = Column(Integer, nullable=False, default=0)
    quarterly_points = Column(Integer, nullable=False, default=0)
    courses_completed = Column(Integer, nullable=False, default=0)
    projects_completed = Column(Integer, nullable=False, default=0)
    badges_earned = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)
    current_month = Column(Integer, nullable=True)
    current_quarter = Column(Integer, nullable=True)
    current_year = Column(Integer, nullable=True)
    ranking_position = Column(Integer, nullable=True)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", lazy="joined")
