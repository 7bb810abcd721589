from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from companygrow.db import Base


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    achievement_id = Column(Integer, ForeignKey("leaderboard_achievements.id", ondelete="CASCADE"), index=True, nullable=False)
    unlocked_at = Column(DateTime(timezone=True), server_default=func.now())

    achievement = relationship("LeaderboardAchievement", lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),)
