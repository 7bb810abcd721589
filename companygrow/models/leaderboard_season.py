from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Boolean
from sqlalchemy.sql import func
from companygrow.db import Base


class LeaderboardSeason(Base):
    __tablename__ = "leaderboard_seasons"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    prize_description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
