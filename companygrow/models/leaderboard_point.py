from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from companygrow.db import Base


class LeaderboardPoint(Base):
    """Entrada del libro de puntos (append-only)."""
    __tablename__ = "leaderboard_points"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    points_type = Column(String(50), nullable=False)
    points_earned = Column(Integer, nullable=False)
    source_id = Column(Integer, nullable=True)
    source_type = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True, nullable=False)

    user = relationship("User", lazy="joined")
