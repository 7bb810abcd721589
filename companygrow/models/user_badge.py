from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship
from companygrow.db import Base


class UserBadge(Base):
    __tablename__ = "user_badges"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    badge_id = Column(Integer, ForeignKey("badges.id", ondelete="CASCADE"), index=True, nullable=False)
    earned_date = Column(DateTime(timezone=True), server_default=func.now())
    awarded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)

    badge = relationship("Badge", lazy="joined")

    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_badge"),)
