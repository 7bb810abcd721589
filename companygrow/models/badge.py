from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from companygrow.db import Base

RARITIES = ("common", "uncommon", "rare", "epic", "legendary")


class Badge(Base):
    __tablename__ = "badges"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    badge_type = Column(String(50), nullable=True)       # course_completion | skill | special ...
    criteria = Column(Text, nullable=True)               # p.ej. "score>=90"
    badge_image = Column(String(500), nullable=True)
    token_reward = Column(Integer, nullable=False, default=0)
    rarity = Column(String(20), nullable=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
