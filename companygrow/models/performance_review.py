from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from companygrow.db import Base

REVIEW_STATUSES = ("draft", "submitted", "approved")
REVIEW_TRANSITIONS = {
    "draft": {"submitted"},
    "submitted": {"approved", "draft"},
    "approved": set(),
}
RATING_FIELDS = (
    "overall_rating",
    "technical_skills_rating",
    "communication_rating",
    "teamwork_rating",
    "leadership_rating",
)


class PerformanceReview(Base):
    __tablename__ = "performance_reviews"

    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    review_period_start = Column(DateTime(timezone=True), nullable=True)
    review_period_end = Column(DateTime(timezone=True), nullable=True)
    overall_rating = Column(Integer, nullable=True)           # 1..5
    technical_skills_rating = Column(Integer, nullable=True)
    communication_rating = Column(Integer, nullable=True)
    teamwork_rating = Column(Integer, nullable=True)
    leadership_rating = Column(Integer, nullable=True)
    achievements = Column(Text, nullable=True)
    areas_for_improvement = Column(Text, nullable=True)
    goals_next_period = Column(Text, nullable=True)
    reviewer_comments = Column(Text, nullable=True)
    employee_comments = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="draft")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    employee = relationship("User", foreign_keys=[employee_id], lazy="joined")
    reviewer = relationship("User", foreign_keys=[reviewer_id], lazy="joined")
